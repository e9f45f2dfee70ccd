"""Payload normalization before requests go to the storage API.

Two states of an optional field are kept apart while a payload is built:

- ``UNSET``: the field was never provided. ``omit_unset`` drops it.
- ``None``: the field was explicitly cleared. It is sent as JSON ``null``.

``nullify_optionals`` then turns selected missing keys into explicit nulls so
the storage side always receives a complete document for those keys.
"""

from collections.abc import Iterable, Mapping
from typing import Any


class _Unset:
    """Marker for "not provided". Falsy, and a singleton."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def omit_unset(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``payload`` without the keys whose value is UNSET."""
    return {key: value for key, value in payload.items() if value is not UNSET}


def nullify_optionals(payload: Mapping[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """Copy of ``payload`` where each of ``keys`` that is missing or UNSET is None."""
    out = dict(payload)
    for key in keys:
        if out.get(key, UNSET) is UNSET:
            out[key] = None
    return out


def deep_sanitize(value: Any) -> Any:
    """Recursively drop UNSET dict entries and turn UNSET list items into None."""
    if isinstance(value, Mapping):
        return {k: deep_sanitize(v) for k, v in value.items() if v is not UNSET}
    if isinstance(value, (list, tuple)):
        return [deep_sanitize(v) for v in value]
    return None if value is UNSET else value

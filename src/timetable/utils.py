"""Wall-clock helpers for HH:MM time strings."""

import re

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

_TIME_RE = re.compile(TIME_PATTERN)


def is_valid_time(value: str) -> bool:
    """True for a zero-padded 24h ``HH:MM`` string."""
    return bool(_TIME_RE.match(value))


def to_minutes(value: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def duration_minutes(start_time: str, end_time: str) -> int:
    """Length of a slot in minutes. Overnight ranges are not handled."""
    return to_minutes(end_time) - to_minutes(start_time)


def slot_name(start_time: str, end_time: str) -> str:
    """Display name used for auto-created time slots, e.g. ``"09:00-10:00"``."""
    return f"{start_time}-{end_time}"


def is_overlapping(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Whether two half-open [start, end) ranges overlap."""
    return to_minutes(start1) < to_minutes(end2) and to_minutes(start2) < to_minutes(end1)

"""Storage collaborator contract and an in-memory implementation.

The editor only talks to storage through ``TimetableStore``. Every operation
reports failure through ``ApiResponse.success`` rather than raising.
"""

from collections.abc import Callable, Iterable
from itertools import count
from typing import Any, Protocol

from src.timetable.logging import get_logger
from src.timetable.models import ApiResponse, TimeSlot, TimeSlotCreate, TimetableItem

logger = get_logger(__name__)


class TimetableStore(Protocol):
    """Operations the editor needs from timetable storage."""

    async def get_all_time_slots(self) -> ApiResponse[list[TimeSlot]]: ...

    async def create_time_slot(self, fields: TimeSlotCreate) -> ApiResponse[TimeSlot]: ...

    async def get_timetable_items(
        self, timetable_id: str
    ) -> ApiResponse[list[TimetableItem]]: ...

    async def create_timetable_item(
        self, payload: dict[str, Any]
    ) -> ApiResponse[TimetableItem]: ...

    async def update_timetable_item(
        self, item_id: str, fields: dict[str, Any]
    ) -> ApiResponse[TimetableItem]: ...

    async def delete_timetable_item(self, item_id: str) -> ApiResponse[None]: ...


class InMemoryTimetableStore:
    """TimetableStore kept in process memory.

    Records every call in ``calls`` as ``(operation, argument)`` tuples in the
    order they were made. Used for dry runs and tests.
    """

    def __init__(
        self,
        time_slots: Iterable[TimeSlot] = (),
        items: Iterable[TimetableItem] = (),
    ) -> None:
        self.time_slots: list[TimeSlot] = list(time_slots)
        self.items: dict[str, TimetableItem] = {item.id: item for item in items}
        self.calls: list[tuple[str, Any]] = []
        self._ids = count(1)
        self._failures: dict[str, tuple[str | None, Callable[[Any], bool] | None]] = {}

    def fail_on(
        self,
        operation: str,
        error: str | None = None,
        when: Callable[[Any], bool] | None = None,
    ) -> None:
        """Make ``operation`` report failure.

        Args:
            operation: Method name, e.g. "create_timetable_item".
            error: Error text to report. None reports a failure without text.
            when: Optional predicate on the call argument (payload or id);
                only matching calls fail.
        """
        self._failures[operation] = (error, when)

    def operations(self) -> list[str]:
        """Names of the recorded calls, in order."""
        return [name for name, _ in self.calls]

    def _record(
        self, operation: str, argument: Any = None, key: Any = None
    ) -> ApiResponse[Any] | None:
        self.calls.append((operation, argument))
        if operation in self._failures:
            error, when = self._failures[operation]
            if when is None or when(argument if key is None else key):
                logger.debug("store_failure_injected", operation=operation, error=error)
                return ApiResponse.fail(error)
        return None

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    async def get_all_time_slots(self) -> ApiResponse[list[TimeSlot]]:
        failed = self._record("get_all_time_slots")
        if failed is not None:
            return failed
        return ApiResponse.ok(list(self.time_slots))

    async def create_time_slot(self, fields: TimeSlotCreate) -> ApiResponse[TimeSlot]:
        failed = self._record("create_time_slot", fields)
        if failed is not None:
            return failed
        slot = TimeSlot(id=self._next_id("slot"), **fields.model_dump())
        self.time_slots.append(slot)
        return ApiResponse.ok(slot)

    async def get_timetable_items(
        self, timetable_id: str
    ) -> ApiResponse[list[TimetableItem]]:
        failed = self._record("get_timetable_items", timetable_id)
        if failed is not None:
            return failed
        items = [
            item
            for item in self.items.values()
            if item.timetable_id in (None, timetable_id)
        ]
        return ApiResponse.ok(items)

    async def create_timetable_item(
        self, payload: dict[str, Any]
    ) -> ApiResponse[TimetableItem]:
        failed = self._record("create_timetable_item", payload)
        if failed is not None:
            return failed
        item = TimetableItem.model_validate({**payload, "id": self._next_id("item")})
        self.items[item.id] = item
        return ApiResponse.ok(item)

    async def update_timetable_item(
        self, item_id: str, fields: dict[str, Any]
    ) -> ApiResponse[TimetableItem]:
        failed = self._record(
            "update_timetable_item", (item_id, fields), key=item_id
        )
        if failed is not None:
            return failed
        current = self.items.get(item_id)
        if current is None:
            return ApiResponse.fail(f"Timetable item {item_id} not found")
        item = TimetableItem.model_validate(
            {**current.model_dump(by_alias=True), **fields}
        )
        self.items[item_id] = item
        return ApiResponse.ok(item)

    async def delete_timetable_item(self, item_id: str) -> ApiResponse[None]:
        failed = self._record("delete_timetable_item", item_id)
        if failed is not None:
            return failed
        if self.items.pop(item_id, None) is None:
            return ApiResponse.fail(f"Timetable item {item_id} not found")
        return ApiResponse.ok()

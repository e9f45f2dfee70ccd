"""Time-slot lookup with create-on-miss.

Slots match only on the exact (start_time, end_time) pair; overlapping or
contained ranges are different slots. The cache belongs to one editing
session and only grows through slots this resolver created itself.
"""

from collections.abc import Iterable

from src.timetable.errors import StorageError, TimeSlotResolutionError
from src.timetable.logging import get_logger
from src.timetable.models import TimeSlot, TimeSlotCreate
from src.timetable.store import TimetableStore
from src.timetable.utils import duration_minutes, slot_name

logger = get_logger(__name__)


class TimeSlotResolver:
    """Maps (start_time, end_time) pairs to time-slot ids for one session."""

    def __init__(self, store: TimetableStore, time_slots: Iterable[TimeSlot] = ()) -> None:
        self.store = store
        self._slots: list[TimeSlot] = list(time_slots)
        self.created_count = 0

    @property
    def time_slots(self) -> list[TimeSlot]:
        return list(self._slots)

    async def load(self) -> list[TimeSlot]:
        """Replace the cache with every slot known to storage.

        Raises:
            StorageError: If storage reports failure.
        """
        response = await self.store.get_all_time_slots()
        if not response.success:
            raise StorageError(response.error_message("Failed to load time slots"))
        self._slots = list(response.data or [])
        logger.info("time_slots_loaded", count=len(self._slots))
        return self.time_slots

    def find(self, start_time: str, end_time: str) -> TimeSlot | None:
        for slot in self._slots:
            if slot.start_time == start_time and slot.end_time == end_time:
                return slot
        return None

    async def resolve(self, start_time: str, end_time: str) -> str:
        """Return the id of the slot for this pair, creating it if needed.

        Raises:
            TimeSlotResolutionError: If storage fails to create the slot.
        """
        found = self.find(start_time, end_time)
        if found is not None:
            return found.id

        fields = TimeSlotCreate(
            name=slot_name(start_time, end_time),
            start_time=start_time,
            end_time=end_time,
            duration=duration_minutes(start_time, end_time),
            is_break=False,
            order=len(self._slots) + 1,
        )
        response = await self.store.create_time_slot(fields)
        if not response.success or response.data is None:
            logger.error(
                "time_slot_create_failed",
                start_time=start_time,
                end_time=end_time,
                error=response.error,
            )
            raise TimeSlotResolutionError(
                response.error_message("Failed to create time slot")
            )

        self._slots.append(response.data)
        self.created_count += 1
        logger.info(
            "time_slot_created",
            time_slot_id=response.data.id,
            start_time=start_time,
            end_time=end_time,
            duration=fields.duration,
        )
        return response.data.id

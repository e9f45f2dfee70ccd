"""Build the baseline block list from stored timetable items."""

import re
from collections.abc import Iterable

from src.timetable.errors import StorageError
from src.timetable.logging import get_logger
from src.timetable.models import ScheduleBlock, TimeSlot, TimetableItem
from src.timetable.store import TimetableStore
from src.timetable.utils import is_valid_time, to_minutes

logger = get_logger(__name__)

DEFAULT_START = "09:00"
DEFAULT_END = "10:00"

# "9:00-10:30" written into item notes overrides the slot times
_NOTES_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})-(\d{1,2}):(\d{2})")


def _time_range(start: str, end: str) -> tuple[str, str] | None:
    """Zero-padded (start, end), or None unless both are valid and ordered."""
    start, end = start.strip().zfill(5), end.strip().zfill(5)
    if not (is_valid_time(start) and is_valid_time(end)):
        return None
    if to_minutes(start) >= to_minutes(end):
        return None
    return start, end


def _times_from_notes(notes: str | None) -> tuple[str, str] | None:
    if not notes:
        return None
    match = _NOTES_TIME_RE.search(notes)
    if not match:
        return None
    return _time_range(
        f"{match.group(1)}:{match.group(2)}", f"{match.group(3)}:{match.group(4)}"
    )


def block_from_item(item: TimetableItem, slots_by_id: dict[str, TimeSlot]) -> ScheduleBlock:
    """Editor view of one stored item.

    Times come from the item's slot, or from a time range in its notes. A
    missing or unusable slot falls back to 09:00-10:00.
    """
    slot = slots_by_id.get(item.time_slot_id)
    slot_times = _time_range(slot.start_time, slot.end_time) if slot else None
    start, end = slot_times or (DEFAULT_START, DEFAULT_END)
    from_notes = _times_from_notes(item.notes)
    if from_notes:
        start, end = from_notes
    elif slot is None:
        logger.warning(
            "time_slot_unknown",
            item_id=item.id,
            time_slot_id=item.time_slot_id,
            fallback=f"{start}-{end}",
        )
    elif slot_times is None:
        logger.warning(
            "time_slot_invalid",
            item_id=item.id,
            time_slot_id=item.time_slot_id,
            slot_times=f"{slot.start_time}-{slot.end_time}",
            fallback=f"{start}-{end}",
        )

    return ScheduleBlock(
        id=item.id,
        start_time=start,
        end_time=end,
        day_of_week=item.day_of_week,
        notes=item.notes,
    )


def blocks_from_items(
    items: Iterable[TimetableItem], time_slots: Iterable[TimeSlot]
) -> list[ScheduleBlock]:
    """Convert stored items into schedule blocks, keeping item order."""
    slots_by_id = {slot.id: slot for slot in time_slots}
    return [block_from_item(item, slots_by_id) for item in items]


async def load_baseline(
    store: TimetableStore,
    timetable_id: str,
    time_slots: Iterable[TimeSlot] | None = None,
) -> list[ScheduleBlock]:
    """Fetch a timetable's items and return them as blocks.

    Args:
        store: Storage collaborator.
        timetable_id: Timetable whose items to load.
        time_slots: Known slots. Fetched from storage when omitted.

    Raises:
        StorageError: If storage reports failure for either read.
    """
    if time_slots is None:
        slots_response = await store.get_all_time_slots()
        if not slots_response.success:
            raise StorageError(slots_response.error_message("Failed to load time slots"))
        time_slots = slots_response.data or []

    items_response = await store.get_timetable_items(timetable_id)
    if not items_response.success:
        raise StorageError(
            items_response.error_message(f"Failed to load items of timetable {timetable_id}")
        )

    blocks = blocks_from_items(items_response.data or [], time_slots)
    logger.info("baseline_loaded", timetable_id=timetable_id, blocks=len(blocks))
    return blocks

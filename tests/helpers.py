"""Builders for test blocks, contexts and stores."""

from datetime import date

from src.timetable.models import (
    CreationContext,
    DayOfWeek,
    ScheduleBlock,
    TimeSlot,
    TimetableItem,
)
from src.timetable.store import InMemoryTimetableStore

TIMETABLE_ID = "tt-1"


# ─── Helpers ─────────────────────────────────────────────────────────────────

def make_block(
    block_id: str,
    day: str = "monday",
    start: str = "09:00",
    end: str = "10:00",
    **fields,
) -> ScheduleBlock:
    return ScheduleBlock(
        id=block_id,
        day_of_week=DayOfWeek(day),
        start_time=start,
        end_time=end,
        **fields,
    )


def make_context(class_id: str = "c1", teacher_id: str = "t1", **fields) -> CreationContext:
    return CreationContext(
        class_id=class_id,
        teacher_id=teacher_id,
        start_date=date(2024, 3, 1),
        **fields,
    )


def make_store(blocks: list[ScheduleBlock]) -> InMemoryTimetableStore:
    """Store holding one item per block plus a slot per distinct time pair."""
    slots: dict[tuple[str, str], TimeSlot] = {}
    items = []
    for block in blocks:
        key = (block.start_time, block.end_time)
        if key not in slots:
            slots[key] = TimeSlot(
                id=f"ts-{len(slots) + 1}",
                name=f"{block.start_time}-{block.end_time}",
                start_time=block.start_time,
                end_time=block.end_time,
                duration=60,
                order=len(slots) + 1,
            )
        items.append(
            TimetableItem(
                id=block.id,
                timetable_id=TIMETABLE_ID,
                class_id="c0",
                teacher_id="t0",
                day_of_week=block.day_of_week,
                time_slot_id=slots[key].id,
                start_date=date(2024, 1, 1),
                notes=block.notes,
            )
        )
    return InMemoryTimetableStore(time_slots=list(slots.values()), items=items)



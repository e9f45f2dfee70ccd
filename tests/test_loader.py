"""Tests for building baseline blocks from stored items."""

from datetime import date

import pytest

from src.timetable.editor import TimetableEditor
from src.timetable.errors import StorageError
from src.timetable.loader import blocks_from_items, load_baseline
from src.timetable.models import DayOfWeek, TimeSlot, TimetableItem
from src.timetable.store import InMemoryTimetableStore


def _item(item_id: str, slot_id: str = "ts-1", notes: str | None = None) -> TimetableItem:
    return TimetableItem(
        id=item_id,
        timetable_id="tt-1",
        class_id="c1",
        teacher_id="t1",
        day_of_week=DayOfWeek.WEDNESDAY,
        time_slot_id=slot_id,
        start_date=date(2024, 3, 1),
        notes=notes,
    )


SLOTS = [TimeSlot(id="ts-1", start_time="13:00", end_time="14:30", duration=90)]


class TestBlocksFromItems:

    def test_times_from_slot(self):
        [block] = blocks_from_items([_item("i1")], SLOTS)
        assert block.id == "i1"
        assert (block.start_time, block.end_time) == ("13:00", "14:30")
        assert block.day_of_week is DayOfWeek.WEDNESDAY

    def test_unknown_slot_falls_back(self):
        [block] = blocks_from_items([_item("i1", slot_id="gone")], SLOTS)
        assert (block.start_time, block.end_time) == ("09:00", "10:00")

    def test_notes_time_overrides_slot(self):
        [block] = blocks_from_items([_item("i1", notes="moved to 8:30-9:15")], SLOTS)
        assert (block.start_time, block.end_time) == ("08:30", "09:15")
        assert block.notes == "moved to 8:30-9:15"

    def test_invalid_notes_time_ignored(self):
        [block] = blocks_from_items([_item("i1", notes="25:00-26:00")], SLOTS)
        assert block.start_time == "13:00"

    def test_keeps_item_order(self):
        blocks = blocks_from_items([_item("i2"), _item("i1")], SLOTS)
        assert [b.id for b in blocks] == ["i2", "i1"]

    def test_unpadded_slot_times_are_padded(self):
        slots = [TimeSlot(id="ts-1", start_time="9:00", end_time="10:00", duration=60)]
        [block] = blocks_from_items([_item("i1")], slots)
        assert (block.start_time, block.end_time) == ("09:00", "10:00")

    @pytest.mark.parametrize("start,end", [("14:00", "13:00"), ("25:00", "26:00"), ("noon", "13:00")])
    def test_unusable_slot_falls_back(self, start, end):
        slots = [TimeSlot(id="ts-1", start_time=start, end_time=end, duration=60)]
        [block] = blocks_from_items([_item("i1")], slots)
        assert (block.start_time, block.end_time) == ("09:00", "10:00")


class TestLoadBaseline:

    async def test_fetches_slots_when_not_given(self):
        store = InMemoryTimetableStore(time_slots=SLOTS, items=[_item("i1")])

        blocks = await load_baseline(store, "tt-1")

        assert store.operations() == ["get_all_time_slots", "get_timetable_items"]
        assert blocks[0].start_time == "13:00"

    async def test_uses_given_slots(self):
        store = InMemoryTimetableStore(items=[_item("i1")])

        blocks = await load_baseline(store, "tt-1", SLOTS)

        assert store.operations() == ["get_timetable_items"]
        assert blocks[0].end_time == "14:30"

    async def test_failure_raises(self):
        store = InMemoryTimetableStore()
        store.fail_on("get_timetable_items")

        with pytest.raises(StorageError, match="tt-9"):
            await load_baseline(store, "tt-9", SLOTS)

    async def test_editor_opens_with_unpadded_slot(self):
        slots = [TimeSlot(id="ts-1", start_time="9:00", end_time="10:00", duration=60)]
        store = InMemoryTimetableStore(time_slots=slots, items=[_item("i1")])

        editor = await TimetableEditor.open(store, "tt-1")

        assert editor.get_block("i1").start_time == "09:00"
        assert not editor.has_changes()

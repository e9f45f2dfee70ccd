"""Tests for time-slot resolution."""

import pytest

from src.timetable.errors import StorageError, TimeSlotResolutionError
from src.timetable.models import TimeSlot
from src.timetable.store import InMemoryTimetableStore
from src.timetable.time_slots import TimeSlotResolver


@pytest.fixture
def nine_to_ten() -> TimeSlot:
    return TimeSlot(id="ts-9", name="1st", start_time="09:00", end_time="10:00", duration=60, order=1)


class TestResolve:

    async def test_reuses_existing_slot(self, nine_to_ten):
        store = InMemoryTimetableStore(time_slots=[nine_to_ten])
        resolver = TimeSlotResolver(store, [nine_to_ten])

        assert await resolver.resolve("09:00", "10:00") == "ts-9"
        assert store.calls == []

    async def test_creates_missing_slot(self):
        store = InMemoryTimetableStore()
        resolver = TimeSlotResolver(store)

        slot_id = await resolver.resolve("14:00", "15:30")

        assert store.operations() == ["create_time_slot"]
        fields = store.calls[0][1]
        assert fields.duration == 90
        assert fields.name == "14:00-15:30"
        assert fields.is_break is False
        assert fields.order == 1
        assert resolver.find("14:00", "15:30").id == slot_id

    async def test_created_slot_is_cached(self):
        store = InMemoryTimetableStore()
        resolver = TimeSlotResolver(store)

        first = await resolver.resolve("14:00", "15:30")
        second = await resolver.resolve("14:00", "15:30")

        assert first == second
        assert store.operations() == ["create_time_slot"]
        assert resolver.created_count == 1

    async def test_exact_match_only(self, nine_to_ten):
        store = InMemoryTimetableStore(time_slots=[nine_to_ten])
        resolver = TimeSlotResolver(store, [nine_to_ten])

        slot_id = await resolver.resolve("09:00", "09:45")

        assert slot_id != "ts-9"
        assert store.operations() == ["create_time_slot"]

    async def test_order_follows_cache_size(self, nine_to_ten):
        store = InMemoryTimetableStore()
        resolver = TimeSlotResolver(store, [nine_to_ten])

        await resolver.resolve("11:00", "12:00")

        assert store.calls[0][1].order == 2

    async def test_failure_carries_store_message(self):
        store = InMemoryTimetableStore()
        store.fail_on("create_time_slot", "quota exceeded")
        resolver = TimeSlotResolver(store)

        with pytest.raises(TimeSlotResolutionError, match="quota exceeded"):
            await resolver.resolve("14:00", "15:00")
        assert resolver.time_slots == []

    async def test_failure_without_message_uses_fallback(self):
        store = InMemoryTimetableStore()
        store.fail_on("create_time_slot")
        resolver = TimeSlotResolver(store)

        with pytest.raises(TimeSlotResolutionError, match="Failed to create time slot"):
            await resolver.resolve("14:00", "15:00")


class TestLoad:

    async def test_load_replaces_cache(self, nine_to_ten):
        store = InMemoryTimetableStore(time_slots=[nine_to_ten])
        resolver = TimeSlotResolver(store)

        slots = await resolver.load()

        assert [s.id for s in slots] == ["ts-9"]

    async def test_load_failure_raises(self):
        store = InMemoryTimetableStore()
        store.fail_on("get_all_time_slots", "unavailable")

        with pytest.raises(StorageError, match="unavailable"):
            await TimeSlotResolver(store).load()

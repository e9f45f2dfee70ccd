"""Shared fixtures for the timetable editor tests."""

import pytest

from src.timetable.models import ScheduleBlock
from src.timetable.store import InMemoryTimetableStore
from tests.helpers import make_block, make_store


@pytest.fixture
def baseline() -> list[ScheduleBlock]:
    return [
        make_block("a", "monday", "09:00", "10:00"),
        make_block("b", "tuesday", "10:00", "11:00", notes="lab"),
        make_block("c", "wednesday", "13:00", "14:00"),
    ]


@pytest.fixture
def store(baseline) -> InMemoryTimetableStore:
    return make_store(baseline)

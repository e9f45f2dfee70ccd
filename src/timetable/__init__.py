"""Timetable editor core.

Reconciles a user-edited draft of schedule blocks with what is stored and
applies the difference through the timetable storage API.
"""

from src.timetable.conflicts import BlockConflict, find_conflicts
from src.timetable.diff import TimetableDiff, compute_diff, format_diff_summary
from src.timetable.editor import SaveReport, TimetableEditor
from src.timetable.models import (
    CreationContext,
    DayOfWeek,
    ScheduleBlock,
    TimeSlot,
    TimetableItem,
)
from src.timetable.store import InMemoryTimetableStore, TimetableStore

__all__ = [
    "TimetableEditor",
    "SaveReport",
    "TimetableDiff",
    "compute_diff",
    "format_diff_summary",
    "BlockConflict",
    "find_conflicts",
    "CreationContext",
    "DayOfWeek",
    "ScheduleBlock",
    "TimeSlot",
    "TimetableItem",
    "TimetableStore",
    "InMemoryTimetableStore",
]

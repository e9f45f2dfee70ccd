"""Same-day overlap detection between schedule blocks."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from src.timetable.models import DayOfWeek, ScheduleBlock
from src.timetable.utils import is_overlapping


@dataclass(frozen=True)
class BlockConflict:
    """Two blocks on the same day whose times overlap."""

    day_of_week: DayOfWeek
    first: ScheduleBlock
    second: ScheduleBlock

    @property
    def message(self) -> str:
        return (
            f"{self.day_of_week.value}: [{self.first.id}] "
            f"{self.first.start_time}-{self.first.end_time} overlaps "
            f"[{self.second.id}] {self.second.start_time}-{self.second.end_time}"
        )


def find_conflicts(blocks: Iterable[ScheduleBlock]) -> list[BlockConflict]:
    """Every overlapping pair of blocks, grouped by day.

    Blocks that merely touch (one ends when the next starts) do not conflict.
    Pairs come out ordered by day, then by start time.
    """
    by_day: dict[DayOfWeek, list[ScheduleBlock]] = defaultdict(list)
    for block in blocks:
        by_day[block.day_of_week].append(block)

    conflicts = []
    for day in DayOfWeek:
        day_blocks = sorted(by_day.get(day, []), key=lambda b: (b.start_time, b.end_time, b.id))
        for i, first in enumerate(day_blocks):
            for second in day_blocks[i + 1:]:
                if second.start_time >= first.end_time:
                    break
                if is_overlapping(
                    first.start_time, first.end_time, second.start_time, second.end_time
                ):
                    conflicts.append(BlockConflict(day, first, second))
    return conflicts

"""
Diff engine for timetable editing sessions.

Compares the draft block list against the baseline snapshot taken when the
session started and sorts blocks into create / update / delete sets.

Identity key: block id. Change detection: canonical JSON of the whole block.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass, field

from src.timetable.models import ScheduleBlock


def canonical_json(block: ScheduleBlock) -> str:
    """Order-independent serialization of every field of a block."""
    return json.dumps(
        block.model_dump(mode="json", by_alias=True),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )


def canonical_set(blocks: Iterable[ScheduleBlock]) -> str:
    """Serialization of a block list sorted by id, for cheap equality checks."""
    ordered = sorted(blocks, key=lambda b: b.id)
    return "[" + ",".join(canonical_json(b) for b in ordered) + "]"


@dataclass
class TimetableDiff:
    """Create / update / delete sets between a baseline and a draft."""

    to_create: list[ScheduleBlock] = field(default_factory=list)
    to_update: list[ScheduleBlock] = field(default_factory=list)
    to_delete: list[ScheduleBlock] = field(default_factory=list)
    unchanged_count: int = 0

    def is_empty(self) -> bool:
        return not self.to_create and not self.to_update and not self.to_delete

    def to_dict(self) -> dict:
        return {
            "to_create": [b.to_wire() for b in self.to_create],
            "to_update": [b.to_wire() for b in self.to_update],
            "to_delete": [b.to_wire() for b in self.to_delete],
            "unchanged_count": self.unchanged_count,
        }


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------
def compute_diff(
    baseline: Iterable[ScheduleBlock],
    draft: Iterable[ScheduleBlock],
) -> TimetableDiff:
    """Compare a draft against its baseline.

    Args:
        baseline: Blocks as they were in storage when the session started.
        draft: Blocks as the user left them.

    Returns:
        TimetableDiff whose three lists are disjoint by id. Creates and
        updates keep draft order; deletes keep baseline order.
    """
    # Later duplicates of an id win, like building a Map from a list
    baseline_by_id = {b.id: b for b in baseline}
    draft_by_id = {b.id: b for b in draft}

    diff = TimetableDiff()

    for block_id, block in draft_by_id.items():
        old = baseline_by_id.get(block_id)
        if old is None:
            diff.to_create.append(block)
        elif canonical_json(old) != canonical_json(block):
            diff.to_update.append(block)
        else:
            diff.unchanged_count += 1

    for block_id, block in baseline_by_id.items():
        if block_id not in draft_by_id:
            diff.to_delete.append(block)

    return diff


# ---------------------------------------------------------------------------
# Diff summary formatting
# ---------------------------------------------------------------------------
def format_diff_summary(diff: TimetableDiff, limit: int = 10) -> str:
    """Format a diff for human-readable display."""
    lines = [
        f"  Create: {len(diff.to_create)}  |  "
        f"Update: {len(diff.to_update)}  |  "
        f"Delete: {len(diff.to_delete)}  |  "
        f"Unchanged: {diff.unchanged_count}"
    ]

    for title, marker, blocks in (
        ("New:", "+", diff.to_create),
        ("Changed:", "~", diff.to_update),
        ("Removed:", "-", diff.to_delete),
    ):
        if not blocks:
            continue
        lines.append(f"  {title}")
        for block in blocks[:limit]:
            name = f" {block.title}" if block.title else ""
            lines.append(f"    {marker} [{block.id}] {block.label}{name}")
        if len(blocks) > limit:
            lines.append(f"    ... and {len(blocks) - limit} more")

    return "\n".join(lines)

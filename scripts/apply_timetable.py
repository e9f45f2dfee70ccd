"""
Apply an edited timetable draft to the timetable storage API.

Reads a draft JSON file (blocks + creation contexts), diffs it against the
items currently stored for the timetable and applies creates, updates and
deletes in that order.

Usage:
    python scripts/apply_timetable.py draft.json --timetable-id TT1            # dry-run (default)
    python scripts/apply_timetable.py draft.json --timetable-id TT1 --execute  # write to the API
    python scripts/apply_timetable.py draft.json --timetable-id TT1 --baseline stored.json

Draft file:
    {
      "blocks": [{"id": "a", "dayOfWeek": "monday", "startTime": "09:00", "endTime": "10:00"}],
      "contexts": {"b": {"classId": "c1", "teacherId": "t1", "startDate": "2024-03-01"}}
    }

Baseline file (offline dry runs): {"timeSlots": [...], "items": [...]}

Exit codes:
  0 = success
  1 = error (message on stderr)
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.timetable.client import TimetableApiClient  # noqa: E402
from src.timetable.config import get_config  # noqa: E402
from src.timetable.conflicts import find_conflicts  # noqa: E402
from src.timetable.diff import format_diff_summary  # noqa: E402
from src.timetable.editor import TimetableEditor  # noqa: E402
from src.timetable.errors import StorageError, TimetableError  # noqa: E402
from src.timetable.loader import blocks_from_items  # noqa: E402
from src.timetable.logging import get_logger, setup_logging  # noqa: E402
from src.timetable.models import (  # noqa: E402
    CreationContext,
    ScheduleBlock,
    TimeSlot,
    TimetableItem,
)
from src.timetable.store import InMemoryTimetableStore, TimetableStore  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parent.parent
REPORTS_DIR = PROJECT_ROOT / "reports"

logger = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Apply a timetable draft to the storage API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("draft", type=Path, help="Draft JSON file")
    parser.add_argument(
        "--timetable-id", required=True,
        help="Timetable whose stored items form the baseline",
    )
    parser.add_argument(
        "--execute", action="store_true",
        help="Write changes to the API (default is a dry run)",
    )
    parser.add_argument(
        "--baseline", type=Path, default=None,
        help="Read stored time slots/items from this JSON file instead of the API",
    )
    parser.add_argument(
        "--report-dir", type=Path, default=REPORTS_DIR,
        help="Where --execute writes its JSON report",
    )
    return parser.parse_args(argv)


def load_draft(path: Path) -> tuple[list[ScheduleBlock], dict[str, CreationContext]]:
    """Parse blocks and contexts from a draft file."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    blocks = [ScheduleBlock.model_validate(b) for b in raw.get("blocks", [])]
    contexts = {
        block_id: CreationContext.model_validate(ctx)
        for block_id, ctx in raw.get("contexts", {}).items()
    }
    return blocks, contexts


def load_baseline_file(path: Path) -> InMemoryTimetableStore:
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    return InMemoryTimetableStore(
        time_slots=[TimeSlot.model_validate(s) for s in raw.get("timeSlots", [])],
        items=[TimetableItem.model_validate(i) for i in raw.get("items", [])],
    )


async def fetch_stored(
    source: TimetableStore, timetable_id: str
) -> tuple[list[TimeSlot], list[TimetableItem]]:
    slots = await source.get_all_time_slots()
    if not slots.success:
        raise StorageError(slots.error_message("Failed to load time slots"))
    items = await source.get_timetable_items(timetable_id)
    if not items.success:
        raise StorageError(items.error_message("Failed to load timetable items"))
    return list(slots.data or []), list(items.data or [])


def write_report(report_dir: Path, payload: dict) -> Path:
    report_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    path = report_dir / f"timetable_apply_{ts}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    return path


async def run(args: argparse.Namespace) -> int:
    mode = "execute" if args.execute else "dry-run"
    print("=" * 60)
    print(f"TIMETABLE APPLY [{mode.upper()}] {args.timetable_id}")
    print("=" * 60)

    blocks, contexts = load_draft(args.draft)

    client = None
    if args.baseline is not None:
        source: TimetableStore = load_baseline_file(args.baseline)
    else:
        client = TimetableApiClient()
        source = client

    try:
        slots, items = await fetch_stored(source, args.timetable_id)
        print(f"Stored: {len(items)} items, {len(slots)} time slots")

        if args.execute:
            target = source
        else:
            target = InMemoryTimetableStore(time_slots=slots, items=items)

        editor = TimetableEditor(
            target, args.timetable_id, blocks_from_items(items, slots), slots
        )
        for block in editor.draft:
            editor.delete_block(block.id)
        for block in blocks:
            editor.add_block(block)
        for block_id, context in contexts.items():
            editor.set_create_context(block_id, context)

        diff = editor.build_diff()
        print(format_diff_summary(diff))

        conflicts = find_conflicts(editor.draft)
        if conflicts:
            print(f"\nWarning: {len(conflicts)} overlapping blocks")
            for conflict in conflicts:
                print(f"  ! {conflict.message}")

        if not editor.has_changes():
            print("\nNo changes.")
            return 0

        report = await editor.save_changes()
    finally:
        if client is not None:
            client.close()

    if not args.execute:
        print("\n--- DRY RUN -- calls that would be made ---")
        for operation, argument in target.calls:
            if operation.startswith("get_"):
                continue
            print(f"  {operation}: {argument}")
        print("\nRun with --execute to apply.")
        return 0

    path = write_report(args.report_dir, {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "timetable_id": args.timetable_id,
        "diff": diff.to_dict(),
        "summary": {
            "created": report.created,
            "updated": report.updated,
            "deleted": report.deleted,
            "time_slots_created": report.time_slots_created,
        },
        "created_ids": report.created_ids,
    })
    print(f"\nCreated: {report.created}  Updated: {report.updated}  Deleted: {report.deleted}")
    print(f"Report: {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)
    try:
        return asyncio.run(run(args))
    except (TimetableError, ValueError, OSError) as e:
        logger.error("apply_failed", error=str(e), type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

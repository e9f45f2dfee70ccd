"""Timetable editing session: draft edits and the save that reconciles them.

One ``TimetableEditor`` per editing session. It owns:

- the baseline snapshot (blocks as stored when the session started),
- the draft (blocks as the user has edited them, in memory only),
- creation contexts for blocks that are not stored yet,
- the session's time-slot cache.

``save_changes()`` diffs the draft against the baseline and applies the
result through the store, strictly one call at a time: every create, then
every update, then every delete. The first failure raises and nothing that
was already applied is rolled back.

The baseline is never refreshed by ``save_changes()``. Call ``rebase()``
after a successful save, otherwise a second save replays the same diff.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from src.timetable.diff import TimetableDiff, canonical_set, compute_diff
from src.timetable.errors import ItemOperationError, MissingContextError
from src.timetable.loader import load_baseline
from src.timetable.logging import bound_context, get_logger
from src.timetable.models import CreationContext, ScheduleBlock, TimeSlot
from src.timetable.sanitize import UNSET, nullify_optionals, omit_unset
from src.timetable.store import TimetableStore
from src.timetable.time_slots import TimeSlotResolver

logger = get_logger(__name__)

# Optional keys always sent, as null when not provided
CREATE_NULLABLE_KEYS = ("endDate", "roomId", "notes")
UPDATE_NULLABLE_KEYS = ("notes",)


@dataclass
class SaveReport:
    """What one successful save did."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    time_slots_created: int = 0
    # Draft block id -> id assigned by storage
    created_ids: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.created + self.updated + self.deleted


def _provided(model: Any, name: str) -> Any:
    """Field value if it was given when the model was built, else UNSET."""
    return getattr(model, name) if name in model.model_fields_set else UNSET


def _json_date(value: Any) -> Any:
    return value.isoformat() if value is not None and value is not UNSET else value


class TimetableEditor:
    """Draft/baseline reconciler for a single timetable."""

    def __init__(
        self,
        store: TimetableStore,
        timetable_id: str | None = None,
        baseline: Iterable[ScheduleBlock] = (),
        time_slots: Iterable[TimeSlot] = (),
    ) -> None:
        """Start a session.

        Args:
            store: Storage collaborator used by save_changes().
            timetable_id: Timetable new items belong to. A context may override it;
                when neither sets one, storage picks the active timetable.
            baseline: Blocks as currently stored. Copied; the draft starts equal to it.
            time_slots: Known time slots seeding the session cache.
        """
        self.store = store
        self.timetable_id = timetable_id
        self._baseline: list[ScheduleBlock] = [b.model_copy(deep=True) for b in baseline]
        self._draft: list[ScheduleBlock] = [b.model_copy(deep=True) for b in self._baseline]
        self._contexts: dict[str, CreationContext] = {}
        self.resolver = TimeSlotResolver(store, time_slots)

    @classmethod
    async def open(cls, store: TimetableStore, timetable_id: str) -> "TimetableEditor":
        """Load time slots and the stored items of ``timetable_id`` into a new session.

        Raises:
            StorageError: If either read fails.
        """
        resolver = TimeSlotResolver(store)
        time_slots = await resolver.load()
        baseline = await load_baseline(store, timetable_id, time_slots)
        return cls(store, timetable_id, baseline, time_slots)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def baseline(self) -> list[ScheduleBlock]:
        return list(self._baseline)

    @property
    def draft(self) -> list[ScheduleBlock]:
        return list(self._draft)

    @property
    def time_slots(self) -> list[TimeSlot]:
        return self.resolver.time_slots

    def get_block(self, block_id: str) -> ScheduleBlock | None:
        for block in self._draft:
            if block.id == block_id:
                return block
        return None

    def get_create_context(self, block_id: str) -> CreationContext | None:
        return self._contexts.get(block_id)

    # ------------------------------------------------------------------
    # Draft edits
    # ------------------------------------------------------------------
    def add_block(self, block: ScheduleBlock) -> None:
        """Append a block to the draft. The caller keeps ids unique."""
        self._draft.append(block)

    def update_block(self, block_id: str, **fields: Any) -> None:
        """Replace fields on the draft block ``block_id``. No-op if it is absent.

        Raises:
            pydantic.ValidationError: If the updated block is invalid.
        """
        for i, block in enumerate(self._draft):
            if block.id == block_id:
                data = {"id": block.id, **block.model_dump(exclude_unset=True), **fields}
                self._draft[i] = ScheduleBlock.model_validate(data)
                return

    def delete_block(self, block_id: str) -> None:
        """Remove the draft block ``block_id``. No-op if it is absent."""
        self._draft = [b for b in self._draft if b.id != block_id]

    def set_create_context(self, block_id: str, context: CreationContext) -> None:
        """Attach class/teacher/room/date references to a not-yet-stored block."""
        self._contexts[block_id] = context

    def has_changes(self) -> bool:
        return canonical_set(self._draft) != canonical_set(self._baseline)

    def build_diff(self) -> TimetableDiff:
        return compute_diff(self._baseline, self._draft)

    def rebase(self, blocks: Iterable[ScheduleBlock] | None = None) -> None:
        """Make a new baseline after a save.

        Args:
            blocks: Freshly loaded blocks; draft and baseline both become these.
                When omitted the current draft becomes the baseline.

        Creation contexts are cleared: with draft equal to baseline no block
        is pending creation.
        """
        if blocks is not None:
            self._draft = [b.model_copy(deep=True) for b in blocks]
        self._baseline = [b.model_copy(deep=True) for b in self._draft]
        self._contexts.clear()
        logger.info("baseline_rebased", timetable_id=self.timetable_id, blocks=len(self._baseline))

    async def reload(self) -> None:
        """Refetch the stored items and rebase onto them."""
        if self.timetable_id is None:
            raise ValueError("reload() needs a timetable_id")
        blocks = await load_baseline(self.store, self.timetable_id, self.resolver.time_slots)
        self.rebase(blocks)

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------
    def build_create_payload(
        self, block: ScheduleBlock, context: CreationContext, time_slot_id: str
    ) -> dict[str, Any]:
        timetable_id = context.timetable_id or self.timetable_id
        payload = {
            "timetableId": timetable_id if timetable_id else UNSET,
            "classId": context.class_id,
            "teacherId": context.teacher_id,
            "dayOfWeek": block.day_of_week.value,
            "timeSlotId": time_slot_id,
            "roomId": _provided(context, "room_id"),
            "startDate": context.start_date.isoformat(),
            "endDate": _json_date(_provided(context, "end_date")),
            "isRecurring": False,
            "notes": _provided(block, "notes"),
        }
        return nullify_optionals(omit_unset(payload), CREATE_NULLABLE_KEYS)

    def build_update_payload(self, block: ScheduleBlock, time_slot_id: str) -> dict[str, Any]:
        payload = {
            "dayOfWeek": block.day_of_week.value,
            "timeSlotId": time_slot_id,
            "notes": _provided(block, "notes"),
        }
        return nullify_optionals(omit_unset(payload), UPDATE_NULLABLE_KEYS)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------
    def _require_contexts(self, blocks: Iterable[ScheduleBlock]) -> dict[str, CreationContext]:
        contexts = {}
        for block in blocks:
            context = self._contexts.get(block.id)
            if context is None or not context.is_complete:
                logger.error("save_rejected", reason="missing_context", block_id=block.id)
                raise MissingContextError(block.id)
            contexts[block.id] = context
        return contexts

    async def save_changes(self) -> SaveReport:
        """Apply the draft to storage.

        Returns:
            SaveReport with per-phase counts. An empty diff makes no store call.

        Raises:
            MissingContextError: A new block has no complete context. Raised
                before any store call.
            TimeSlotResolutionError: A needed time slot could not be created.
            ItemOperationError: A create, update or delete reported failure.
        """
        diff = self.build_diff()
        report = SaveReport()
        if diff.is_empty():
            logger.debug("save_skipped", reason="no_changes")
            return report

        with bound_context(timetable_id=self.timetable_id):
            logger.info(
                "save_started",
                to_create=len(diff.to_create),
                to_update=len(diff.to_update),
                to_delete=len(diff.to_delete),
            )
            contexts = self._require_contexts(diff.to_create)
            slots_before = self.resolver.created_count
            try:
                for block in diff.to_create:
                    report.created_ids[block.id] = await self._create(block, contexts[block.id])
                    report.created += 1
                for block in diff.to_update:
                    await self._update(block)
                    report.updated += 1
                for block in diff.to_delete:
                    await self._delete(block)
                    report.deleted += 1
            finally:
                report.time_slots_created = self.resolver.created_count - slots_before

            logger.info(
                "save_completed",
                created=report.created,
                updated=report.updated,
                deleted=report.deleted,
                time_slots_created=report.time_slots_created,
            )
        return report

    async def _create(self, block: ScheduleBlock, context: CreationContext) -> str:
        time_slot_id = await self.resolver.resolve(block.start_time, block.end_time)
        payload = self.build_create_payload(block, context, time_slot_id)
        response = await self.store.create_timetable_item(payload)
        if not response.success:
            logger.error("item_create_failed", block_id=block.id, error=response.error)
            raise ItemOperationError(
                "create", block.id, response.error_message("Failed to create timetable item")
            )
        item_id = response.data.id if response.data is not None else block.id
        logger.info("item_created", block_id=block.id, item_id=item_id, label=block.label)
        return item_id

    async def _update(self, block: ScheduleBlock) -> None:
        time_slot_id = await self.resolver.resolve(block.start_time, block.end_time)
        payload = self.build_update_payload(block, time_slot_id)
        response = await self.store.update_timetable_item(block.id, payload)
        if not response.success:
            logger.error("item_update_failed", block_id=block.id, error=response.error)
            raise ItemOperationError(
                "update", block.id, response.error_message("Failed to update timetable item")
            )
        logger.info("item_updated", block_id=block.id, label=block.label)

    async def _delete(self, block: ScheduleBlock) -> None:
        response = await self.store.delete_timetable_item(block.id)
        if not response.success:
            logger.error("item_delete_failed", block_id=block.id, error=response.error)
            raise ItemOperationError(
                "delete", block.id, response.error_message("Failed to delete timetable item")
            )
        logger.info("item_deleted", block_id=block.id)

from __future__ import annotations

import logging

from timetable_service.core.exceptions import (
    BatchRejected,
    ConflictDetected,
    NotFound,
    ValidationFailed,
)
from timetable_service.models.timetable_slot import Weekday
from timetable_service.services.conflict_detector import find_all_conflicts, find_conflicts
from timetable_service.services.day_copy import copy_day as copy_day_candidates
from timetable_service.services.schedule_grid import sort_slots
from timetable_service.services.scope_locks import ScopeLocks, scope_keys
from timetable_service.services.slot_store import SlotStore
from timetable_service.services.slot_types import (
    BatchFailure,
    Conflict,
    ConflictPair,
    SlotCandidate,
    SlotValidationError,
    TimeSlot,
    coerce_weekday,
)
from timetable_service.services.slot_validator import INVALID_DAY, validate_slot

logger = logging.getLogger(__name__)

SLOT_RESOURCE = "Timetable slot"
EMPTY_BATCH = "EmptyBatch"
SAME_DAY_COPY = "SameDayCopy"


def batch_slot_id(index: int) -> str:
    return f"batch[{index}]"


class ScheduleMutationService:
    """Validate, conflict-check and commit slot changes.

    Every write runs ``validate_slot`` first, then ``find_conflicts`` against
    what the store holds for the affected day, and only then touches the
    store. The conflict check and the commit happen while holding the
    (teacher, day) and (class, day) scope locks of every slot involved.
    """

    def __init__(self, store: SlotStore, locks: ScopeLocks | None = None) -> None:
        self.store = store
        self.locks = locks if locks is not None else ScopeLocks()

    def _same_day(self, candidate: SlotCandidate) -> list[TimeSlot]:
        day = coerce_weekday(candidate.day_of_week)
        if day is None:
            return []
        return self.store.filter(day=day)

    def get(self, slot_id: str) -> TimeSlot:
        slot = self.store.get(slot_id)
        if slot is None:
            raise NotFound(SLOT_RESOURCE, slot_id)
        return slot

    def list_slots(
        self,
        *,
        class_id: str | None = None,
        teacher_id: str | None = None,
        day: Weekday | None = None,
    ) -> list[TimeSlot]:
        return sort_slots(self.store.filter(class_id=class_id, teacher_id=teacher_id, day=day))

    def check(self, candidate: SlotCandidate) -> tuple[list[SlotValidationError], list[Conflict]]:
        """Dry run of the create/update pipeline; nothing is committed."""
        errors = validate_slot(candidate)
        if errors:
            return errors, []
        return [], find_conflicts(candidate, self._same_day(candidate))

    def audit(self) -> list[ConflictPair]:
        return find_all_conflicts(self.store.all())

    def create(self, candidate: SlotCandidate) -> TimeSlot:
        candidate = candidate.with_id(None)
        errors = validate_slot(candidate)
        if errors:
            logger.warning("Rejected slot for class %s: %d validation error(s)", candidate.class_id, len(errors))
            raise ValidationFailed(errors)

        with self.locks.hold(scope_keys([candidate])):
            conflicts = find_conflicts(candidate, self._same_day(candidate))
            if conflicts:
                logger.warning(
                    "Rejected slot for class %s on %s: %d conflict(s)",
                    candidate.class_id,
                    candidate.day_of_week,
                    len(conflicts),
                )
                raise ConflictDetected(conflicts)
            (slot,) = self.store.insert_many([candidate])

        logger.info("Created slot %s for class %s on %s", slot.id, slot.class_id, slot.day_of_week.value)
        return slot

    def update(self, slot_id: str, candidate: SlotCandidate) -> TimeSlot:
        existing = self.get(slot_id)
        candidate = candidate.with_id(slot_id)
        errors = validate_slot(candidate)
        if errors:
            logger.warning("Rejected update of slot %s: %d validation error(s)", slot_id, len(errors))
            raise ValidationFailed(errors)

        with self.locks.hold(scope_keys([candidate, existing])):
            if self.store.get(slot_id) is None:
                raise NotFound(SLOT_RESOURCE, slot_id)
            conflicts = find_conflicts(candidate, self._same_day(candidate))
            if conflicts:
                logger.warning("Rejected update of slot %s: %d conflict(s)", slot_id, len(conflicts))
                raise ConflictDetected(conflicts)
            slot = self.store.replace(slot_id, candidate)

        logger.info("Updated slot %s", slot_id)
        return slot

    def delete(self, slot_id: str) -> bool:
        """Remove a slot; an unknown id is not an error."""
        existing = self.store.get(slot_id)
        if existing is None:
            logger.debug("Delete of unknown slot %s ignored", slot_id)
            return False
        with self.locks.hold(scope_keys([existing])):
            removed = self.store.remove_many([slot_id]) > 0
        if removed:
            logger.info("Deleted slot %s", slot_id)
        return removed

    def delete_class(self, class_id: str) -> int:
        slots = self.store.filter(class_id=class_id)
        if not slots:
            return 0
        with self.locks.hold(scope_keys(slots)):
            removed = self.store.remove_many([slot.id for slot in slots])
        logger.info("Deleted %d slot(s) of class %s", removed, class_id)
        return removed

    def create_batch(self, candidates: list[SlotCandidate]) -> list[TimeSlot]:
        """Commit every candidate or none of them.

        Candidates are checked against the stored slots and against every
        earlier valid candidate of the same batch; the latter show up in
        conflicts as ``batch[<index>]``. All failures are collected before
        rejecting.
        """
        candidates = [candidate.with_id(None) for candidate in candidates]
        if not candidates:
            raise ValidationFailed(
                [SlotValidationError(EMPTY_BATCH, "candidates", "Batch must contain at least one slot")]
            )

        failures: list[BatchFailure] = []
        valid: list[tuple[int, SlotCandidate]] = []
        for index, candidate in enumerate(candidates):
            errors = validate_slot(candidate)
            if errors:
                failures.append(BatchFailure(index=index, errors=tuple(errors)))
            else:
                valid.append((index, candidate))

        with self.locks.hold(scope_keys(candidate for _, candidate in valid)):
            days = {coerce_weekday(candidate.day_of_week) for _, candidate in valid}
            existing = [slot for day in days for slot in self.store.filter(day=day)]
            pending: list[TimeSlot] = []
            for index, candidate in valid:
                conflicts = find_conflicts(candidate, existing + pending)
                if conflicts:
                    failures.append(BatchFailure(index=index, conflicts=tuple(conflicts)))
                pending.append(candidate.as_slot(batch_slot_id(index)))

            if failures:
                failures.sort(key=lambda failure: failure.index)
                logger.warning(
                    "Rejected batch of %d slot(s): %d candidate(s) failed",
                    len(candidates),
                    len(failures),
                )
                raise BatchRejected(failures)

            created = self.store.insert_many([candidate for _, candidate in valid])

        logger.info("Created batch of %d slot(s)", len(created))
        return created

    def copy_day(self, class_id: str, source_day: Weekday | str, target_day: Weekday | str) -> list[TimeSlot]:
        source = coerce_weekday(source_day)
        target = coerce_weekday(target_day)
        errors: list[SlotValidationError] = []
        if source is None:
            errors.append(SlotValidationError(INVALID_DAY, "source_day", f"Invalid day {source_day!r}"))
        if target is None:
            errors.append(SlotValidationError(INVALID_DAY, "target_day", f"Invalid day {target_day!r}"))
        if not errors and source == target:
            errors.append(
                SlotValidationError(SAME_DAY_COPY, "target_day", "Target day must differ from the source day")
            )
        if errors:
            raise ValidationFailed(errors)

        source_slots = self.store.filter(class_id=class_id, day=source)
        if not source_slots:
            return []
        created = self.create_batch(copy_day_candidates(source_slots, target))
        logger.info(
            "Copied %d slot(s) of class %s from %s to %s",
            len(created),
            class_id,
            source.value,
            target.value,
        )
        return created

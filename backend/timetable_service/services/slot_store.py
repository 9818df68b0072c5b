from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from timetable_service.models.timetable_slot import TimetableSlot, Weekday
from timetable_service.services.slot_types import SlotCandidate, TimeSlot


class SlotStore(Protocol):
    """The collection contract the scheduling core relies on.

    Stores assign ids on insert and never reuse one. ``insert_many`` must be
    all-or-nothing.
    """

    def get(self, slot_id: str) -> TimeSlot | None: ...

    def all(self) -> list[TimeSlot]: ...

    def filter(
        self,
        *,
        class_id: str | None = None,
        teacher_id: str | None = None,
        day: Weekday | None = None,
    ) -> list[TimeSlot]: ...

    def insert_many(self, candidates: list[SlotCandidate]) -> list[TimeSlot]: ...

    def replace(self, slot_id: str, candidate: SlotCandidate) -> TimeSlot: ...

    def remove_many(self, slot_ids: Iterable[str]) -> int: ...


def _matches(slot: TimeSlot, class_id: str | None, teacher_id: str | None, day: Weekday | None) -> bool:
    if class_id is not None and slot.class_id != class_id:
        return False
    if teacher_id is not None and slot.teacher_id != teacher_id:
        return False
    if day is not None and slot.day_of_week != day:
        return False
    return True


class InMemorySlotStore:
    def __init__(self, slots: Iterable[TimeSlot] = ()) -> None:
        self._slots: dict[str, TimeSlot] = {}
        for slot in slots:
            if slot.id in self._slots:
                raise ValueError(f"Duplicate slot id {slot.id}")
            self._slots[slot.id] = slot

    def _new_id(self) -> str:
        while True:
            slot_id = str(uuid.uuid4())
            if slot_id not in self._slots:
                return slot_id

    def get(self, slot_id: str) -> TimeSlot | None:
        return self._slots.get(slot_id)

    def all(self) -> list[TimeSlot]:
        return list(self._slots.values())

    def filter(self, *, class_id=None, teacher_id=None, day=None) -> list[TimeSlot]:
        return [slot for slot in self._slots.values() if _matches(slot, class_id, teacher_id, day)]

    def insert_many(self, candidates: list[SlotCandidate]) -> list[TimeSlot]:
        created = [candidate.as_slot(self._new_id()) for candidate in candidates]
        for slot in created:
            self._slots[slot.id] = slot
        return created

    def replace(self, slot_id: str, candidate: SlotCandidate) -> TimeSlot:
        if slot_id not in self._slots:
            raise KeyError(slot_id)
        slot = candidate.as_slot(slot_id)
        self._slots[slot_id] = slot
        return slot

    def remove_many(self, slot_ids: Iterable[str]) -> int:
        removed = 0
        for slot_id in slot_ids:
            if self._slots.pop(slot_id, None) is not None:
                removed += 1
        return removed


def row_to_slot(row: TimetableSlot) -> TimeSlot:
    return TimeSlot(
        id=row.id,
        class_id=row.class_id,
        teacher_id=row.teacher_id,
        day_of_week=row.day_of_week,
        subject=row.subject,
        start_minutes=row.start_minutes,
        duration_minutes=row.duration_minutes,
        lecture_type=row.lecture_type,
        title=row.title,
        academic_year=row.academic_year,
    )


def _apply(row: TimetableSlot, slot: TimeSlot) -> None:
    row.class_id = slot.class_id
    row.teacher_id = slot.teacher_id
    row.day_of_week = slot.day_of_week
    row.subject = slot.subject
    row.start_minutes = slot.start_minutes
    row.duration_minutes = slot.duration_minutes
    row.lecture_type = slot.lecture_type
    row.title = slot.title
    row.academic_year = slot.academic_year


class SqlAlchemySlotStore:
    """Slot store over the ``timetable_slots`` table; every write commits once."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, slot_id: str) -> TimeSlot | None:
        row = self.db.get(TimetableSlot, slot_id)
        return row_to_slot(row) if row is not None else None

    def all(self) -> list[TimeSlot]:
        rows = self.db.execute(select(TimetableSlot).order_by(TimetableSlot.id)).scalars()
        return [row_to_slot(row) for row in rows]

    def filter(self, *, class_id=None, teacher_id=None, day=None) -> list[TimeSlot]:
        query = select(TimetableSlot)
        if class_id is not None:
            query = query.where(TimetableSlot.class_id == class_id)
        if teacher_id is not None:
            query = query.where(TimetableSlot.teacher_id == teacher_id)
        if day is not None:
            query = query.where(TimetableSlot.day_of_week == day)
        # Rows tied on (day, start) keep id order through the stable canonical sort.
        query = query.order_by(TimetableSlot.id)
        return [row_to_slot(row) for row in self.db.execute(query).scalars()]

    def insert_many(self, candidates: list[SlotCandidate]) -> list[TimeSlot]:
        created = [candidate.as_slot(str(uuid.uuid4())) for candidate in candidates]
        rows = []
        for slot in created:
            row = TimetableSlot(id=slot.id)
            _apply(row, slot)
            rows.append(row)
        try:
            self.db.add_all(rows)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return created

    def replace(self, slot_id: str, candidate: SlotCandidate) -> TimeSlot:
        row = self.db.get(TimetableSlot, slot_id)
        if row is None:
            raise KeyError(slot_id)
        slot = candidate.as_slot(slot_id)
        _apply(row, slot)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return slot

    def remove_many(self, slot_ids: Iterable[str]) -> int:
        removed = 0
        for slot_id in slot_ids:
            row = self.db.get(TimetableSlot, slot_id)
            if row is not None:
                self.db.delete(row)
                removed += 1
        if removed:
            try:
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        return removed

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from timetable_service.models.timetable_slot import LectureType, Weekday
from timetable_service.services.time_arithmetic import compute_end_time, format_minutes


DAY_SHORT_MAP = {
    "Mon": "Monday",
    "Tue": "Tuesday",
    "Wed": "Wednesday",
    "Thu": "Thursday",
    "Fri": "Friday",
    "Sat": "Saturday",
}


def normalize_day(value: str) -> str:
    """Expand a three-letter day abbreviation; anything else is only stripped."""
    value = value.strip()
    return DAY_SHORT_MAP.get(value, value)


def coerce_weekday(value: Weekday | str | None) -> Weekday | None:
    if isinstance(value, Weekday):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Weekday(value.strip())
    except ValueError:
        return None


def coerce_lecture_type(value: LectureType | str | None) -> LectureType | None:
    if isinstance(value, LectureType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return LectureType(value.strip())
    except ValueError:
        return None


def _day_label(value: Weekday | str) -> str:
    return value.value if isinstance(value, Weekday) else str(value)


@dataclass(frozen=True)
class TimeSlot:
    id: str
    class_id: str
    teacher_id: str
    day_of_week: Weekday
    subject: str
    start_minutes: int
    duration_minutes: int
    lecture_type: LectureType = LectureType.theory
    title: str | None = None
    academic_year: str | None = None

    @property
    def end_minutes(self) -> int:
        return compute_end_time(self.start_minutes, self.duration_minutes)

    def to_candidate(self) -> "SlotCandidate":
        return SlotCandidate(
            id=self.id,
            class_id=self.class_id,
            teacher_id=self.teacher_id,
            day_of_week=self.day_of_week,
            subject=self.subject,
            start_minutes=self.start_minutes,
            duration_minutes=self.duration_minutes,
            lecture_type=self.lecture_type,
            title=self.title,
            academic_year=self.academic_year,
        )


@dataclass(frozen=True)
class SlotCandidate:
    """A slot as submitted by a caller, before an id is assigned.

    ``day_of_week`` and ``lecture_type`` may still be raw strings here; the
    validator reports values outside the enums instead of failing early.
    ``id`` is only set when re-checking an existing slot during an update.
    """

    class_id: str
    teacher_id: str
    day_of_week: Weekday | str
    subject: str
    start_minutes: int
    duration_minutes: int
    lecture_type: LectureType | str = LectureType.theory
    title: str | None = None
    academic_year: str | None = None
    id: str | None = None

    @property
    def end_minutes(self) -> int:
        return compute_end_time(self.start_minutes, self.duration_minutes)

    def with_id(self, slot_id: str | None) -> "SlotCandidate":
        return replace(self, id=slot_id)

    def as_slot(self, slot_id: str) -> TimeSlot:
        day = coerce_weekday(self.day_of_week)
        lecture_type = coerce_lecture_type(self.lecture_type)
        if day is None or lecture_type is None:
            raise ValueError("Candidate must be validated before it becomes a slot")
        return TimeSlot(
            id=slot_id,
            class_id=self.class_id.strip(),
            teacher_id=self.teacher_id.strip(),
            day_of_week=day,
            subject=self.subject.strip(),
            start_minutes=self.start_minutes,
            duration_minutes=self.duration_minutes,
            lecture_type=lecture_type,
            title=self.title,
            academic_year=self.academic_year,
        )


@dataclass(frozen=True)
class SlotValidationError:
    code: str
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"code": self.code, "field": self.field, "message": self.message}


class ConflictKind(str, Enum):
    teacher = "Teacher"
    klass = "Class"


@dataclass(frozen=True)
class Conflict:
    kind: ConflictKind
    with_slot_id: str
    day: Weekday | str
    overlap_start: int
    overlap_end: int

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "conflictingSlotId": self.with_slot_id,
            "day": _day_label(self.day),
            "overlapStart": format_minutes(self.overlap_start),
            "overlapEnd": format_minutes(self.overlap_end),
        }


@dataclass(frozen=True)
class ConflictPair:
    """Two stored slots that collide; produced when auditing a whole timetable."""

    kind: ConflictKind
    first_slot_id: str
    second_slot_id: str
    day: Weekday
    overlap_start: int
    overlap_end: int

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "slotIds": [self.first_slot_id, self.second_slot_id],
            "day": _day_label(self.day),
            "overlapStart": format_minutes(self.overlap_start),
            "overlapEnd": format_minutes(self.overlap_end),
        }


@dataclass(frozen=True)
class BatchFailure:
    index: int
    errors: tuple[SlotValidationError, ...] = field(default_factory=tuple)
    conflicts: tuple[Conflict, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict:
        return {
            "index": self.index,
            "errors": [error.as_dict() for error in self.errors],
            "conflicts": [conflict.as_dict() for conflict in self.conflicts],
        }

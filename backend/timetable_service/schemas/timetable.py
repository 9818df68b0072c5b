from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from timetable_service.models.timetable_slot import LectureType
from timetable_service.services.schedule_grid import FREE, ClassGroup, Grid
from timetable_service.services.slot_types import (
    Conflict,
    ConflictPair,
    SlotCandidate,
    SlotValidationError,
    TimeSlot,
    normalize_day,
)
from timetable_service.services.time_arithmetic import format_minutes, to_minutes

ACADEMIC_YEAR_PATTERN = r"^\d{4}-\d{4}$"


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


class SlotIn(BaseModel):
    # Blank identifiers are let through here so the slot validator can report
    # every missing field in one response.
    class_id: str = Field(default="", alias="classId", max_length=64)
    teacher_id: str = Field(default="", alias="teacherId", max_length=64)
    day_of_week: str = Field(default="", alias="dayOfWeek", max_length=20)
    subject: str = Field(default="", max_length=100)
    lecture_type: str = Field(default=LectureType.theory.value, alias="lectureType", max_length=20)
    start_time: str = Field(alias="startTime")
    duration_minutes: int = Field(alias="durationMinutes")
    title: str | None = Field(default=None, max_length=100)
    academic_year: str | None = Field(default=None, alias="academicYear", pattern=ACADEMIC_YEAR_PATTERN)

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: str) -> str:
        to_minutes(value)
        return value.strip()

    @field_validator("day_of_week")
    @classmethod
    def expand_day(cls, value: str) -> str:
        return normalize_day(value)

    @field_validator("title")
    @classmethod
    def normalize_title(cls, value: str | None) -> str | None:
        return _clean_optional(value)

    def to_candidate(self) -> SlotCandidate:
        subject = self.subject.strip()
        return SlotCandidate(
            class_id=self.class_id,
            teacher_id=self.teacher_id,
            day_of_week=self.day_of_week,
            subject=self.subject,
            start_minutes=to_minutes(self.start_time),
            duration_minutes=self.duration_minutes,
            lecture_type=self.lecture_type,
            title=self.title or subject or None,
            academic_year=self.academic_year,
        )


class SlotUpdate(BaseModel):
    class_id: str | None = Field(default=None, alias="classId", max_length=64)
    teacher_id: str | None = Field(default=None, alias="teacherId", max_length=64)
    day_of_week: str | None = Field(default=None, alias="dayOfWeek", max_length=20)
    subject: str | None = Field(default=None, max_length=100)
    lecture_type: str | None = Field(default=None, alias="lectureType", max_length=20)
    start_time: str | None = Field(default=None, alias="startTime")
    duration_minutes: int | None = Field(default=None, alias="durationMinutes")
    title: str | None = Field(default=None, max_length=100)
    academic_year: str | None = Field(default=None, alias="academicYear", pattern=ACADEMIC_YEAR_PATTERN)

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        to_minutes(value)
        return value.strip()

    @field_validator("day_of_week")
    @classmethod
    def expand_day(cls, value: str | None) -> str | None:
        return normalize_day(value) if value is not None else None

    def merge_into(self, slot: TimeSlot) -> SlotCandidate:
        """Overlay the fields the caller sent on top of the stored slot."""
        data = self.model_dump(exclude_unset=True)
        candidate = slot.to_candidate()
        start_minutes = candidate.start_minutes
        if data.get("start_time") is not None:
            start_minutes = to_minutes(data["start_time"])
        return SlotCandidate(
            id=slot.id,
            class_id=data["class_id"] if data.get("class_id") is not None else candidate.class_id,
            teacher_id=data["teacher_id"] if data.get("teacher_id") is not None else candidate.teacher_id,
            day_of_week=data["day_of_week"] if data.get("day_of_week") is not None else candidate.day_of_week,
            subject=data["subject"] if data.get("subject") is not None else candidate.subject,
            start_minutes=start_minutes,
            duration_minutes=(
                data["duration_minutes"] if data.get("duration_minutes") is not None else candidate.duration_minutes
            ),
            lecture_type=data["lecture_type"] if data.get("lecture_type") is not None else candidate.lecture_type,
            title=_clean_optional(data["title"]) if "title" in data else candidate.title,
            academic_year=data["academic_year"] if "academic_year" in data else candidate.academic_year,
        )


class SlotOut(BaseModel):
    id: str
    class_id: str = Field(alias="classId")
    teacher_id: str = Field(alias="teacherId")
    day_of_week: str = Field(alias="dayOfWeek")
    subject: str
    lecture_type: str = Field(alias="lectureType")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    duration_minutes: int = Field(alias="durationMinutes")
    title: str | None = None
    academic_year: str | None = Field(default=None, alias="academicYear")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "SlotOut":
        return cls(
            id=slot.id,
            class_id=slot.class_id,
            teacher_id=slot.teacher_id,
            day_of_week=slot.day_of_week.value,
            subject=slot.subject,
            lecture_type=slot.lecture_type.value,
            start_time=format_minutes(slot.start_minutes),
            end_time=format_minutes(slot.end_minutes),
            duration_minutes=slot.duration_minutes,
            title=slot.title,
            academic_year=slot.academic_year,
        )


class BatchCreateRequest(BaseModel):
    slots: list[SlotIn] = Field(max_length=500)


class CopyDayRequest(BaseModel):
    source_day: str = Field(alias="sourceDay", max_length=20)
    target_day: str = Field(alias="targetDay", max_length=20)

    model_config = {"populate_by_name": True}

    @field_validator("source_day", "target_day")
    @classmethod
    def expand_day(cls, value: str) -> str:
        return normalize_day(value)


class ValidationErrorOut(BaseModel):
    code: str
    field: str
    message: str

    @classmethod
    def from_error(cls, error: SlotValidationError) -> "ValidationErrorOut":
        return cls.model_validate(error.as_dict())


class ConflictOut(BaseModel):
    kind: Literal["Teacher", "Class"]
    conflicting_slot_id: str = Field(alias="conflictingSlotId")
    day: str
    overlap_start: str = Field(alias="overlapStart")
    overlap_end: str = Field(alias="overlapEnd")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_conflict(cls, conflict: Conflict) -> "ConflictOut":
        return cls.model_validate(conflict.as_dict())


class ConflictPairOut(BaseModel):
    kind: Literal["Teacher", "Class"]
    slot_ids: list[str] = Field(alias="slotIds")
    day: str
    overlap_start: str = Field(alias="overlapStart")
    overlap_end: str = Field(alias="overlapEnd")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pair(cls, pair: ConflictPair) -> "ConflictPairOut":
        return cls.model_validate(pair.as_dict())


class ConflictAuditOut(BaseModel):
    total: int
    conflicts: list[ConflictPairOut] = Field(default_factory=list)


class SlotCheckOut(BaseModel):
    ok: bool
    errors: list[ValidationErrorOut] = Field(default_factory=list)
    conflicts: list[ConflictOut] = Field(default_factory=list)


class SlotListOut(BaseModel):
    total: int
    slots: list[SlotOut] = Field(default_factory=list)


class GridCellOut(BaseModel):
    day: str
    free: bool
    slots: list[SlotOut] = Field(default_factory=list)


class GridRowOut(BaseModel):
    time: str
    cells: list[GridCellOut] = Field(default_factory=list)


class GridOut(BaseModel):
    class_id: str = Field(alias="classId")
    days: list[str] = Field(default_factory=list)
    times: list[str] = Field(default_factory=list)
    rows: list[GridRowOut] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_grid(cls, class_id: str, grid: Grid) -> "GridOut":
        rows = []
        for label, cells in grid.rows():
            row = GridRowOut(time=label)
            for day, cell in zip(grid.days, cells):
                if cell == FREE:
                    row.cells.append(GridCellOut(day=day.value, free=True))
                else:
                    row.cells.append(
                        GridCellOut(day=day.value, free=False, slots=[SlotOut.from_slot(slot) for slot in cell])
                    )
            rows.append(row)
        return cls(
            class_id=class_id,
            days=[day.value for day in grid.days],
            times=grid.time_labels,
            rows=rows,
        )


class ClassGroupOut(BaseModel):
    class_info: dict = Field(alias="classInfo")
    entries: list[SlotOut] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_group(cls, group: ClassGroup) -> "ClassGroupOut":
        return cls(class_info=group.class_info, entries=[SlotOut.from_slot(slot) for slot in group.entries])


class TeacherScheduleOut(BaseModel):
    teacher_id: str = Field(alias="teacherId")
    total: int
    schedule: dict[str, list[SlotOut]] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class DeleteSlotOut(BaseModel):
    success: bool = True
    deleted: bool


class DeleteClassOut(BaseModel):
    success: bool = True
    deleted_count: int = Field(alias="deletedCount")

    model_config = {"populate_by_name": True}


class TeacherDayOut(BaseModel):
    teacher_id: str = Field(alias="teacherId")
    date: str
    day_of_week: str = Field(alias="dayOfWeek")
    total: int
    slots: list[SlotOut] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

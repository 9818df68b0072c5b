from __future__ import annotations

from timetable_service.services.slot_types import (
    SlotCandidate,
    SlotValidationError,
    coerce_lecture_type,
    coerce_weekday,
)
from timetable_service.services.time_arithmetic import (
    LAST_MINUTE_OF_DAY,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    format_minutes,
    is_duration_in_bounds,
)

MISSING_FIELD = "MissingField"
DURATION_OUT_OF_BOUNDS = "DurationOutOfBounds"
TIME_OUT_OF_RANGE = "TimeOutOfRange"
INVALID_DAY = "InvalidDay"
INVALID_LECTURE_TYPE = "InvalidLectureType"

REQUIRED_FIELDS = ("class_id", "teacher_id", "subject", "day_of_week")


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_slot(candidate: SlotCandidate) -> list[SlotValidationError]:
    """Collect every structural problem with ``candidate``.

    Nothing short-circuits, so a form can highlight all offending fields at
    once. An empty list means the candidate is structurally sound; overlap with
    other slots is a separate concern.
    """
    errors: list[SlotValidationError] = []

    for name in REQUIRED_FIELDS:
        if _is_blank(getattr(candidate, name)):
            errors.append(SlotValidationError(MISSING_FIELD, name, f"{name} is required"))

    if not is_duration_in_bounds(candidate.duration_minutes):
        errors.append(
            SlotValidationError(
                DURATION_OUT_OF_BOUNDS,
                "duration_minutes",
                f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes, "
                f"got {candidate.duration_minutes}",
            )
        )

    start = candidate.start_minutes
    if not 0 <= start <= LAST_MINUTE_OF_DAY:
        errors.append(
            SlotValidationError(
                TIME_OUT_OF_RANGE,
                "start_minutes",
                f"Start time must fall between 00:00 and 23:59, got minute {start}",
            )
        )
    elif candidate.end_minutes > LAST_MINUTE_OF_DAY:
        errors.append(
            SlotValidationError(
                TIME_OUT_OF_RANGE,
                "end_minutes",
                f"Slot would end at {format_minutes(candidate.end_minutes)}, past 23:59",
            )
        )

    if not _is_blank(candidate.day_of_week) and coerce_weekday(candidate.day_of_week) is None:
        errors.append(
            SlotValidationError(
                INVALID_DAY,
                "day_of_week",
                f"Invalid day {candidate.day_of_week!r}; expected Monday to Saturday",
            )
        )

    if coerce_lecture_type(candidate.lecture_type) is None:
        errors.append(
            SlotValidationError(
                INVALID_LECTURE_TYPE,
                "lecture_type",
                f"Invalid lecture type {candidate.lecture_type!r}",
            )
        )

    return errors

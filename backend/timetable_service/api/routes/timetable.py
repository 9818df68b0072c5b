from datetime import date as calendar_date
import logging

from fastapi import APIRouter, Depends, Query, status

from timetable_service.api.deps import get_slot_service
from timetable_service.core.exceptions import ValidationFailed
from timetable_service.models.timetable_slot import WEEK_ORDER, Weekday
from timetable_service.schemas.timetable import (
    BatchCreateRequest,
    ClassGroupOut,
    ConflictAuditOut,
    ConflictOut,
    ConflictPairOut,
    CopyDayRequest,
    DeleteClassOut,
    DeleteSlotOut,
    GridOut,
    SlotCheckOut,
    SlotIn,
    SlotListOut,
    SlotOut,
    SlotUpdate,
    TeacherDayOut,
    TeacherScheduleOut,
    ValidationErrorOut,
)
from timetable_service.services.schedule_grid import build_grid, group_by_class, group_by_day
from timetable_service.services.schedule_mutation import ScheduleMutationService
from timetable_service.services.slot_types import SlotValidationError, coerce_weekday, normalize_day
from timetable_service.services.slot_validator import INVALID_DAY

router = APIRouter()
logger = logging.getLogger(__name__)

INVALID_DATE = "InvalidDate"


def _day_filter(value: str | None) -> Weekday | None:
    if value is None:
        return None
    day = coerce_weekday(normalize_day(value))
    if day is None:
        raise ValidationFailed(
            [SlotValidationError(INVALID_DAY, "dayOfWeek", f"Invalid day {value!r}; expected Monday to Saturday")]
        )
    return day


@router.get("/slots", response_model=SlotListOut)
def list_slots(
    class_id: str | None = Query(default=None, alias="classId", max_length=64),
    teacher_id: str | None = Query(default=None, alias="teacherId", max_length=64),
    day_of_week: str | None = Query(default=None, alias="dayOfWeek", max_length=20),
    service: ScheduleMutationService = Depends(get_slot_service),
) -> SlotListOut:
    slots = service.list_slots(class_id=class_id, teacher_id=teacher_id, day=_day_filter(day_of_week))
    return SlotListOut(total=len(slots), slots=[SlotOut.from_slot(slot) for slot in slots])


@router.get("/slots/{slot_id}", response_model=SlotOut)
def get_slot(slot_id: str, service: ScheduleMutationService = Depends(get_slot_service)) -> SlotOut:
    return SlotOut.from_slot(service.get(slot_id))


@router.post("/slots", response_model=SlotOut, status_code=status.HTTP_201_CREATED)
def create_slot(payload: SlotIn, service: ScheduleMutationService = Depends(get_slot_service)) -> SlotOut:
    return SlotOut.from_slot(service.create(payload.to_candidate()))


@router.post("/slots/bulk", response_model=SlotListOut, status_code=status.HTTP_201_CREATED)
def create_slots_bulk(
    payload: BatchCreateRequest,
    service: ScheduleMutationService = Depends(get_slot_service),
) -> SlotListOut:
    created = service.create_batch([item.to_candidate() for item in payload.slots])
    return SlotListOut(total=len(created), slots=[SlotOut.from_slot(slot) for slot in created])


@router.post("/slots/check", response_model=SlotCheckOut)
def check_slot(
    payload: SlotIn,
    exclude_slot_id: str | None = Query(default=None, alias="excludeSlotId"),
    service: ScheduleMutationService = Depends(get_slot_service),
) -> SlotCheckOut:
    candidate = payload.to_candidate().with_id(exclude_slot_id)
    errors, conflicts = service.check(candidate)
    return SlotCheckOut(
        ok=not errors and not conflicts,
        errors=[ValidationErrorOut.from_error(error) for error in errors],
        conflicts=[ConflictOut.from_conflict(conflict) for conflict in conflicts],
    )


@router.put("/slots/{slot_id}", response_model=SlotOut)
def update_slot(
    slot_id: str,
    payload: SlotUpdate,
    service: ScheduleMutationService = Depends(get_slot_service),
) -> SlotOut:
    existing = service.get(slot_id)
    return SlotOut.from_slot(service.update(slot_id, payload.merge_into(existing)))


@router.delete("/slots/{slot_id}", response_model=DeleteSlotOut)
def delete_slot(slot_id: str, service: ScheduleMutationService = Depends(get_slot_service)) -> DeleteSlotOut:
    return DeleteSlotOut(deleted=service.delete(slot_id))


@router.get("/conflicts", response_model=ConflictAuditOut)
def audit_conflicts(service: ScheduleMutationService = Depends(get_slot_service)) -> ConflictAuditOut:
    pairs = service.audit()
    if pairs:
        logger.warning("Timetable audit found %d conflicting pair(s)", len(pairs))
    return ConflictAuditOut(total=len(pairs), conflicts=[ConflictPairOut.from_pair(pair) for pair in pairs])


@router.get("/classes/{class_id}/grid", response_model=GridOut)
def class_grid(class_id: str, service: ScheduleMutationService = Depends(get_slot_service)) -> GridOut:
    grid = build_grid(service.list_slots(class_id=class_id))
    return GridOut.from_grid(class_id, grid)


@router.post("/classes/{class_id}/copy-day", response_model=SlotListOut, status_code=status.HTTP_201_CREATED)
def copy_class_day(
    class_id: str,
    payload: CopyDayRequest,
    service: ScheduleMutationService = Depends(get_slot_service),
) -> SlotListOut:
    created = service.copy_day(class_id, payload.source_day, payload.target_day)
    return SlotListOut(total=len(created), slots=[SlotOut.from_slot(slot) for slot in created])


@router.delete("/classes/{class_id}", response_model=DeleteClassOut)
def delete_class_slots(class_id: str, service: ScheduleMutationService = Depends(get_slot_service)) -> DeleteClassOut:
    return DeleteClassOut(deleted_count=service.delete_class(class_id))


@router.get("/teachers/{teacher_id}", response_model=TeacherScheduleOut)
def teacher_schedule(
    teacher_id: str,
    day_of_week: str | None = Query(default=None, alias="dayOfWeek", max_length=20),
    service: ScheduleMutationService = Depends(get_slot_service),
) -> TeacherScheduleOut:
    slots = service.list_slots(teacher_id=teacher_id, day=_day_filter(day_of_week))
    week = group_by_day(slots)
    return TeacherScheduleOut(
        teacher_id=teacher_id,
        total=len(slots),
        schedule={day.value: [SlotOut.from_slot(slot) for slot in entries] for day, entries in week.items()},
    )


@router.get("/teachers/{teacher_id}/date/{date}", response_model=TeacherDayOut)
def teacher_lectures_on_date(
    teacher_id: str,
    date: str,
    service: ScheduleMutationService = Depends(get_slot_service),
) -> TeacherDayOut:
    try:
        on_date = calendar_date.fromisoformat(date)
    except ValueError:
        raise ValidationFailed(
            [SlotValidationError(INVALID_DATE, "date", f"Invalid date {date!r}; expected YYYY-MM-DD")]
        ) from None

    weekday_index = on_date.weekday()
    if weekday_index >= len(WEEK_ORDER):
        # No lectures are held on Sunday.
        return TeacherDayOut(teacher_id=teacher_id, date=on_date.isoformat(), day_of_week="Sunday", total=0)

    day = WEEK_ORDER[weekday_index]
    slots = service.list_slots(teacher_id=teacher_id, day=day)
    return TeacherDayOut(
        teacher_id=teacher_id,
        date=on_date.isoformat(),
        day_of_week=day.value,
        total=len(slots),
        slots=[SlotOut.from_slot(slot) for slot in slots],
    )


@router.get("/grouped", response_model=dict[str, ClassGroupOut])
def grouped_by_class(service: ScheduleMutationService = Depends(get_slot_service)) -> dict[str, ClassGroupOut]:
    groups = group_by_class(service.list_slots())
    return {class_id: ClassGroupOut.from_group(group) for class_id, group in groups.items()}

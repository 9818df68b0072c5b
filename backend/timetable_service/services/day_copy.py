from __future__ import annotations

from collections.abc import Iterable

from timetable_service.models.timetable_slot import Weekday
from timetable_service.services.schedule_grid import sort_slots
from timetable_service.services.slot_types import SlotCandidate, TimeSlot


def copy_day(source_day_slots: Iterable[TimeSlot], target_day: Weekday | str) -> list[SlotCandidate]:
    """Turn one day's slots into unsaved candidates for ``target_day``.

    Copies carry no id; the store assigns fresh ones on commit. No validation
    happens here, so the result must go through ``create_batch``.
    """
    return [
        SlotCandidate(
            class_id=slot.class_id,
            teacher_id=slot.teacher_id,
            day_of_week=target_day,
            subject=slot.subject,
            start_minutes=slot.start_minutes,
            duration_minutes=slot.duration_minutes,
            lecture_type=slot.lecture_type,
            title=slot.title,
            academic_year=slot.academic_year,
        )
        for slot in sort_slots(source_day_slots)
    ]

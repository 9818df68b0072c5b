"""Double-booking detection for teachers and classes.

Two slots collide when they share a day and a teacher (or a class) and
their half-open intervals ``[start, end)`` overlap, i.e. ``s1 < e2 and
s2 < e1``. A lecture ending at 10:00 and another starting at 10:00 are
adjacent, not overlapping.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from timetable_service.models.timetable_slot import DAY_INDEX, Weekday
from timetable_service.services.slot_types import (
    Conflict,
    ConflictKind,
    ConflictPair,
    SlotCandidate,
    TimeSlot,
    coerce_weekday,
)

KIND_ORDER = {ConflictKind.teacher: 0, ConflictKind.klass: 1}


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return start1 < end2 and start2 < end1


def _normalized(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


def _sweep_against(
    kind: ConflictKind,
    group: list[TimeSlot],
    day: Weekday,
    start: int,
    end: int,
) -> list[Conflict]:
    found: list[Conflict] = []
    for slot in sorted(group, key=lambda item: (item.start_minutes, item.id)):
        if slot.start_minutes >= end:
            break
        if slot.end_minutes > start:
            found.append(
                Conflict(
                    kind=kind,
                    with_slot_id=slot.id,
                    day=day,
                    overlap_start=max(start, slot.start_minutes),
                    overlap_end=min(end, slot.end_minutes),
                )
            )
    found.sort(key=lambda conflict: (conflict.overlap_start, conflict.with_slot_id))
    return found


def find_conflicts(candidate: SlotCandidate, existing_slots: Iterable[TimeSlot]) -> list[Conflict]:
    """Return one ``Conflict`` per existing slot that would collide with ``candidate``.

    Teacher collisions come first, then class collisions. A slot that shares
    both the teacher and the class is reported twice, once per kind. The
    candidate's own id (set during updates) is never compared against itself.
    ``existing_slots`` is only read.
    """
    day = coerce_weekday(candidate.day_of_week)
    start, end = candidate.start_minutes, candidate.end_minutes
    if day is None or end <= start:
        return []

    teacher_id = _normalized(candidate.teacher_id)
    class_id = _normalized(candidate.class_id)
    teacher_group: list[TimeSlot] = []
    class_group: list[TimeSlot] = []
    for slot in existing_slots:
        if slot.day_of_week != day:
            continue
        if candidate.id is not None and slot.id == candidate.id:
            continue
        if teacher_id and slot.teacher_id == teacher_id:
            teacher_group.append(slot)
        if class_id and slot.class_id == class_id:
            class_group.append(slot)

    return _sweep_against(ConflictKind.teacher, teacher_group, day, start, end) + _sweep_against(
        ConflictKind.klass, class_group, day, start, end
    )


def _sweep_group(kind: ConflictKind, day: Weekday, group: list[TimeSlot]) -> list[ConflictPair]:
    pairs: list[ConflictPair] = []
    active: list[TimeSlot] = []
    for slot in sorted(group, key=lambda item: (item.start_minutes, item.end_minutes, item.id)):
        active = [other for other in active if other.end_minutes > slot.start_minutes]
        for other in active:
            pairs.append(
                ConflictPair(
                    kind=kind,
                    first_slot_id=other.id,
                    second_slot_id=slot.id,
                    day=day,
                    overlap_start=slot.start_minutes,
                    overlap_end=min(other.end_minutes, slot.end_minutes),
                )
            )
        active.append(slot)
    return pairs


def find_all_conflicts(slots: Iterable[TimeSlot]) -> list[ConflictPair]:
    """Audit a whole collection: every colliding pair within each (teacher, day)
    and (class, day) group, found with one sorted sweep per group."""
    by_teacher: dict[tuple[str, Weekday], list[TimeSlot]] = defaultdict(list)
    by_class: dict[tuple[str, Weekday], list[TimeSlot]] = defaultdict(list)
    for slot in slots:
        by_teacher[(slot.teacher_id, slot.day_of_week)].append(slot)
        by_class[(slot.class_id, slot.day_of_week)].append(slot)

    pairs: list[ConflictPair] = []
    for (_, day), group in by_teacher.items():
        if len(group) > 1:
            pairs.extend(_sweep_group(ConflictKind.teacher, day, group))
    for (_, day), group in by_class.items():
        if len(group) > 1:
            pairs.extend(_sweep_group(ConflictKind.klass, day, group))

    pairs.sort(
        key=lambda pair: (
            DAY_INDEX[pair.day],
            KIND_ORDER[pair.kind],
            pair.overlap_start,
            pair.first_slot_id,
            pair.second_slot_id,
        )
    )
    return pairs

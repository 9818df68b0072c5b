from itertools import combinations
import random

from timetable_service.models.timetable_slot import Weekday
from timetable_service.services.conflict_detector import (
    find_all_conflicts,
    find_conflicts,
    intervals_overlap,
)
from timetable_service.services.slot_types import ConflictKind, SlotCandidate, TimeSlot


def slot(slot_id, *, class_id="C1", teacher_id="T1", day=Weekday.monday, start=540, duration=60):
    return TimeSlot(
        id=slot_id,
        class_id=class_id,
        teacher_id=teacher_id,
        day_of_week=day,
        subject="Physics",
        start_minutes=start,
        duration_minutes=duration,
    )


def candidate(*, class_id="C2", teacher_id="T1", day=Weekday.monday, start=570, duration=30, slot_id=None):
    return SlotCandidate(
        id=slot_id,
        class_id=class_id,
        teacher_id=teacher_id,
        day_of_week=day,
        subject="Chemistry",
        start_minutes=start,
        duration_minutes=duration,
    )


def test_teacher_double_booking_is_detected():
    existing = [slot("s1", class_id="C1", teacher_id="T1", start=540, duration=60)]
    conflicts = find_conflicts(candidate(class_id="C2", teacher_id="T1", start=570, duration=30), existing)

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.kind == ConflictKind.teacher
    assert conflict.with_slot_id == "s1"
    assert conflict.day == Weekday.monday
    assert (conflict.overlap_start, conflict.overlap_end) == (570, 600)
    assert conflict.as_dict() == {
        "kind": "Teacher",
        "conflictingSlotId": "s1",
        "day": "Monday",
        "overlapStart": "09:30",
        "overlapEnd": "10:00",
    }


def test_adjacent_slots_do_not_conflict():
    existing = [slot("s1", start=540, duration=60)]
    assert find_conflicts(candidate(start=600, duration=30), existing) == []
    assert find_conflicts(candidate(start=480, duration=60), existing) == []


def test_class_double_booking_is_detected():
    existing = [slot("s1", class_id="C1", teacher_id="T9", start=540, duration=90)]
    conflicts = find_conflicts(candidate(class_id="C1", teacher_id="T1", start=600, duration=60), existing)
    assert [(c.kind, c.with_slot_id, c.overlap_start, c.overlap_end) for c in conflicts] == [
        (ConflictKind.klass, "s1", 600, 630)
    ]


def test_same_teacher_and_class_reports_both_kinds():
    existing = [slot("s1", class_id="C1", teacher_id="T1")]
    conflicts = find_conflicts(candidate(class_id="C1", teacher_id="T1", start=540, duration=60), existing)
    assert [c.kind for c in conflicts] == [ConflictKind.teacher, ConflictKind.klass]


def test_other_days_are_ignored():
    existing = [slot("s1", day=Weekday.tuesday)]
    assert find_conflicts(candidate(day=Weekday.monday), existing) == []


def test_update_excludes_the_slot_itself():
    existing = [slot("s1", class_id="C1", teacher_id="T1", start=540, duration=60)]
    moved = candidate(class_id="C1", teacher_id="T1", start=570, duration=60, slot_id="s1")
    assert find_conflicts(moved, existing) == []


def test_every_pairwise_overlap_is_reported():
    existing = [
        slot("a", class_id="X", start=540, duration=120),
        slot("b", class_id="Y", start=560, duration=60),
        slot("c", class_id="Z", start=600, duration=30),
    ]
    conflicts = find_conflicts(candidate(class_id="Q", start=590, duration=30), existing)
    assert sorted(c.with_slot_id for c in conflicts) == ["a", "b", "c"]
    assert all(c.kind == ConflictKind.teacher for c in conflicts)


def test_string_day_matches_enum_day():
    existing = [slot("s1")]
    assert len(find_conflicts(candidate(day="Monday"), existing)) == 1


def test_invalid_candidate_yields_no_conflicts():
    existing = [slot("s1")]
    assert find_conflicts(candidate(day="Sunday"), existing) == []
    assert find_conflicts(candidate(duration=-30), existing) == []


def test_existing_slots_are_not_modified():
    existing = [slot("s2", start=600), slot("s1", start=540)]
    snapshot = list(existing)
    find_conflicts(candidate(start=550, duration=90), existing)
    assert existing == snapshot


def test_sweep_matches_pairwise_definition():
    rng = random.Random(7)
    existing = [
        slot(
            f"s{index}",
            class_id=rng.choice(["C1", "C2", "C3"]),
            teacher_id=rng.choice(["T1", "T2"]),
            day=rng.choice([Weekday.monday, Weekday.tuesday]),
            start=rng.randrange(480, 960, 10),
            duration=rng.choice([30, 45, 60, 90]),
        )
        for index in range(120)
    ]
    probe = candidate(class_id="C2", teacher_id="T1", day=Weekday.monday, start=600, duration=90)

    expected = set()
    for other in existing:
        if other.day_of_week != Weekday.monday:
            continue
        if not intervals_overlap(probe.start_minutes, probe.end_minutes, other.start_minutes, other.end_minutes):
            continue
        if other.teacher_id == "T1":
            expected.add((ConflictKind.teacher, other.id))
        if other.class_id == "C2":
            expected.add((ConflictKind.klass, other.id))

    found = find_conflicts(probe, existing)
    assert {(c.kind, c.with_slot_id) for c in found} == expected
    assert len(found) == len(expected)


def test_audit_reports_every_colliding_pair():
    slots = [
        slot("a", class_id="C1", teacher_id="T1", start=540, duration=60),
        slot("b", class_id="C2", teacher_id="T1", start=570, duration=60),
        slot("c", class_id="C3", teacher_id="T1", start=580, duration=30),
        slot("d", class_id="C1", teacher_id="T2", start=600, duration=30),
        slot("e", class_id="C4", teacher_id="T1", start=700, duration=30),
    ]
    pairs = find_all_conflicts(slots)
    teacher_pairs = {frozenset((p.first_slot_id, p.second_slot_id)) for p in pairs if p.kind == ConflictKind.teacher}
    class_pairs = {frozenset((p.first_slot_id, p.second_slot_id)) for p in pairs if p.kind == ConflictKind.klass}

    assert teacher_pairs == {frozenset("ab"), frozenset("ac"), frozenset("bc")}
    # a ends at 10:00 and d starts at 10:00: adjacent, not overlapping.
    assert class_pairs == set()


def test_audit_sweep_matches_pairwise_definition():
    rng = random.Random(11)
    slots = [
        slot(
            f"s{index}",
            class_id=rng.choice(["C1", "C2"]),
            teacher_id=rng.choice(["T1", "T2", "T3"]),
            day=rng.choice(list(Weekday)),
            start=rng.randrange(480, 900, 15),
            duration=rng.choice([30, 60, 120]),
        )
        for index in range(80)
    ]
    expected = set()
    for first, second in combinations(slots, 2):
        if first.day_of_week != second.day_of_week:
            continue
        if not intervals_overlap(first.start_minutes, first.end_minutes, second.start_minutes, second.end_minutes):
            continue
        key = frozenset((first.id, second.id))
        if first.teacher_id == second.teacher_id:
            expected.add((ConflictKind.teacher, key))
        if first.class_id == second.class_id:
            expected.add((ConflictKind.klass, key))

    pairs = find_all_conflicts(slots)
    assert {(p.kind, frozenset((p.first_slot_id, p.second_slot_id))) for p in pairs} == expected
    assert len(pairs) == len(expected)

import pytest

from timetable_service.core.exceptions import SchedulerError
from timetable_service.models.timetable_slot import Weekday
from timetable_service.services.schedule_grid import (
    FREE,
    build_grid,
    group_by_class,
    group_by_day,
    sort_slots,
    used_time_labels,
)
from timetable_service.services.slot_types import TimeSlot


def slot(slot_id, day, start, *, class_id="C1", teacher_id="T1", duration=60, subject="English"):
    return TimeSlot(
        id=slot_id,
        class_id=class_id,
        teacher_id=teacher_id,
        day_of_week=day,
        subject=subject,
        start_minutes=start,
        duration_minutes=duration,
    )


def test_sort_orders_by_week_then_start_time():
    slots = [
        slot("sat", Weekday.saturday, 480),
        slot("mon-late", Weekday.monday, 660),
        slot("wed", Weekday.wednesday, 540),
        slot("mon-early", Weekday.monday, 480),
    ]
    assert [s.id for s in sort_slots(slots)] == ["mon-early", "mon-late", "wed", "sat"]


def test_sort_is_stable_and_idempotent():
    slots = [
        slot("b", Weekday.tuesday, 540, teacher_id="T2"),
        slot("a", Weekday.tuesday, 540, teacher_id="T1"),
        slot("c", Weekday.monday, 600),
    ]
    once = sort_slots(slots)
    assert [s.id for s in once] == ["c", "b", "a"]
    assert sort_slots(once) == once


def test_used_time_labels_are_sorted_and_distinct():
    slots = [slot("1", Weekday.monday, 600), slot("2", Weekday.friday, 540), slot("3", Weekday.tuesday, 600)]
    assert used_time_labels(slots) == [540, 600]


def test_grid_only_materializes_active_days_and_used_times():
    slots = [
        slot("m9", Weekday.monday, 540),
        slot("m11", Weekday.monday, 660),
        slot("th9", Weekday.thursday, 540),
    ]
    grid = build_grid(slots)

    assert grid.class_id == "C1"
    assert grid.days == [Weekday.monday, Weekday.thursday]
    assert grid.time_labels == ["09:00", "11:00"]
    assert [s.id for s in grid.cell(Weekday.monday, "09:00")] == ["m9"]
    assert grid.cell(Weekday.thursday, "11:00") == FREE

    rows = grid.rows()
    assert [label for label, _ in rows] == ["09:00", "11:00"]
    nine, eleven = rows
    assert [[s.id for s in cell] for cell in nine[1]] == [["m9"], ["th9"]]
    assert eleven[1][1] == FREE


def test_empty_grid():
    grid = build_grid([])
    assert grid.is_empty()
    assert grid.class_id is None
    assert grid.rows() == []


def test_grid_refuses_mixed_classes():
    with pytest.raises(SchedulerError) as excinfo:
        build_grid([slot("1", Weekday.monday, 540, class_id="C1"), slot("2", Weekday.monday, 600, class_id="C2")])
    assert excinfo.value.status_code == 400
    assert excinfo.value.details == {"classIds": ["C1", "C2"]}


def test_group_by_class_sorts_entries_and_keeps_first_seen_class_order():
    slots = [
        slot("c2-fri", Weekday.friday, 540, class_id="C2"),
        slot("c1-tue", Weekday.tuesday, 600, class_id="C1"),
        slot("c2-mon", Weekday.monday, 600, class_id="C2"),
        slot("c1-mon", Weekday.monday, 540, class_id="C1"),
    ]
    groups = group_by_class(slots, class_info={"C1": {"name": "Grade 7 A", "floor": 2}})

    assert list(groups) == ["C2", "C1"]
    assert [s.id for s in groups["C2"].entries] == ["c2-mon", "c2-fri"]
    assert [s.id for s in groups["C1"].entries] == ["c1-mon", "c1-tue"]
    assert groups["C1"].class_info == {"name": "Grade 7 A", "floor": 2, "id": "C1"}
    assert groups["C2"].class_info == {"id": "C2"}


def test_group_by_class_is_idempotent_on_sorted_input():
    slots = [
        slot("x", Weekday.wednesday, 600),
        slot("y", Weekday.monday, 540),
        slot("z", Weekday.monday, 540, teacher_id="T2"),
    ]
    first = group_by_class(slots)["C1"].entries
    second = group_by_class(first)["C1"].entries
    assert [s.id for s in first] == ["y", "z", "x"]
    assert second == first


def test_group_by_day_lists_only_active_days_in_week_order():
    slots = [slot("f", Weekday.friday, 540), slot("m", Weekday.monday, 600), slot("m2", Weekday.monday, 540)]
    week = group_by_day(slots)
    assert list(week) == [Weekday.monday, Weekday.friday]
    assert [s.id for s in week[Weekday.monday]] == ["m2", "m"]

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from timetable_service.core.exceptions import SchedulerError
from timetable_service.models.timetable_slot import DAY_INDEX, WEEK_ORDER, Weekday
from timetable_service.services.slot_types import TimeSlot
from timetable_service.services.time_arithmetic import format_minutes

FREE = "free"


def canonical_key(slot: TimeSlot) -> tuple[int, int]:
    return DAY_INDEX[slot.day_of_week], slot.start_minutes


def sort_slots(slots: Iterable[TimeSlot]) -> list[TimeSlot]:
    # sorted() is stable: equal (day, start) keep their input order.
    return sorted(slots, key=canonical_key)


def used_time_labels(slots: Iterable[TimeSlot]) -> list[int]:
    return sorted({slot.start_minutes for slot in slots})


@dataclass
class Grid:
    class_id: str | None
    days: list[Weekday] = field(default_factory=list)
    times: list[int] = field(default_factory=list)
    cells: dict[tuple[Weekday, str], list[TimeSlot]] = field(default_factory=dict)

    @property
    def time_labels(self) -> list[str]:
        return [format_minutes(minutes) for minutes in self.times]

    def cell(self, day: Weekday, label: str) -> list[TimeSlot] | str:
        return self.cells.get((day, label)) or FREE

    def rows(self) -> list[tuple[str, list[list[TimeSlot] | str]]]:
        return [(label, [self.cell(day, label) for day in self.days]) for label in self.time_labels]

    def is_empty(self) -> bool:
        return not self.cells


def build_grid(slots_for_one_class: Iterable[TimeSlot]) -> Grid:
    """Lay out one class's week as a sparse day x start-time matrix.

    Only days with at least one lecture become columns and only start times
    that are actually used become rows; everything else in the matrix is
    ``FREE``.
    """
    ordered = sort_slots(slots_for_one_class)
    class_ids = {slot.class_id for slot in ordered}
    if len(class_ids) > 1:
        raise SchedulerError(
            "A grid can only be built for a single class",
            details={"classIds": sorted(class_ids)},
        )

    grid = Grid(class_id=next(iter(class_ids), None))
    present_days = {slot.day_of_week for slot in ordered}
    grid.days = [day for day in WEEK_ORDER if day in present_days]
    grid.times = used_time_labels(ordered)
    for slot in ordered:
        grid.cells.setdefault((slot.day_of_week, format_minutes(slot.start_minutes)), []).append(slot)
    return grid


@dataclass
class ClassGroup:
    class_info: dict
    entries: list[TimeSlot] = field(default_factory=list)


def group_by_class(
    all_slots: Iterable[TimeSlot],
    class_info: Mapping[str, dict] | None = None,
) -> dict[str, ClassGroup]:
    """Group slots by class for reports; classes keep first-seen order and each
    group's entries are in canonical Monday-to-Saturday, start-time order."""
    lookup = class_info or {}
    groups: dict[str, ClassGroup] = {}
    for slot in all_slots:
        group = groups.get(slot.class_id)
        if group is None:
            info = dict(lookup.get(slot.class_id) or {})
            info.setdefault("id", slot.class_id)
            group = groups[slot.class_id] = ClassGroup(class_info=info)
        group.entries.append(slot)
    for group in groups.values():
        group.entries = sort_slots(group.entries)
    return groups


def group_by_day(slots: Iterable[TimeSlot]) -> dict[Weekday, list[TimeSlot]]:
    """Canonically ordered slots bucketed by active day (used for teacher schedules)."""
    week: dict[Weekday, list[TimeSlot]] = {}
    for slot in sort_slots(slots):
        week.setdefault(slot.day_of_week, []).append(slot)
    return week

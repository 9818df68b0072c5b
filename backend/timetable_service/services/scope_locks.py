from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from threading import Lock
from weakref import WeakValueDictionary

from timetable_service.models.timetable_slot import Weekday
from timetable_service.services.slot_types import SlotCandidate, TimeSlot, coerce_weekday

ScopeKey = tuple[str, str, str]


def scope_keys(slots: Iterable[SlotCandidate | TimeSlot]) -> set[ScopeKey]:
    """The (teacher, day) and (class, day) scopes a set of slots touches."""
    keys: set[ScopeKey] = set()
    for slot in slots:
        day = coerce_weekday(slot.day_of_week)
        day_label = day.value if isinstance(day, Weekday) else str(slot.day_of_week)
        keys.add(("teacher", str(slot.teacher_id).strip(), day_label))
        keys.add(("class", str(slot.class_id).strip(), day_label))
    return keys


class ScopeLocks:
    """Per-scope mutexes so a conflict check and its commit are atomic with
    respect to other writers in this process."""

    def __init__(self) -> None:
        # A scope's lock lives only while some writer holds a reference to it.
        self._locks: WeakValueDictionary[ScopeKey, Lock] = WeakValueDictionary()
        self._registry_lock = Lock()

    def _lock_for(self, key: ScopeKey) -> Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = Lock()
            return lock

    @contextmanager
    def hold(self, keys: Iterable[ScopeKey]) -> Iterator[None]:
        # A global acquisition order keeps two multi-scope writers from deadlocking.
        locks = [self._lock_for(key) for key in sorted(set(keys))]
        acquired: list[Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def active_scopes(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    def clear(self) -> None:
        with self._registry_lock:
            self._locks.clear()


_scope_locks = ScopeLocks()


def get_scope_locks() -> ScopeLocks:
    return _scope_locks

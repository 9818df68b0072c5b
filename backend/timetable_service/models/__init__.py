from timetable_service.models.timetable_slot import LectureType, TimetableSlot, Weekday  # noqa: F401

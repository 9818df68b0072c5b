import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Enum as SAEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetable_service.db.base import Base


class Weekday(str, Enum):
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"


class LectureType(str, Enum):
    theory = "Theory"
    practical = "Practical"
    lab = "Lab"
    tutorial = "Tutorial"
    seminar = "Seminar"


WEEK_ORDER: tuple[Weekday, ...] = tuple(Weekday)
DAY_INDEX: dict[Weekday, int] = {day: index for index, day in enumerate(WEEK_ORDER)}


class TimetableSlot(Base):
    __tablename__ = "timetable_slots"
    __table_args__ = (
        Index("ix_timetable_slots_class_day_start", "class_id", "day_of_week", "start_minutes"),
        Index("ix_timetable_slots_teacher_day_start", "teacher_id", "day_of_week", "start_minutes"),
        CheckConstraint("duration_minutes BETWEEN 30 AND 180", name="ck_timetable_slots_duration"),
        CheckConstraint(
            "start_minutes >= 0 AND start_minutes + duration_minutes <= 1439",
            name="ck_timetable_slots_within_day",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    class_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    day_of_week: Mapped[Weekday] = mapped_column(SAEnum(Weekday, name="weekday"), nullable=False)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    lecture_type: Mapped[LectureType] = mapped_column(
        SAEnum(LectureType, name="lecture_type"), nullable=False, default=LectureType.theory
    )
    start_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    academic_year: Mapped[str | None] = mapped_column(String(9), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

"""create timetable slots

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    weekday = sa.Enum(
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", name="weekday"
    )
    lecture_type = sa.Enum("theory", "practical", "lab", "tutorial", "seminar", name="lecture_type")

    op.create_table(
        "timetable_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=64), nullable=False),
        sa.Column("teacher_id", sa.String(length=64), nullable=False),
        sa.Column("day_of_week", weekday, nullable=False),
        sa.Column("subject", sa.String(length=100), nullable=False),
        sa.Column("lecture_type", lecture_type, nullable=False),
        sa.Column("start_minutes", sa.Integer(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=True),
        sa.Column("academic_year", sa.String(length=9), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("duration_minutes BETWEEN 30 AND 180", name="ck_timetable_slots_duration"),
        sa.CheckConstraint(
            "start_minutes >= 0 AND start_minutes + duration_minutes <= 1439",
            name="ck_timetable_slots_within_day",
        ),
    )
    op.create_index("ix_timetable_slots_class_id", "timetable_slots", ["class_id"])
    op.create_index("ix_timetable_slots_teacher_id", "timetable_slots", ["teacher_id"])
    op.create_index(
        "ix_timetable_slots_class_day_start",
        "timetable_slots",
        ["class_id", "day_of_week", "start_minutes"],
    )
    op.create_index(
        "ix_timetable_slots_teacher_day_start",
        "timetable_slots",
        ["teacher_id", "day_of_week", "start_minutes"],
    )


def downgrade() -> None:
    op.drop_index("ix_timetable_slots_teacher_day_start", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_class_day_start", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_teacher_id", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_class_id", table_name="timetable_slots")
    op.drop_table("timetable_slots")
    sa.Enum(name="lecture_type").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="weekday").drop(op.get_bind(), checkfirst=True)

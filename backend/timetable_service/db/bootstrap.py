from __future__ import annotations

import logging

from sqlalchemy import inspect

from timetable_service.db.base import Base
from timetable_service.db.session import engine
import timetable_service.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "timetable_slots": {
        "id",
        "class_id",
        "teacher_id",
        "day_of_week",
        "subject",
        "lecture_type",
        "start_minutes",
        "duration_minutes",
    },
}


def ensure_schema() -> None:
    """Create missing tables, then log any required column still absent."""
    Base.metadata.create_all(bind=engine)

    inspector = inspect(engine)
    table_names = set(inspector.get_table_names())
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            logger.warning("Table %s is missing; run `alembic upgrade head`", table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(columns - existing)
        if missing:
            logger.warning("Table %s is missing column(s): %s", table_name, ", ".join(missing))

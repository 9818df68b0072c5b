from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.orm import Session

from timetable_service.api.deps import get_db
from timetable_service.db.bootstrap import REQUIRED_COLUMNS

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready(db: Session = Depends(get_db)) -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    db_error: str | None = None

    try:
        connection = db.connection()
        connection.execute(text("SELECT 1"))
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, columns in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing_tables.append(table_name)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(columns - existing)
            if missing:
                missing_columns[table_name] = missing
    except Exception as exc:  # pragma: no cover - environment dependent
        db_ok = False
        db_error = str(exc)

    schema_ok = not missing_tables and not missing_columns
    ready = db_ok and schema_ok

    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": schema_ok,
            "missing_tables": missing_tables,
            "missing_columns": missing_columns,
            "error": db_error,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from timetable_service.db.session import SessionLocal
from timetable_service.services.schedule_mutation import ScheduleMutationService
from timetable_service.services.scope_locks import get_scope_locks
from timetable_service.services.slot_store import SqlAlchemySlotStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_slot_service(db: Session = Depends(get_db)) -> ScheduleMutationService:
    return ScheduleMutationService(SqlAlchemySlotStore(db), get_scope_locks())

from timetable_service.core.exceptions import (
    AppError,
    BatchRejected,
    NotFound,
    ParseError,
    SchedulerError,
)
from timetable_service.models.timetable_slot import Weekday
from timetable_service.services.slot_types import BatchFailure, Conflict, ConflictKind, SlotValidationError


def test_scheduler_error_structure():
    err = SchedulerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_parse_error_is_also_a_value_error():
    err = ParseError("7:5")
    assert isinstance(err, ValueError)
    assert err.status_code == 422
    assert err.details == {"value": "7:5"}


def test_not_found_names_the_resource():
    err = NotFound("Timetable slot", "abc")
    assert err.status_code == 404
    assert err.message == "Timetable slot with id abc not found"


def test_batch_status_depends_on_failure_kind():
    conflict = Conflict(ConflictKind.klass, "s1", Weekday.tuesday, 600, 630)
    conflicts_only = BatchRejected([BatchFailure(index=0, conflicts=(conflict,))])
    assert conflicts_only.status_code == 409
    assert conflicts_only.details["failures"][0]["conflicts"][0]["overlapEnd"] == "10:30"

    error = SlotValidationError("InvalidDay", "day_of_week", "bad day")
    mixed = BatchRejected([BatchFailure(index=0, conflicts=(conflict,)), BatchFailure(index=3, errors=(error,))])
    assert mixed.status_code == 422
    assert [failure["index"] for failure in mixed.details["failures"]] == [0, 3]

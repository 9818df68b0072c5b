from __future__ import annotations


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class SchedulerError(AppError):
    """Raised when the scheduler is asked to do something that makes no sense."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class ParseError(AppError, ValueError):
    """Raised for a malformed ``HH:MM`` time string."""
    def __init__(self, value: object, reason: str = "Time must be in HH:MM 24-hour format"):
        self.value = value
        super().__init__(f"{reason}: {value!r}", status_code=422, details={"value": str(value)})


class NotFound(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)


class ValidationFailed(AppError):
    """One or more structural problems with a candidate slot, reported together."""
    def __init__(self, errors: list, message: str = "Timetable slot failed validation"):
        self.errors = list(errors)
        super().__init__(
            message,
            status_code=422,
            details={"errors": [error.as_dict() for error in self.errors]},
        )


class ConflictDetected(AppError):
    """The mutation would double-book a teacher or a class."""
    def __init__(self, conflicts: list, message: str = "Time conflict detected"):
        self.conflicts = list(conflicts)
        super().__init__(
            message,
            status_code=409,
            details={"conflicts": [conflict.as_dict() for conflict in self.conflicts]},
        )


class BatchRejected(AppError):
    """A batch had at least one bad candidate; nothing was committed."""
    def __init__(self, failures: list):
        self.failures = list(failures)
        has_validation_errors = any(failure.errors for failure in self.failures)
        super().__init__(
            f"Batch rejected: {len(self.failures)} candidate(s) failed",
            status_code=422 if has_validation_errors else 409,
            details={"failures": [failure.as_dict() for failure in self.failures]},
        )

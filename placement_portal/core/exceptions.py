"""Custom exceptions for the application."""

from typing import Any

from fastapi import HTTPException, status


class ApplicationError(Exception):
    """Base exception for application errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationFailedError(ApplicationError):
    """Raised when a request is well-formed but semantically invalid."""


class InvalidTransitionError(ApplicationError):
    """Raised when an application is not in a state that allows the operation."""

    def __init__(self, application_id: int, current: str, operation: str):
        self.application_id = application_id
        self.current = current
        self.operation = operation
        super().__init__(
            f"Cannot {operation} application {application_id} in status {current}"
        )


class PermissionDeniedError(ApplicationError):
    """Raised when the caller is not allowed to act on a resource."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApplicationError):
    """Raised when a referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class DuplicateApplicationError(ApplicationError):
    """Raised when a student already has an open application for an internship."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, student_id: int, internship_id: int):
        self.student_id = student_id
        self.internship_id = internship_id
        super().__init__(
            f"Student {student_id} has already applied to internship {internship_id}"
        )


class DuplicateFeedbackError(ApplicationError):
    """Raised when feedback was already recorded for an application."""

    def __init__(self, application_id: int):
        self.application_id = application_id
        super().__init__("Feedback already exists for this application")


class StaleVersionError(ApplicationError):
    """Raised when a write is based on an outdated application version."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        application_id: int | None,
        expected: int | None = None,
        actual: int | None = None,
    ):
        self.application_id = application_id
        self.expected = expected
        self.actual = actual
        subject = "Application" if application_id is None else f"Application {application_id}"
        if expected is None:
            message = f"{subject} was modified concurrently; reload and retry"
        else:
            message = (
                f"{subject} was modified concurrently "
                f"(expected version {expected}, current version {actual})"
            )
        super().__init__(message)


class OfferConflictError(ApplicationError):
    """Raised when an application already has an open offer."""

    status_code = status.HTTP_409_CONFLICT


class SchedulingConflictError(ApplicationError):
    """Raised when a proposed interview overlaps existing calendar events."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, report: dict[str, Any]):
        self.report = report
        super().__init__("Scheduling conflict detected")


def to_http_exception(error: ApplicationError) -> HTTPException:
    """Convert a domain error into an HTTPException with a matching status."""
    if isinstance(error, SchedulingConflictError):
        return HTTPException(
            status_code=error.status_code,
            detail={"message": error.message, "conflict_check": error.report},
        )
    return HTTPException(status_code=error.status_code, detail=error.message)


def unauthorized_exception(detail: str = "Not authenticated") -> HTTPException:
    """Return a 401 Unauthorized exception."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden_exception(detail: str = "Insufficient permissions") -> HTTPException:
    """Return a 403 Forbidden exception."""
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail,
    )

"""Error taxonomy shared by all learntrack components.

- ValidationError: malformed identifiers or payload shape (400)
- NotFoundError: course/module/lesson/quiz absent (404)
- BenignConflict: duplicate relation, absorbed by the relation store
- UpstreamError: storage failure (500)

Batch partial failures are reported as counts in the batch result,
never raised.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from cassandra import DriverException
from fastapi import HTTPException, status


class LearntrackError(Exception):
    """Base error for all domain failures."""

    def __init__(self, message: str, code: str = "learntrack_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(LearntrackError):
    """Malformed input that passed schema validation."""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, "validation_error")


class NotFoundError(LearntrackError):
    """Referenced entity does not exist."""

    def __init__(self, message: str = "Resource not found", code: str = "not_found"):
        super().__init__(message, code)


class CourseNotFoundError(NotFoundError):
    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class ModuleNotFoundError(NotFoundError):
    def __init__(self, message: str = "Module not found"):
        super().__init__(message, "module_not_found")


class LessonNotFoundError(NotFoundError):
    def __init__(self, message: str = "Lesson not found"):
        super().__init__(message, "lesson_not_found")


class BenignConflict(LearntrackError):
    """Write collided with an identical existing record."""

    def __init__(self, message: str = "Record already exists", code: str = "conflict"):
        super().__init__(message, code)


class UpstreamError(LearntrackError):
    """Storage layer failed."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, "upstream_error")


# Category name used in the structured error body, by HTTP status
ERROR_CATEGORIES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthenticated",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "internal_error",
    status.HTTP_503_SERVICE_UNAVAILABLE: "service_unavailable",
}


def status_for(error: LearntrackError) -> int:
    """HTTP status for a domain error."""
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, BenignConflict):
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_category(status_code: int) -> str:
    """Category name for an HTTP status code."""
    if status_code in ERROR_CATEGORIES:
        return ERROR_CATEGORIES[status_code]
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return "internal_error"
    return "request_error"


def handle_error(error: LearntrackError) -> HTTPException:
    """Convert a domain error to an HTTP exception.

    Upstream failures never leak storage details to the caller.
    """
    status_code = status_for(error)
    detail = (
        "Internal server error"
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
        else error.message
    )
    return HTTPException(status_code=status_code, detail=detail)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise Cassandra driver failures as UpstreamError."""
    try:
        yield
    except (DriverException, ConnectionError) as e:
        msg = f"{operation} failed: {e}"
        raise UpstreamError(msg) from e

"""Custom application exceptions."""

from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, extra: dict[str, Any] | None = None):
        """Initialize exception with message, status code and extra body fields."""
        self.message = message
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception.

    Raised for uniqueness violations and for deletes blocked by references.
    """

    def __init__(self, message: str = "Conflict", extra: dict[str, Any] | None = None):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409, extra=extra)


class ValidationException(AppException):
    """Validation error raised after a payload reached the service layer."""

    def __init__(self, message: str = "Validation error", details: list | None = None):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400, extra={"details": details or []})


class IndexOutOfRangeException(NotFoundException):
    """Array position does not address an existing element."""

    def __init__(self, message: str = "index out of range"):
        """Initialize with 404 status code."""
        super().__init__(message)


def validation_details(exc: Any) -> list[dict[str, Any]]:
    """Reduce pydantic or FastAPI validation errors to JSON-safe dicts."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]

from __future__ import annotations

from fastapi import status


class ClinicError(Exception):
    """Base class for errors that map onto an HTTP error response.

    The API layer renders these as ``{"error": {"code": ..., "message": ...}}``
    using ``status_code`` for the response status.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "Server Error"

    def __init__(self, message: str, *, status_code: int | None = None, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class ValidationFailed(ClinicError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "Validation Error"


class InvalidTimeFrame(ValidationFailed, ValueError):
    """Raised for a time-frame token outside ``1d``/``1w``/``1m``/``6m``/``1y``."""

    def __init__(self, token: object) -> None:
        super().__init__(f"Invalid time frame: {token}")
        self.token = token


class NotFound(ClinicError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "Not Found"


class Conflict(ClinicError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "Conflict"


class DataSourceUnavailable(ClinicError):
    """The backing record store is unreachable or was never initialized."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "Database Error"


class AIServiceUnavailable(ClinicError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "Service Unavailable"


class AIGenerationError(ClinicError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "AI Generation Error"


class RateLimited(ClinicError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "Rate Limit Exceeded"


def require_fields(data: dict, required: list[str]) -> None:
    """Raise ValidationFailed when any required field is missing or blank.

    ``0``, ``False`` and datetime values count as present; ``None`` and
    whitespace-only strings do not.
    """

    missing = [
        name
        for name in required
        if data.get(name) is None or (isinstance(data.get(name), str) and not data[name].strip())
    ]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")

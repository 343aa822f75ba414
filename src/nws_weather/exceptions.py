"""Custom exception hierarchy for the application."""

from enum import Enum


class AppError(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ConfigurationError(AppError):
    """Raised when an environment variable holds an unusable value."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")


class FailureKind(Enum):
    """Every way a weather lookup can fail, with its HTTP status and message."""

    MISSING_COORDINATE = (400, "Missing lat or lon query parameter")
    INVALID_COORDINATE = (400, "Invalid lat or lon value")
    GRIDPOINT_FETCH_FAILED = (500, "Failed to get gridpoint info")
    GRIDPOINT_PARSE_FAILED = (500, "Failed to parse gridpoint response")
    NO_FORECAST_URL = (404, "No forecast URL found for location")
    FORECAST_FETCH_FAILED = (500, "Failed to get forecast")
    FORECAST_PARSE_FAILED = (500, "Failed to parse forecast response")
    NO_FORECAST_DATA = (404, "No forecast data found")

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message


class WeatherLookupError(AppError):
    """Raised when a weather lookup fails at any step.

    The client-facing message comes from the failure kind. ``detail`` is
    for logs only.
    """

    def __init__(self, kind: FailureKind, detail: str | None = None) -> None:
        super().__init__(kind.message, code=kind.name)
        self.kind = kind
        self.detail = detail

    @property
    def status_code(self) -> int:
        return self.kind.status_code


class LookupCancelledError(AppError):
    """Raised when a lookup is abandoned because its request went away."""

    def __init__(self) -> None:
        super().__init__("Weather lookup cancelled", code="LOOKUP_CANCELLED")

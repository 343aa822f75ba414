"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

from nws_weather.exceptions import ConfigurationError

DEFAULT_POINTS_BASE_URL = "https://api.weather.gov/points"
DEFAULT_USER_AGENT = "nws-weather/0.1 (weather lookup service)"


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from exc


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from exc


@dataclass(frozen=True, slots=True)
class Settings:
    """Application settings populated from environment variables."""

    points_base_url: str
    request_timeout_seconds: float
    lookup_timeout_seconds: float
    max_workers: int
    user_agent: str
    host: str
    port: int

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Returns:
            A frozen Settings instance with values from the environment.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed.
        """
        return cls(
            points_base_url=os.getenv("POINTS_BASE_URL", DEFAULT_POINTS_BASE_URL).rstrip("/"),
            request_timeout_seconds=_env_float("REQUEST_TIMEOUT_SECONDS", "10"),
            lookup_timeout_seconds=_env_float("LOOKUP_TIMEOUT_SECONDS", "20"),
            max_workers=_env_int("MAX_WORKERS", "32"),
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            host=os.getenv("HOST", "0.0.0.0"),  # noqa: S104
            port=_env_int("PORT", "8080"),
        )

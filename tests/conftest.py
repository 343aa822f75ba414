"""Shared test fixtures."""

import json
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from nws_weather.config import Settings
from nws_weather.weather.service import WeatherService

POINTS_BASE_URL = "http://nws.test/points"
FORECAST_URL = "http://x/forecast"


def make_response(status_code: int = 200, body: Any = None, raw: bytes | None = None) -> MagicMock:
    """Build a mock requests.Response usable as a context manager."""
    response = MagicMock()
    response.status_code = status_code
    response.content = raw if raw is not None else json.dumps(body).encode()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


class FakeUpstream:
    """Stands in for the NWS API by mapping URLs to canned responses.

    Unknown URLs behave like a refused connection.
    """

    def __init__(self) -> None:
        self.routes: dict[str, MagicMock | Exception] = {}
        self.calls: list[tuple[str, float | None]] = []

    def reply(self, url: str, status_code: int = 200, body: Any = None, raw: bytes | None = None) -> MagicMock:
        response = make_response(status_code, body, raw)
        self.routes[url] = response
        return response

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    def get(self, url: str, timeout: float | None = None) -> MagicMock:
        self.calls.append((url, timeout))
        entry = self.routes.get(url)
        if entry is None:
            raise requests.ConnectionError(f"Connection refused: {url}")
        if isinstance(entry, Exception):
            raise entry
        return entry


def gridpoint_body(forecast_url: str | None = FORECAST_URL) -> dict[str, Any]:
    return {"properties": {"forecast": forecast_url}}


def forecast_body(*periods: dict[str, Any]) -> dict[str, Any]:
    return {"properties": {"periods": list(periods)}}


def period(
    temperature: int = 85,
    unit: str = "F",
    detailed_forecast: str = "Clear skies",
    name: str = "Tonight",
) -> dict[str, Any]:
    return {
        "name": name,
        "detailedForecast": detailed_forecast,
        "temperature": temperature,
        "temperatureUnit": unit,
    }


@pytest.fixture
def settings() -> Settings:
    """Create test settings pointing at a fake upstream."""
    return Settings(
        points_base_url=POINTS_BASE_URL,
        request_timeout_seconds=5.0,
        lookup_timeout_seconds=30.0,
        max_workers=2,
        user_agent="nws-weather-tests",
        host="127.0.0.1",
        port=8080,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def session(upstream: FakeUpstream) -> MagicMock:
    """Create a mock requests.Session that routes GETs to the fake upstream."""
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = upstream.get
    return session


@pytest.fixture
def weather_service(settings: Settings, session: MagicMock) -> Generator[WeatherService, None, None]:
    """Create a WeatherService wired to the fake upstream."""
    service = WeatherService(settings, session_factory=lambda: session)
    yield service
    service.shutdown()

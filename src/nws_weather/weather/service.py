"""Weather lookup service backed by the National Weather Service API."""

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import requests
from pydantic import ValidationError

from nws_weather.config import Settings
from nws_weather.exceptions import FailureKind, LookupCancelledError, WeatherLookupError
from nws_weather.weather.classification import format_temperature
from nws_weather.weather.schemas import (
    Coordinate,
    ForecastPeriod,
    ForecastResponse,
    GridpointResponse,
    WeatherResult,
)

logger = logging.getLogger(__name__)

GEOJSON_MEDIA_TYPE = "application/geo+json"


class WeatherService:
    """Service for turning coordinates into a classified NWS forecast.

    A lookup is two sequential upstream calls: the gridpoint lookup yields the
    forecast URL, and the forecast call yields the periods. Both are blocking
    requests calls, so the route runs lookups on this service's thread pool.
    requests.Session is not documented as thread-safe, so each worker thread
    gets its own session from ``session_factory``; sessions only pool
    connections and no other state survives a lookup.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory
        self._local = threading.local()
        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=settings.max_workers)

    @property
    def executor(self) -> ThreadPoolExecutor:
        """Thread pool executor for running blocking I/O in async contexts."""
        return self._executor

    def new_deadline(self) -> float:
        """Monotonic deadline for a lookup that starts now."""
        return time.monotonic() + self._settings.lookup_timeout_seconds

    def _session(self) -> requests.Session:
        """Return the calling thread's session, creating it on first use."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            session.headers.update(
                {"User-Agent": self._settings.user_agent, "Accept": GEOJSON_MEDIA_TYPE}
            )
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    @staticmethod
    def parse_coordinates(lat: str | None, lon: str | None) -> Coordinate:
        """Parse raw query values into a Coordinate.

        Values outside [-90, 90] / [-180, 180] are accepted and passed on
        to the upstream API unchanged. Surrounding whitespace and digit
        separators ('1_000') are rejected even though float() allows them.

        Raises:
            WeatherLookupError: MISSING_COORDINATE if either value is absent or
                empty, INVALID_COORDINATE if either is not a decimal number.
        """
        if not lat or not lon:
            raise WeatherLookupError(FailureKind.MISSING_COORDINATE)

        try:
            for value in (lat, lon):
                if value != value.strip() or "_" in value:
                    raise ValueError(f"not a plain decimal number: {value!r}")
            latitude = float(lat)
            longitude = float(lon)
        except ValueError as exc:
            raise WeatherLookupError(
                FailureKind.INVALID_COORDINATE, detail=f"lat={lat!r} lon={lon!r}"
            ) from exc

        return Coordinate(latitude=latitude, longitude=longitude)

    def gridpoint_url(self, coordinate: Coordinate) -> str:
        return f"{self._settings.points_base_url}/{coordinate.path_segment}"

    def _fetch(
        self,
        url: str,
        failure: FailureKind,
        deadline: float,
        cancelled: threading.Event | None,
    ) -> bytes:
        """GET a URL and return its body, failing with ``failure`` on any error.

        The response is closed before returning on every path.
        """
        if cancelled is not None and cancelled.is_set():
            raise LookupCancelledError()

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning("Lookup deadline exceeded", extra={"url": url})
            raise WeatherLookupError(failure, detail="lookup deadline exceeded")
        timeout = min(self._settings.request_timeout_seconds, remaining)

        try:
            with self._session().get(url, timeout=timeout) as response:
                if response.status_code != 200:
                    logger.warning(
                        "Upstream returned non-200 status",
                        extra={"url": url, "status": response.status_code},
                    )
                    raise WeatherLookupError(
                        failure, detail=f"status {response.status_code} from {url}"
                    )
                return response.content
        except requests.RequestException as exc:
            logger.error("Upstream request failed", extra={"url": url, "error": str(exc)})
            raise WeatherLookupError(failure, detail=str(exc)) from exc

    def resolve_forecast_url(
        self,
        coordinate: Coordinate,
        *,
        deadline: float,
        cancelled: threading.Event | None = None,
    ) -> str:
        """Resolve a coordinate to the forecast URL of its NWS gridpoint.

        Raises:
            WeatherLookupError: GRIDPOINT_FETCH_FAILED, GRIDPOINT_PARSE_FAILED
                or NO_FORECAST_URL.
            LookupCancelledError: If ``cancelled`` is set before the call.
        """
        url = self.gridpoint_url(coordinate)
        body = self._fetch(url, FailureKind.GRIDPOINT_FETCH_FAILED, deadline, cancelled)

        try:
            gridpoint = GridpointResponse.model_validate_json(body)
        except ValidationError as exc:
            logger.error("Malformed gridpoint response", extra={"url": url, "error": str(exc)})
            raise WeatherLookupError(FailureKind.GRIDPOINT_PARSE_FAILED, detail=str(exc)) from exc

        forecast_url = gridpoint.properties.forecast
        if not forecast_url:
            raise WeatherLookupError(FailureKind.NO_FORECAST_URL, detail=url)
        return forecast_url

    def fetch_first_period(
        self,
        forecast_url: str,
        *,
        deadline: float,
        cancelled: threading.Event | None = None,
    ) -> ForecastPeriod:
        """Fetch a forecast and return its first (soonest) period.

        Raises:
            WeatherLookupError: FORECAST_FETCH_FAILED, FORECAST_PARSE_FAILED
                or NO_FORECAST_DATA.
            LookupCancelledError: If ``cancelled`` is set before the call.
        """
        body = self._fetch(forecast_url, FailureKind.FORECAST_FETCH_FAILED, deadline, cancelled)

        try:
            forecast = ForecastResponse.model_validate_json(body)
        except ValidationError as exc:
            logger.error(
                "Malformed forecast response",
                extra={"url": forecast_url, "error": str(exc)},
            )
            raise WeatherLookupError(FailureKind.FORECAST_PARSE_FAILED, detail=str(exc)) from exc

        if not forecast.properties.periods:
            raise WeatherLookupError(FailureKind.NO_FORECAST_DATA, detail=forecast_url)
        return forecast.properties.periods[0]

    def lookup(
        self,
        lat: str | None,
        lon: str | None,
        *,
        deadline: float | None = None,
        cancelled: threading.Event | None = None,
    ) -> WeatherResult:
        """Look up and classify the current forecast for raw 'lat'/'lon' values.

        Args:
            lat: Latitude query value in decimal degrees.
            lon: Longitude query value in decimal degrees.
            deadline: Monotonic time by which both upstream calls must finish.
                Defaults to ``new_deadline()`` taken now.
            cancelled: Set by the caller to abandon the lookup before its
                next upstream call.

        Returns:
            A WeatherResult built from the first forecast period.

        Raises:
            WeatherLookupError: On any validation, upstream or decoding failure.
            LookupCancelledError: If the lookup was abandoned.
        """
        if deadline is None:
            deadline = self.new_deadline()
        coordinate = self.parse_coordinates(lat, lon)

        forecast_url = self.resolve_forecast_url(coordinate, deadline=deadline, cancelled=cancelled)
        period = self.fetch_first_period(forecast_url, deadline=deadline, cancelled=cancelled)

        return WeatherResult(
            forecast=period.detailed_forecast,
            temperature=format_temperature(period),
        )

    def shutdown(self) -> None:
        """Shut down the thread pool executor and close every worker's session."""
        self._executor.shutdown(wait=False)
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

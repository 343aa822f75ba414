"""API routes for weather lookups."""

import asyncio
import functools
import logging
import threading
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, Response

from nws_weather.exceptions import WeatherLookupError
from nws_weather.weather.schemas import ErrorResponse, HealthResponse, WeatherResult
from nws_weather.weather.service import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["weather"])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}

DISCONNECT_POLL_SECONDS = 0.1
# nginx's status for a request the client abandoned; never reaches the client.
CLIENT_CLOSED_REQUEST = 499


def get_weather_service(request: Request) -> WeatherService:
    """FastAPI dependency that retrieves the WeatherService from app state."""
    service: WeatherService = request.app.state.weather_service
    return service


async def wait_for_disconnect(request: Request) -> None:
    """Return once the client behind ``request`` has disconnected."""
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


def error_response(exc: WeatherLookupError) -> JSONResponse:
    """Render a lookup failure as its status code and JSON error envelope."""
    body = ErrorResponse(code=exc.status_code, message=exc.kind.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@router.get(
    "/GetWeather",
    response_model=WeatherResult,
    responses=ERROR_RESPONSES,
    summary="Look up the current forecast for a coordinate",
)
async def get_weather(
    request: Request,
    service: Annotated[WeatherService, Depends(get_weather_service)],
    lat: Annotated[str | None, Query()] = None,
    lon: Annotated[str | None, Query()] = None,
) -> WeatherResult | Response:
    """Look up the forecast for a 'lat'/'lon' pair in decimal degrees.

    The lookup budget starts when the request arrives, so time spent queued
    for a worker counts against it. If the client disconnects first, the
    lookup is told to stop before its next upstream call.

    Args:
        request: The inbound request, watched for client disconnects.
        service: Injected WeatherService instance.
        lat: Latitude query parameter.
        lon: Longitude query parameter.

    Returns:
        The WeatherResult, or a JSON error envelope with the failure's status.
    """
    deadline = service.new_deadline()
    cancelled = threading.Event()
    loop = asyncio.get_running_loop()
    lookup = loop.run_in_executor(
        service.executor,
        functools.partial(service.lookup, lat, lon, deadline=deadline, cancelled=cancelled),
    )
    disconnect = asyncio.ensure_future(wait_for_disconnect(request))
    try:
        await asyncio.wait({lookup, disconnect}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        cancelled.set()
        lookup.cancel()
        raise
    finally:
        disconnect.cancel()

    if not lookup.done():
        cancelled.set()
        lookup.cancel()
        logger.info("Client disconnected, abandoning lookup", extra={"lat": lat, "lon": lon})
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    try:
        return lookup.result()
    except WeatherLookupError as exc:
        log = logger.info if exc.status_code < 500 else logger.error
        log(
            "Weather lookup failed",
            extra={"failure": exc.kind.name, "lat": lat, "lon": lon, "detail": exc.detail},
        )
        return error_response(exc)


@router.get("/healthz", response_model=HealthResponse, include_in_schema=False)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok")

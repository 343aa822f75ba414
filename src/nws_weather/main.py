"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from nws_weather.config import Settings
from nws_weather.weather.routes import router
from nws_weather.weather.service import WeatherService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown.

    Loads settings once, creates the weather service on startup and
    shuts down its thread pool and HTTP session on teardown.
    """
    settings = Settings.from_env()
    service = WeatherService(settings)
    app.state.settings = settings
    app.state.weather_service = service
    logger.info(
        "Weather service initialized",
        extra={"points_base_url": settings.points_base_url},
    )
    yield
    service.shutdown()
    logger.info("Weather service shut down")


app = FastAPI(title="NWS Weather Lookup", lifespan=lifespan)
app.include_router(router)


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    settings = Settings.from_env()
    logger.info("Server listening on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

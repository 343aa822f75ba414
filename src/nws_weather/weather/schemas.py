"""Pydantic schemas for the weather API and the upstream NWS payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    @property
    def path_segment(self) -> str:
        """The '{lat},{lon}' segment of the gridpoint URL, six decimals each."""
        return f"{self.latitude:f},{self.longitude:f}"


class UpstreamModel(BaseModel):
    """Base for NWS payloads.

    Values are type-checked strictly, but a JSON null (for the whole object
    or any field) falls back to the field's default, so ``null`` reads the
    same as an absent field.
    """

    model_config = ConfigDict(strict=True)

    @model_validator(mode="before")
    @classmethod
    def _nulls_to_defaults(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class GridpointProperties(UpstreamModel):
    forecast: str = ""


class GridpointResponse(UpstreamModel):
    """Subset of the NWS /points response used to locate the forecast."""

    properties: GridpointProperties = Field(default_factory=GridpointProperties)


class ForecastPeriod(UpstreamModel):
    """One named time window of an NWS forecast."""

    name: str = ""
    detailed_forecast: str = Field(default="", alias="detailedForecast")
    temperature: int = 0
    temperature_unit: str = Field(default="", alias="temperatureUnit")


class ForecastProperties(UpstreamModel):
    periods: list[ForecastPeriod] = Field(default_factory=list)


class ForecastResponse(UpstreamModel):
    """Subset of the NWS forecast response holding the ordered periods."""

    properties: ForecastProperties = Field(default_factory=ForecastProperties)


class WeatherResult(BaseModel):
    """Response schema for the weather lookup endpoint."""

    forecast: str
    temperature: str


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed lookup."""

    code: int
    message: str


class HealthResponse(BaseModel):
    status: str

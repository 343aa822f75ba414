"""Coarse Hot/Cold/Moderate labels for forecast temperatures."""

from enum import Enum

from nws_weather.weather.schemas import ForecastPeriod

FAHRENHEIT = "F"
CELSIUS = "C"

# (hot at or above, cold at or below)
THRESHOLDS: dict[str, tuple[int, int]] = {
    FAHRENHEIT: (81, 45),
    CELSIUS: (27, 7),
}


class TemperatureClass(str, Enum):
    HOT = "Hot"
    COLD = "Cold"
    MODERATE = "Moderate"


def display_unit(unit: str) -> str:
    """Return 'F' for Fahrenheit readings and 'C' for anything else."""
    return FAHRENHEIT if unit == FAHRENHEIT else CELSIUS


def classify_temperature(temperature: int, unit: str) -> TemperatureClass:
    """Classify a temperature using the threshold table for its unit.

    Any unit other than Fahrenheit is treated as Celsius.
    """
    hot_at, cold_at = THRESHOLDS[display_unit(unit)]
    if temperature >= hot_at:
        return TemperatureClass.HOT
    if temperature <= cold_at:
        return TemperatureClass.COLD
    return TemperatureClass.MODERATE


def format_temperature(period: ForecastPeriod) -> str:
    """Render a period's temperature as e.g. 'Hot (85 F)'."""
    label = classify_temperature(period.temperature, period.temperature_unit)
    return f"{label.value} ({period.temperature} {display_unit(period.temperature_unit)})"

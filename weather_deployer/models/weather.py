"""Weather payload models and WMO code translation."""

from pydantic import BaseModel

# Checked in order; each entry is (first code, last code, description).
WEATHER_CODE_RANGES = (
    (0, 0, "Clear sky"),
    (1, 1, "Mainly clear"),
    (2, 2, "Partly cloudy"),
    (3, 3, "Overcast"),
    (45, 48, "Fog"),
    (51, 55, "Drizzle"),
    (56, 57, "Freezing Drizzle"),
    (61, 65, "Rain"),
    (66, 67, "Freezing Rain"),
    (71, 75, "Snow fall"),
    (77, 77, "Snow grains"),
    (80, 82, "Rain showers"),
    (85, 86, "Snow showers"),
    (95, 95, "Thunderstorm"),
    (96, 96, "Thunderstorm with hail"),
    (99, 99, "Thunderstorm with hail"),
)
UNKNOWN_WEATHER = "Unknown weather condition"


def weather_code_to_description(code: int) -> str:
    """Translate a WMO weather interpretation code into a description.

    Args:
        code: Integer weather code reported by Open-Meteo.

    Returns:
        A human-readable description, or "Unknown weather condition" for
        codes outside the documented ranges.
    """
    for low, high, description in WEATHER_CODE_RANGES:
        if low <= code <= high:
            return description
    return UNKNOWN_WEATHER


class CurrentConditions(BaseModel):
    """The ``current`` block of a forecast response."""

    temperature_2m: float
    weather_code: int


class ForecastResponse(BaseModel):
    """Current weather payload returned by the forecast API."""

    current: CurrentConditions

    @property
    def description(self) -> str:
        return weather_code_to_description(self.current.weather_code)

"""Open-Meteo integration: geocoding, current weather and timezone lookups."""

import os
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from pydantic import BaseModel, ValidationError

from weather_deployer.logging_config import logger
from weather_deployer.models.city import CityData, GeocodingResponse, TimezoneResponse
from weather_deployer.models.weather import ForecastResponse

GEOCODING_API_URL = os.getenv(
    "GEOCODING_API_URL", "https://geocoding-api.open-meteo.com/v1/search"
)
FORECAST_API_URL = os.getenv("FORECAST_API_URL", "https://api.open-meteo.com/v1/forecast")
REQUEST_TIMEOUT_S = float(os.getenv("WEATHER_API_TIMEOUT", "10"))

CLEAR_CONDITIONS = ("Clear", "Mainly clear", "Clear sky", "Sunny")
FAHRENHEIT_COUNTRIES = ("United States", "USA")
BUSINESS_HOURS_START = 9
BUSINESS_HOURS_END = 17


class WeatherServiceError(Exception):
    """Base exception for weather service failures."""
    pass


class CityNotFoundError(WeatherServiceError):
    """Raised when a city lookup returns no results."""
    pass


class ExternalAPIError(WeatherServiceError):
    """Raised when an Open-Meteo call fails or returns an unusable payload."""
    pass


class WeatherService(Protocol):
    """Capabilities the deployment evaluator and request handler rely on."""

    def get_city_data(self, city: str, country: str) -> CityData:
        ...

    def is_clear_or_sunny(self, weather: str) -> bool:
        """True only for an exact match against the clear or sunny descriptions."""
        ...

    def is_business_hours(self, moment: datetime) -> bool:
        ...

    def format_temperature(self, city: CityData) -> str:
        """Temperature string in the unit the country expects."""
        ...


def celsius_to_fahrenheit(celsius: float) -> float:
    """Convert a Celsius temperature to Fahrenheit."""
    return celsius * 9 / 5 + 32


def format_local_time(moment: datetime) -> str:
    """Render a time as ``3:04 PM``: 12-hour clock, no leading zero."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def local_time_in(timezone_name: str, now: datetime) -> datetime:
    """Convert ``now`` into the named zone, falling back to UTC.

    Args:
        timezone_name: IANA timezone identifier, e.g. ``Europe/London``.
        now: An aware datetime.

    Returns:
        ``now`` expressed in the zone, or in UTC if the zone is unknown.
    """
    try:
        zone = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        logger.warning("TIMEZONE_FALLBACK_UTC", timezone=timezone_name, error=str(exc))
        return now.astimezone(timezone.utc)
    return now.astimezone(zone)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _request(
    *,
    url: str,
    params: dict,
    api_name: str,
    event_prefix: str,
    log_context: dict,
    timeout: float,
) -> httpx.Response:
    """Execute a single HTTP GET with consistent logging.

    Transient failures are not retried.

    Args:
        url: The URL to call.
        params: Query parameters to include in the request.
        api_name: Short API name used in error details.
        event_prefix: Log event prefix for consistent names.
        log_context: Extra log fields for all events.
        timeout: Request timeout in seconds.

    Returns:
        The HTTP response, guaranteed to have status 200.

    Raises:
        ExternalAPIError: When the request fails or the status is not 200.
    """
    try:
        response = httpx.get(url, params=params, timeout=timeout)
    except httpx.HTTPError as exc:
        logger.error(f"{event_prefix}_REQUEST_FAILED", **log_context, error=str(exc))
        raise ExternalAPIError(f"{api_name} API request failed: {exc}") from exc

    logger.debug(f"{event_prefix}_RESPONSE", **log_context, status=response.status_code)
    if response.status_code != 200:
        logger.error(f"{event_prefix}_BAD_STATUS", **log_context, status=response.status_code)
        raise ExternalAPIError(
            f"{api_name} API returned non-200 status: {response.status_code}"
        )
    return response


def _parse(
    response: httpx.Response,
    model: type[BaseModel],
    *,
    api_name: str,
    event_prefix: str,
    log_context: dict,
):
    """Validate a response body against ``model``.

    Raises:
        ExternalAPIError: If the body is not JSON or does not fit the model.
    """
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        logger.error(f"{event_prefix}_BAD_PAYLOAD", **log_context, error=str(exc))
        raise ExternalAPIError(f"failed to parse {api_name} response: {exc}") from exc


class OpenMeteoWeatherService:
    """WeatherService backed by the public Open-Meteo APIs.

    Every call to ``get_city_data`` makes three fresh requests; nothing is
    cached between calls.
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT_S,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.timeout = timeout
        self.now = now or _utc_now

    def get_city_data(self, city: str, country: str) -> CityData:
        """Resolve a city into coordinates, weather and local time.

        Args:
            city: City name, free text.
            country: Country name, used to pick among geocoding candidates.

        Returns:
            A fully populated CityData.

        Raises:
            CityNotFoundError: If the geocoder has no candidates.
            ExternalAPIError: If any of the three lookups fails.
        """
        latitude, longitude = self.get_geolocation(city, country)
        weather, temp_c = self.get_current_weather(latitude, longitude)
        timezone_name = self.get_timezone(latitude, longitude)

        return CityData(
            name=city,
            country=country,
            latitude=latitude,
            longitude=longitude,
            timezone=timezone_name,
            local_time=local_time_in(timezone_name, self.now()),
            weather=weather,
            temp_c=temp_c,
            temp_f=celsius_to_fahrenheit(temp_c),
        )

    def get_geolocation(self, city: str, country: str) -> tuple[float, float]:
        """Geocode a city, preferring the candidate in ``country``.

        Args:
            city: City name to search for.
            country: Country name used to choose among candidates.

        Returns:
            The latitude and longitude of the chosen candidate.

        Raises:
            CityNotFoundError: If the search returns no candidates.
            ExternalAPIError: If the request or its payload is unusable.
        """
        log_context = {"city": city, "country": country}
        response = _request(
            url=GEOCODING_API_URL,
            params={"name": city, "count": 1, "language": "en", "format": "json"},
            api_name="geocoding",
            event_prefix="CITY_LOOKUP",
            log_context=log_context,
            timeout=self.timeout,
        )
        payload = _parse(
            response,
            GeocodingResponse,
            api_name="geocoding",
            event_prefix="CITY_LOOKUP",
            log_context=log_context,
        )

        match = payload.best_match(country)
        if match is None:
            logger.info("CITY_NOT_FOUND", **log_context)
            raise CityNotFoundError(f"city not found: {city}, {country}")
        return match.latitude, match.longitude

    def get_current_weather(self, latitude: float, longitude: float) -> tuple[str, float]:
        """Fetch current conditions at a location.

        Args:
            latitude: Latitude in decimal degrees.
            longitude: Longitude in decimal degrees.

        Returns:
            The weather description and the temperature in Celsius.

        Raises:
            ExternalAPIError: If the request or its payload is unusable.
        """
        log_context = {"latitude": latitude, "longitude": longitude}
        response = _request(
            url=FORECAST_API_URL,
            params={
                "latitude": latitude,
                "longitude": longitude,
                "current": "temperature_2m,weather_code",
            },
            api_name="weather",
            event_prefix="WEATHER",
            log_context=log_context,
            timeout=self.timeout,
        )
        payload = _parse(
            response,
            ForecastResponse,
            api_name="weather",
            event_prefix="WEATHER",
            log_context=log_context,
        )
        return payload.description, payload.current.temperature_2m

    def get_timezone(self, latitude: float, longitude: float) -> str:
        """Look up the IANA timezone name for a location.

        Args:
            latitude: Latitude in decimal degrees.
            longitude: Longitude in decimal degrees.

        Returns:
            A timezone identifier such as ``Europe/London``.

        Raises:
            ExternalAPIError: If the request or its payload is unusable.
        """
        log_context = {"latitude": latitude, "longitude": longitude}
        response = _request(
            url=FORECAST_API_URL,
            params={"latitude": latitude, "longitude": longitude, "timezone": "auto"},
            api_name="timezone",
            event_prefix="TIMEZONE",
            log_context=log_context,
            timeout=self.timeout,
        )
        payload = _parse(
            response,
            TimezoneResponse,
            api_name="timezone",
            event_prefix="TIMEZONE",
            log_context=log_context,
        )
        return payload.timezone

    def is_clear_or_sunny(self, weather: str) -> bool:
        """True only for an exact, case-sensitive clear or sunny description."""
        return weather in CLEAR_CONDITIONS

    def is_business_hours(self, moment: datetime) -> bool:
        """True when ``moment`` falls within 9:00 to 16:59:59 local time."""
        return BUSINESS_HOURS_START <= moment.hour < BUSINESS_HOURS_END

    def format_temperature(self, city: CityData) -> str:
        """Render the temperature for display.

        Args:
            city: Resolved city data.

        Returns:
            Fahrenheit for "United States" or "USA" (exact match), otherwise
            Celsius, to one decimal place with the unit suffix.
        """
        if city.country in FAHRENHEIT_COUNTRIES:
            return f"{city.temp_f:.1f}°F"
        return f"{city.temp_c:.1f}°C"

"""Health checks for the external Open-Meteo APIs."""

import httpx

from weather_deployer.logging_config import logger
from weather_deployer.models.health import ServiceStatus
from weather_deployer.weather_service.weather import FORECAST_API_URL, GEOCODING_API_URL


async def is_geocoding_api_available() -> ServiceStatus:
    """Check the geocoding API for availability.

    Returns:
        ServiceStatus.available if a known city resolves, else not_available.
    """
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            response = await client.get(
                GEOCODING_API_URL,
                params={"name": "London", "count": 1, "language": "en", "format": "json"},
            )
            payload = response.json() if response.status_code == 200 else None
            if isinstance(payload, dict) and payload.get("results"):
                return ServiceStatus.available
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("GEOCODING_API_UNAVAILABLE", error=str(exc))
    return ServiceStatus.not_available


async def is_weather_api_available() -> ServiceStatus:
    """Check the forecast API for availability.

    Returns:
        ServiceStatus.available if the API responds with current weather data.
    """
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            response = await client.get(
                FORECAST_API_URL,
                params={
                    "latitude": 51.5,
                    "longitude": 0.12,
                    "current": "temperature_2m,weather_code",
                },
            )
            payload = response.json() if response.status_code == 200 else None
            if isinstance(payload, dict) and "current" in payload:
                return ServiceStatus.available
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("WEATHER_API_UNAVAILABLE", error=str(exc))
    return ServiceStatus.not_available

"""Models for the GET /health payload."""

from enum import Enum

from pydantic import BaseModel


class ServiceStatus(str, Enum):
    available = "available"
    not_available = "not_available"


class Dependencies(BaseModel):
    """Reachability of each Open-Meteo API the service calls."""

    geocoding_api: ServiceStatus
    weather_api: ServiceStatus


class HealthResponse(BaseModel):
    status: str
    dependencies: Dependencies

"""Deployment verdict and result payloads."""

from pydantic import BaseModel


class DeploymentSafety(BaseModel):
    """Whether deploying to a city is safe right now, and why."""

    safe: bool
    reason: str
    weather: str
    temp: str


class DeployResult(BaseModel):
    """Outcome of a simulated deployment."""

    deployed: bool
    message: str


class WeatherReport(BaseModel):
    """Weather summary for a city, without a safety verdict."""

    city: str
    country: str
    weather: str
    temp: str

"""City models for geocoding results and resolved city data."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class GeocodingResult(BaseModel):
    """One candidate location returned by the geocoding API."""

    name: str = ""
    country: str = ""
    latitude: float
    longitude: float


class GeocodingResponse(BaseModel):
    """Geocoding search payload. ``results`` is absent when nothing matched."""

    results: Optional[list[GeocodingResult]] = None

    def best_match(self, country: str) -> Optional[GeocodingResult]:
        """Return the first result in ``country``, else the first result.

        Args:
            country: Country name supplied by the caller.

        Returns:
            The chosen result, or None when there are no results.
        """
        if not self.results:
            return None
        for result in self.results:
            if result.country == country:
                return result
        return self.results[0]


class TimezoneResponse(BaseModel):
    """Forecast payload requested with ``timezone=auto``."""

    timezone: str


class CityData(BaseModel):
    """Everything known about a city at query time."""

    name: str
    country: str
    latitude: float
    longitude: float
    timezone: str
    local_time: datetime
    weather: str
    temp_c: float
    temp_f: float

"""Deployment safety rules and the simulated deploy action."""

from weather_deployer.logging_config import logger
from weather_deployer.models.city import CityData
from weather_deployer.models.deployment import DeploymentSafety, DeployResult
from weather_deployer.weather_service.weather import WeatherService, format_local_time

SAFE_REASON = "Business hours and clear/sunny weather"


class DeploymentService:
    """Decide whether a city is fit for a deployment right now.

    Rules are checked in order and the first failing one supplies the
    reason: local business hours first, then clear or sunny weather.
    """

    def __init__(self, weather_service: WeatherService):
        self.weather_service = weather_service

    def check_safety(self, city: CityData) -> DeploymentSafety:
        """Evaluate the deployment rules for a resolved city.

        Args:
            city: Fully populated city data.

        Returns:
            The verdict, with the weather and display temperature echoed.
        """
        temp = self.weather_service.format_temperature(city)

        if not self.weather_service.is_business_hours(city.local_time):
            reason = (
                "Outside of business hours "
                f"(current time is {format_local_time(city.local_time)})"
            )
            safe = False
        elif not self.weather_service.is_clear_or_sunny(city.weather):
            reason = f"Weather conditions are not clear/sunny (current: {city.weather})"
            safe = False
        else:
            reason = SAFE_REASON
            safe = True

        logger.info("DEPLOYMENT_SAFETY", city=city.name, country=city.country, safe=safe)
        return DeploymentSafety(safe=safe, reason=reason, weather=city.weather, temp=temp)

    def deploy(self, city: CityData) -> DeployResult:
        """Simulate a deployment gated on ``check_safety``. Nothing is deployed."""
        safety = self.check_safety(city)
        summary = f"Current weather: {safety.weather}. Temperature: {safety.temp}."

        if safety.safe:
            message = f"Successfully deployed to {city.name}, {city.country}. {summary}"
        else:
            message = (
                f"Could not deploy to {city.name}, {city.country}: {safety.reason}. "
                f"{summary}"
            )
        logger.info("DEPLOYMENT", city=city.name, country=city.country, deployed=safety.safe)
        return DeployResult(deployed=safety.safe, message=message)

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from weather_deployer.deployment_service.deployment import DeploymentService
from weather_deployer.models.city import CityData
from weather_deployer.models.deployment import DeploymentSafety, DeployResult
from weather_deployer.weather_service.weather import OpenMeteoWeatherService


def london(hour: int, weather: str = "Clear sky", country: str = "United Kingdom") -> CityData:
    return CityData(
        name="London",
        country=country,
        latitude=51.50853,
        longitude=-0.12574,
        timezone="Europe/London",
        local_time=datetime(2024, 6, 1, hour, 0, tzinfo=ZoneInfo("Europe/London")),
        weather=weather,
        temp_c=18.5,
        temp_f=65.3,
    )


@pytest.fixture
def service():
    return DeploymentService(OpenMeteoWeatherService())


def test_safe_during_business_hours_with_clear_sky(service):
    assert service.check_safety(london(14)) == DeploymentSafety(
        safe=True,
        reason="Business hours and clear/sunny weather",
        weather="Clear sky",
        temp="18.5°C",
    )


def test_unsafe_outside_business_hours(service):
    safety = service.check_safety(london(20))
    assert safety.safe is False
    assert safety.reason == "Outside of business hours (current time is 8:00 PM)"
    assert safety.weather == "Clear sky"
    assert safety.temp == "18.5°C"


def test_business_hours_checked_before_weather(service):
    safety = service.check_safety(london(7, weather="Rain"))
    assert safety.reason == "Outside of business hours (current time is 7:00 AM)"


def test_unsafe_weather(service):
    safety = service.check_safety(london(10, weather="Partly cloudy"))
    assert safety.safe is False
    assert safety.reason == "Weather conditions are not clear/sunny (current: Partly cloudy)"


def test_fahrenheit_for_united_states(service):
    assert service.check_safety(london(10, country="USA")).temp == "65.3°F"


def test_deploy_success(service):
    assert service.deploy(london(11, weather="Mainly clear")) == DeployResult(
        deployed=True,
        message=(
            "Successfully deployed to London, United Kingdom. "
            "Current weather: Mainly clear. Temperature: 18.5°C."
        ),
    )


def test_deploy_refused(service):
    result = service.deploy(london(17))
    assert result.deployed is False
    assert result.message == (
        "Could not deploy to London, United Kingdom: "
        "Outside of business hours (current time is 5:00 PM). "
        "Current weather: Clear sky. Temperature: 18.5°C."
    )


class AlwaysOpenWeatherService:
    def get_city_data(self, city, country):
        raise AssertionError("not used")

    def is_clear_or_sunny(self, weather):
        return True

    def is_business_hours(self, moment):
        return True

    def format_temperature(self, city):
        return "n/a"


def test_rules_come_from_weather_service():
    service = DeploymentService(AlwaysOpenWeatherService())
    safety = service.check_safety(london(3, weather="Thunderstorm"))
    assert safety.safe is True
    assert safety.temp == "n/a"

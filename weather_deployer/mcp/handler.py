"""Dispatch protocol requests to the weather and deployment services."""

from typing import Callable, Union

from pydantic import BaseModel, ValidationError

from weather_deployer.deployment_service.deployment import DeploymentService
from weather_deployer.logging_config import logger
from weather_deployer.models.city import CityData
from weather_deployer.models.deployment import WeatherReport
from weather_deployer.models.protocol import CityParams, Request, Response
from weather_deployer.weather_service.weather import (
    OpenMeteoWeatherService,
    WeatherService,
    WeatherServiceError,
)


class DispatchError(Exception):
    """Base exception for requests that cannot be dispatched."""
    pass


class RequestParseError(DispatchError):
    """Raised when a request line or its parameters are malformed."""
    pass


class UnknownMethodError(DispatchError):
    """Raised when the request names a method nobody handles."""
    pass


def _validation_detail(exc: ValidationError) -> str:
    """Flatten pydantic errors into a single line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def parse_request(line: Union[str, bytes]) -> Request:
    """Decode one raw JSON request.

    Raises:
        RequestParseError: If the line is not a valid request object.
    """
    try:
        return Request.model_validate_json(line)
    except ValidationError as exc:
        raise RequestParseError(f"Error parsing request: {_validation_detail(exc)}") from exc


def parse_city_params(parameters) -> CityParams:
    """Validate method parameters.

    Raises:
        RequestParseError: If the parameters are not a ``{city, country}`` object.
    """
    try:
        return CityParams.model_validate(parameters)
    except ValidationError as exc:
        raise RequestParseError(
            f"Error parsing parameters: {_validation_detail(exc)}"
        ) from exc


class Handler:
    """Stateless request dispatcher.

    Collaborators are injected so tests can substitute doubles for the
    live Open-Meteo client.
    """

    def __init__(self, weather_service: WeatherService, deployment_service: DeploymentService):
        self.weather_service = weather_service
        self.deployment_service = deployment_service
        self.routes: dict[str, Callable[[CityParams], BaseModel]] = {
            "check-deployment-safety": self.check_deployment_safety,
            "deploy-to-city": self.deploy_to_city,
            "get-weather": self.get_weather,
        }

    def handle_line(self, line: Union[str, bytes]) -> Response:
        """Decode and process one raw request line."""
        try:
            request = parse_request(line)
        except RequestParseError as exc:
            logger.error("MCP_REQUEST_PARSE_FAILED", error=str(exc))
            return Response.error(str(exc))
        return self.process_request(request)

    def process_request(self, request: Request) -> Response:
        """Run the operation named by ``request.method``.

        Never raises for per-request problems; they come back as error
        envelopes.
        """
        logger.info("MCP_REQUEST", method=request.method)
        try:
            route = self.routes.get(request.method)
            if route is None:
                raise UnknownMethodError(f"Unknown method: {request.method}")
            payload = route(parse_city_params(request.parameters))
        except DispatchError as exc:
            logger.error("MCP_REQUEST_REJECTED", method=request.method, error=str(exc))
            return Response.error(str(exc))
        except WeatherServiceError as exc:
            logger.error("MCP_CITY_DATA_FAILED", method=request.method, error=str(exc))
            return Response.error(f"Error getting city data: {exc}")

        logger.info("MCP_REQUEST_COMPLETED", method=request.method)
        return Response.success(payload)

    def _city_data(self, params: CityParams) -> CityData:
        logger.info("CITY_DATA_LOOKUP", city=params.city, country=params.country)
        return self.weather_service.get_city_data(params.city, params.country)

    def check_deployment_safety(self, params: CityParams):
        return self.deployment_service.check_safety(self._city_data(params))

    def deploy_to_city(self, params: CityParams):
        return self.deployment_service.deploy(self._city_data(params))

    def get_weather(self, params: CityParams) -> WeatherReport:
        city = self._city_data(params)
        return WeatherReport(
            city=params.city,
            country=params.country,
            weather=city.weather,
            temp=self.weather_service.format_temperature(city),
        )


def default_handler() -> Handler:
    """Build a Handler wired to the live Open-Meteo client."""
    weather_service = OpenMeteoWeatherService()
    return Handler(weather_service, DeploymentService(weather_service))

import io
import json

from weather_deployer.deployment_service.deployment import DeploymentService
from weather_deployer.mcp.handler import Handler
from weather_deployer.mcp.server import StdioServer, is_interactive
from weather_deployer.models.protocol import Request, Response
from weather_deployer.weather_service.weather import OpenMeteoWeatherService


class EchoHandler:
    """Answers every request with its method name."""

    def __init__(self):
        self.lines = []

    def handle_line(self, line):
        self.lines.append(line)
        try:
            request = Request.model_validate_json(line)
        except ValueError:
            return Response.error("Error parsing request: bad")
        return Response(type="success", content={"method": request.method})


def read_responses(stdout: io.StringIO):
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


def test_piped_mode_reads_until_end_of_input():
    stdin = io.BytesIO(
        b'{"method": "get-weather", "parameters": {}}\n'
        b"\n"
        b"{oops\n"
        b'{"method": "deploy-to-city", "parameters": {}}\n'
    )
    stdout = io.StringIO()
    handler = EchoHandler()

    count = StdioServer(handler, stdin=stdin, stdout=stdout, interactive=False).serve()

    assert count == 3
    assert len(handler.lines) == 3
    assert read_responses(stdout) == [
        {"type": "success", "content": {"method": "get-weather"}},
        {"type": "error", "content": {"message": "Error parsing request: bad"}},
        {"type": "success", "content": {"method": "deploy-to-city"}},
    ]


def test_piped_mode_survives_undecodable_bytes():
    weather_service = OpenMeteoWeatherService()
    handler = Handler(weather_service, DeploymentService(weather_service))
    stdin = io.BytesIO(b'\xff\xfe\n{"method": "foo"}\n')
    stdout = io.StringIO()

    count = StdioServer(handler, stdin=stdin, stdout=stdout, interactive=False).serve()

    responses = read_responses(stdout)
    assert count == 2
    assert responses[0]["type"] == "error"
    assert responses[0]["content"]["message"].startswith("Error parsing request: ")
    assert responses[1] == {"type": "error", "content": {"message": "Unknown method: foo"}}


def test_piped_mode_empty_input():
    stdout = io.StringIO()
    count = StdioServer(EchoHandler(), stdin=io.BytesIO(b""), stdout=stdout, interactive=False).serve()
    assert count == 0
    assert stdout.getvalue() == ""


def test_interactive_mode_answers_one_line():
    stdin = io.BytesIO(
        b'{"method": "get-weather", "parameters": {}}\n'
        b'{"method": "deploy-to-city", "parameters": {}}\n'
    )
    stdout = io.StringIO()
    handler = EchoHandler()

    StdioServer(handler, stdin=stdin, stdout=stdout, interactive=True).serve()

    assert read_responses(stdout) == [{"type": "success", "content": {"method": "get-weather"}}]
    assert len(handler.lines) == 1


def test_interactive_mode_without_input():
    stdout = io.StringIO()
    StdioServer(EchoHandler(), stdin=io.BytesIO(b""), stdout=stdout, interactive=True).serve()
    assert read_responses(stdout) == [{"type": "error", "content": {"message": "No input received"}}]


def test_interactive_mode_blank_line_is_a_parse_error():
    weather_service = OpenMeteoWeatherService()
    handler = Handler(weather_service, DeploymentService(weather_service))
    stdout = io.StringIO()

    StdioServer(handler, stdin=io.BytesIO(b"   \n"), stdout=stdout, interactive=True).serve()

    [response] = read_responses(stdout)
    assert response["type"] == "error"
    assert response["content"]["message"].startswith("Error parsing request: ")


def test_responses_keep_unicode():
    class DegreeHandler(EchoHandler):
        def handle_line(self, line):
            return Response(type="success", content={"temp": "18.5°C"})

    stdout = io.StringIO()
    StdioServer(DegreeHandler(), stdin=io.BytesIO(b"{}\n"), stdout=stdout, interactive=False).serve()
    assert stdout.getvalue() == '{"type":"success","content":{"temp":"18.5°C"}}\n'


def test_is_interactive():
    assert is_interactive(io.BytesIO(b"")) is False

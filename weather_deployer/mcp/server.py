"""Newline-delimited JSON transport over stdin and stdout."""

import sys
from typing import BinaryIO, Optional, TextIO

from structlog.contextvars import bind_contextvars, clear_contextvars

from weather_deployer.logging_config import logger
from weather_deployer.mcp.handler import Handler
from weather_deployer.models.protocol import Response


def is_interactive(stream) -> bool:
    """True when ``stream`` is attached to a terminal."""
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class StdioServer:
    """Read requests from ``stdin`` and write one response per request.

    Requests are read as raw bytes so that undecodable input becomes a
    parse error for that line rather than a crash. In interactive mode a
    single line is answered and the server returns. Otherwise lines are
    consumed until end of input; blank lines are skipped and a bad request
    never stops the loop.
    """

    def __init__(
        self,
        handler: Handler,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[TextIO] = None,
        interactive: Optional[bool] = None,
    ):
        self.handler = handler
        self.stdin = stdin or sys.stdin.buffer
        self.stdout = stdout or sys.stdout
        self.interactive = is_interactive(self.stdin) if interactive is None else interactive

    def serve(self) -> int:
        """Serve until done.

        Returns:
            The number of requests answered.
        """
        logger.info("SERVER_STARTED", interactive=self.interactive)
        if self.interactive:
            return self.serve_one()
        return self.serve_forever()

    def serve_one(self) -> int:
        """Answer exactly one line.

        Returns:
            Always 1; end of input is answered with a "No input received"
            error.
        """
        line = self.stdin.readline()
        if not line:
            logger.info("NO_INPUT_RECEIVED")
            self.send(Response.error("No input received"))
            return 1
        self.handle(line, request_number=1)
        return 1

    def serve_forever(self) -> int:
        """Answer every non-blank line until end of input.

        Returns:
            The number of requests answered.
        """
        count = 0
        for line in self.stdin:
            if not line.strip():
                continue
            count += 1
            self.handle(line, request_number=count)
        logger.info("END_OF_INPUT", requests=count)
        return count

    def handle(self, line: bytes, request_number: int):
        """Dispatch one raw line and write its response.

        Args:
            line: Raw request bytes, including any trailing newline.
            request_number: Position of the request, bound into log context.
        """
        bind_contextvars(request_number=request_number)
        try:
            logger.debug(
                "REQUEST_RECEIVED", raw=line.decode("utf-8", errors="replace").rstrip("\n")
            )
            self.send(self.handler.handle_line(line))
        finally:
            clear_contextvars()

    def send(self, response: Response):
        """Write ``response`` as one compact JSON line and flush."""
        self.stdout.write(response.model_dump_json() + "\n")
        self.stdout.flush()

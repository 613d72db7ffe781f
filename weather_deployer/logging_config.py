"""structlog configuration and the debug log file sink."""

import logging
import os
import sys
from contextlib import contextmanager

import structlog

LOG_FILE = os.getenv("WEATHER_DEPLOYER_LOG_FILE", "/tmp/floyd-weather-server.log")
LOG_LEVEL = os.getenv("WEATHER_DEPLOYER_LOG_LEVEL", "DEBUG")


def _stderr_logger(*args):
    # Looked up per call; sys.stderr may be swapped after configuration.
    return structlog.PrintLogger(sys.stderr)


def configure_logging(file=None, level: str = LOG_LEVEL):
    """Point structlog at a writable text stream.

    Args:
        file: Stream receiving rendered log lines. Defaults to stderr so
            stdout stays free for protocol frames.
        level: Minimum level name to emit.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=file) if file else _stderr_logger,
        cache_logger_on_first_use=False,
    )


@contextmanager
def log_file(path: str = LOG_FILE):
    """Send logs to ``path`` for the duration of the block.

    The file is opened in append mode and closed on exit, after which
    the previous logging configuration is restored.

    Raises:
        OSError: If the log file cannot be opened.
    """
    with open(path, "a", encoding="utf-8") as handle:
        previous = structlog.get_config()
        configure_logging(handle)
        try:
            yield handle
        finally:
            structlog.configure(**previous)


configure_logging()
logger = structlog.get_logger()

"""Command line entry point for the weather deployer server."""

import argparse
import sys
from contextlib import ExitStack

from weather_deployer.logging_config import LOG_FILE, log_file, logger
from weather_deployer.mcp.handler import default_handler
from weather_deployer.mcp.server import StdioServer

MODES = {"auto": None, "interactive": True, "piped": False}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with ``stdio`` and ``http`` subcommands."""
    parser = argparse.ArgumentParser(
        description="Check weather and business hours before deploying to a city"
    )
    parser.add_argument("--log-file", default=LOG_FILE, help="Debug log file path")
    subparsers = parser.add_subparsers(dest="command")

    stdio_parser = subparsers.add_parser("stdio", help="Serve requests over stdin/stdout (default)")
    stdio_parser.add_argument(
        "--mode",
        choices=sorted(MODES),
        default="auto",
        help="Answer one line (interactive) or read until end of input (piped)",
    )

    http_parser = subparsers.add_parser("http", help="Serve requests over HTTP")
    http_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    http_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    return parser


def run_stdio(mode: str = "auto") -> int:
    """Serve protocol requests over stdin and stdout.

    Args:
        mode: "auto", "interactive" or "piped".

    Returns:
        The process exit code.
    """
    server = StdioServer(default_handler(), interactive=MODES[mode])
    server.serve()
    return 0


def run_http(host: str, port: int) -> int:
    """Serve the FastAPI app with uvicorn.

    Args:
        host: Bind address.
        port: Bind port.

    Returns:
        The process exit code.
    """
    import uvicorn

    uvicorn.run("weather_deployer.main:app", host=host, port=port, log_config=None)
    return 0


def main(argv=None) -> int:
    """Parse arguments, open the debug log and run the chosen transport.

    Args:
        argv: Argument list, defaulting to ``sys.argv[1:]``.

    Returns:
        0 on a clean exit, 1 if the log file cannot be opened.
    """
    args = build_parser().parse_args(argv)

    with ExitStack() as stack:
        try:
            stack.enter_context(log_file(args.log_file))
        except OSError as exc:
            print(f"Error initializing server: {exc}", file=sys.stderr)
            return 1

        logger.info("WEATHER_DEPLOYER_STARTED", command=args.command or "stdio")
        if args.command == "http":
            return run_http(args.host, args.port)
        return run_stdio(getattr(args, "mode", "auto"))


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point for the Gong MCP server.

Usage:
    gong-mcp                                      # stdio transport (default)
    gong-mcp --mode http --host 0.0.0.0 --port 8080
    gong-mcp --debug                              # verbose logs on stderr
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import uvicorn

from gong_mcp import __version__
from gong_mcp.adapter import GongAdapter
from gong_mcp.config import MCP_TRANSPORT, SERVER_HOST, SERVER_PORT, load_gong_config
from gong_mcp.server import MCP_PATH, create_app, run_stdio

logger = logging.getLogger(__name__)

TRANSPORT_MODES = ("stdio", "http")


def _configure_logging(debug: bool = False) -> None:
    """Log to stderr (stdout carries the stdio protocol): INFO, or DEBUG with --debug."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
        stream=sys.stderr,
    )

    if not debug:
        # Silence chatty HTTP loggers
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gong-mcp",
        description="Gong MCP Server - Access Gong calls and data via Model Context Protocol",
    )
    parser.add_argument(
        "--mode", choices=TRANSPORT_MODES,
        default=MCP_TRANSPORT if MCP_TRANSPORT in TRANSPORT_MODES else "stdio",
        help="Transport mode: stdio or http",
    )
    parser.add_argument(
        "--host", default=SERVER_HOST,
        help="Host address to bind to (HTTP mode only)",
    )
    parser.add_argument(
        "--port", type=int, default=SERVER_PORT,
        help="Port to bind to (HTTP mode only)",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run the server in the selected transport mode."""
    args = build_parser().parse_args(argv)
    _configure_logging(debug=args.debug)

    logger.info("Starting Gong MCP server in %s mode", args.mode)
    adapter = GongAdapter(load_gong_config())

    if args.mode == "stdio":
        try:
            asyncio.run(run_stdio(adapter))
        except KeyboardInterrupt:
            pass
        return

    logger.info("HTTP endpoint: http://%s:%d%s", args.host, args.port, MCP_PATH)
    uvicorn.run(
        create_app(adapter),
        host=args.host,
        port=args.port,
        log_level="debug" if args.debug else "info",
    )


if __name__ == "__main__":
    main()

"""Minimal CLI helpers for running the MCP server."""
from __future__ import annotations

import argparse
import logging
import socket
from typing import Callable

StartSSE = Callable[[str, int], None]
RunStdIO = Callable[[], None]


def build_parser() -> argparse.ArgumentParser:
    """Create an argument parser for the runtime."""

    parser = argparse.ArgumentParser(description="invoice-search-mcp server")
    parser.add_argument(
        "--transport",
        type=str,
        default="stdio",
        choices=["stdio", "sse"],
        help="Transport mechanism to expose (default: stdio)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host for the MCP SSE server",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8099,
        help="Port for the MCP SSE server",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def run(
    args: argparse.Namespace,
    *,
    logger: logging.Logger,
    start_sse: StartSSE,
    run_stdio: RunStdIO,
) -> None:
    """Apply CLI flags and hand off to the selected transport."""

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)

    logger.info(
        "Starting MCP server (transport=%s, host=%s, port=%s)",
        args.transport,
        args.host,
        args.port,
    )

    def _validate_port(value: int, *, flag: str) -> None:
        if value <= 0 or value > 65535:
            logger.error("Invalid %s: %s (must be between 1 and 65535)", flag, value)
            raise SystemExit(2)

    def _check_port_available(host: str, port: int, *, flag: str) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind((host, port))
            except OSError as exc:  # pragma: no cover - depends on local env
                logger.error(
                    "MCP SSE port %s is unavailable on %s: %s. Use %s to pick a free port.",
                    port,
                    host,
                    exc.strerror or exc,
                    flag,
                )
                raise SystemExit(1)

    if args.transport == "sse":
        _validate_port(args.port, flag="--port")
        _check_port_available(args.host, args.port, flag="--port")
        logger.debug("Transport: SSE on http://%s:%s/sse", args.host, args.port)
        start_sse(args.host, int(args.port))
    else:
        logger.debug("Transport: stdio")
        run_stdio()


__all__ = ["build_parser", "run"]

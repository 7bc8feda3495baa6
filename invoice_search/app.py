"""MCP server assembly and transports for invoice-search-mcp."""
from __future__ import annotations

import contextlib
import logging
from typing import Any, AsyncIterator

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from . import __version__
from .api.tools import ToolGateway
from .backends.invoice_api import InvoiceApiClient

SERVER_NAME = "invoice-search-server"

logger = logging.getLogger("invoice_search.app")


def build_server(gateway: ToolGateway) -> Server:
    """Create the MCP server with list/call handlers bound to ``gateway``."""

    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return gateway.list_tools()

    # The gateway validates arguments itself so failures keep its messages.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        return await gateway.call_tool(name, arguments)

    return server


async def serve_stdio(server: Server, client: InvoiceApiClient | None = None) -> None:
    """Serve MCP over stdin/stdout until the peer disconnects."""

    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Server started and ready (transport=stdio)")
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        if client is not None:
            await client.aclose()


def build_sse_app(server: Server, *, client: InvoiceApiClient | None = None) -> Starlette:
    """Create a Starlette app exposing the server over SSE.

    Routes: ``GET /sse`` (event stream), ``POST /messages/`` (client
    messages) and ``GET /health`` (liveness of this process only).
    """

    transport = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        logger.info("SSE connect client=%s", client_ip)
        async with transport.connect_sse(
            request.scope, request.receive, request._send
        ) as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
        logger.info("SSE disconnect client=%s", client_ip)
        return Response()

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "ok": True,
                "type": "mcp-sse",
                "server": SERVER_NAME,
                "endpoints": {"sse": "/sse", "messages": "/messages/"},
            }
        )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info("Server started and ready (transport=sse)")
        try:
            yield
        finally:
            if client is not None:
                await client.aclose()

    routes = [
        Route("/sse", handle_sse, methods=["GET"]),
        Mount("/messages/", app=transport.handle_post_message),
        Route("/health", health, methods=["GET"]),
    ]
    return Starlette(debug=False, routes=routes, lifespan=lifespan)


__all__ = ["SERVER_NAME", "build_server", "build_sse_app", "serve_stdio"]

"""Tool catalog and dispatch for invoice-search-mcp."""
from __future__ import annotations

import copy
import logging
from typing import Any, Awaitable, Callable, Mapping

from mcp import types

from ..backends.invoice_api import InvoiceApiClient
from ..backends.invoice_api_models import ApiPayload, SearchParams
from ..errors import InvalidArgumentError, ToolFailure, UnknownToolError
from .envelopes import envelope_error, envelope_ok

_LOGGER = logging.getLogger("invoice_search.api.tools")

_NO_INPUT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}, "required": []}

_CATALOG: tuple[tuple[str, str, dict[str, Any]], ...] = (
    (
        "search_invoice",
        "Search for invoices by reference number. Returns matching invoices with details.",
        {
            "type": "object",
            "properties": {
                "reference": {
                    "type": "string",
                    "description": 'Invoice reference number (e.g., "INV-011", "100056", "INV145001")',
                    "minLength": 1,
                },
            },
            "required": ["reference"],
        },
    ),
    (
        "check_health",
        "Check the health status of the invoice API and database connection.",
        _NO_INPUT_SCHEMA,
    ),
    (
        "get_stats",
        "Get statistics about the invoice cache, including total counts and status breakdown.",
        _NO_INPUT_SCHEMA,
    ),
)

TOOL_NAMES: tuple[str, ...] = tuple(name for name, _, _ in _CATALOG)

ToolHandler = Callable[[Any], Awaitable[ApiPayload]]


def list_tools() -> list[types.Tool]:
    """Return the tool catalog; always the same three entries."""

    return [
        types.Tool(name=name, description=description, inputSchema=copy.deepcopy(schema))
        for name, description, schema in _CATALOG
    ]


def parse_search_params(arguments: Any) -> SearchParams:
    """Validate raw ``search_invoice`` arguments.

    Only trims the reference; matching semantics belong to the invoice API.
    Unknown extra fields are ignored.
    """

    if not isinstance(arguments, Mapping):
        raise InvalidArgumentError("Invalid arguments: must be an object")

    reference = arguments.get("reference")
    if not isinstance(reference, str):
        raise InvalidArgumentError("Invalid reference: must be a string")

    trimmed = reference.strip()
    if not trimmed:
        raise InvalidArgumentError("Invalid reference: cannot be empty")

    return SearchParams(reference=trimmed)


class ToolGateway:
    """Routes tool calls to the invoice API and wraps every outcome in an envelope."""

    def __init__(self, client: InvoiceApiClient) -> None:
        self._client = client
        self._handlers: dict[str, ToolHandler] = {
            "search_invoice": self._search_invoice,
            "check_health": self._check_health,
            "get_stats": self._get_stats,
        }

    def list_tools(self) -> list[types.Tool]:
        return list_tools()

    async def call_tool(self, name: str, arguments: Any) -> types.CallToolResult:
        _LOGGER.info("Tool called: %s", name)
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise UnknownToolError(name)
            result = await handler(arguments)
            payload = result.to_payload()
        except ToolFailure as exc:
            _LOGGER.warning("Tool execution failed (tool=%s): %s", name, exc.message)
            return envelope_error(exc.message)
        except Exception as exc:
            _LOGGER.exception("Tool execution failed unexpectedly (tool=%s)", name)
            return envelope_error(str(exc) or type(exc).__name__)
        return envelope_ok(payload)

    async def _search_invoice(self, arguments: Any) -> ApiPayload:
        params = parse_search_params(arguments)
        return await self._client.search_invoice(params)

    async def _check_health(self, arguments: Any) -> ApiPayload:
        return await self._client.get_health()

    async def _get_stats(self, arguments: Any) -> ApiPayload:
        return await self._client.get_stats()


__all__ = ["TOOL_NAMES", "ToolGateway", "list_tools", "parse_search_params"]

"""API surface for invoice-search-mcp."""

from .envelopes import envelope_error, envelope_ok
from .tools import TOOL_NAMES, ToolGateway, list_tools, parse_search_params

__all__ = [
    "TOOL_NAMES",
    "ToolGateway",
    "envelope_error",
    "envelope_ok",
    "list_tools",
    "parse_search_params",
]

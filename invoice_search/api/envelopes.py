"""Envelope helpers for MCP tool results."""
from __future__ import annotations

import json

from mcp import types


def envelope_ok(data: object) -> types.CallToolResult:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)], isError=False
    )


def envelope_error(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"Error: {message}")],
        isError=True,
    )


__all__ = ["envelope_error", "envelope_ok"]

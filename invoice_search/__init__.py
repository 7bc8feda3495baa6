"""MCP server exposing invoice search over the invoice cache API."""

__version__ = "1.0.0"

"""Error taxonomy for the invoice search server."""
from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing."""


class ToolFailure(Exception):
    """Base class for failures recovered into a flagged tool result."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(ToolFailure):
    """Raised when tool arguments do not match the tool's input schema."""


class UnknownToolError(ToolFailure):
    """Raised when the requested tool is not in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class UpstreamError(ToolFailure):
    """Raised for any failure talking to the invoice API.

    Attributes:
        status_code: HTTP status returned by the API, ``None`` when the
            request never produced a response (DNS, connect, timeout).
        detail: Message from the response body or the transport error text.
    """

    def __init__(self, status_code: int | None, detail: str) -> None:
        if status_code is None:
            message = f"Invoice API error: {detail}"
        else:
            message = f"Invoice API error ({status_code}): {detail}"
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


__all__ = [
    "ConfigurationError",
    "InvalidArgumentError",
    "ToolFailure",
    "UnknownToolError",
    "UpstreamError",
]

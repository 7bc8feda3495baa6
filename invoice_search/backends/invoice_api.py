"""Async HTTP client for the invoice cache API."""
from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from ..errors import UpstreamError
from ..utils.config import REQUEST_TIMEOUT_SECONDS, InvoiceApiConfig
from .invoice_api_models import (
    ApiPayload,
    HealthResponse,
    SearchParams,
    SearchResponse,
    StatsResponse,
)

_LOGGER = logging.getLogger("invoice_search.backends.invoice_api")

SEARCH_PATH = "/api/invoices"
HEALTH_PATH = "/health"
STATS_PATH = "/api/stats"

_DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

PayloadT = TypeVar("PayloadT", bound=ApiPayload)


def _error_message(response: httpx.Response) -> str:
    """Prefer the API's own ``message`` field over a generic status line."""

    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str):
            message = message.strip()
        elif message:
            message = json.dumps(message, ensure_ascii=False)
        if message:
            return " ".join(message.split())
    return f"Request failed with status code {response.status_code}"


class InvoiceApiClient:
    """Single shared channel to the invoice API.

    Every public method issues exactly one GET and raises UpstreamError for
    any failure, so callers only ever need to handle that one type.
    """

    def __init__(
        self,
        config: InvoiceApiConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = REQUEST_TIMEOUT_SECONDS
        self._http = httpx.AsyncClient(
            base_url=config.api_url,
            auth=httpx.BasicAuth(config.api_username, config.api_token),
            headers=_DEFAULT_HEADERS,
            timeout=self._timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "InvoiceApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def search_invoice(self, params: SearchParams) -> SearchResponse:
        """Search invoices by reference; filtering is left to the API."""

        _LOGGER.info("Searching for invoice: %s", params.reference)
        result = await self._get(
            "search_invoice",
            SEARCH_PATH,
            SearchResponse,
            params={"reference": params.reference},
        )
        _LOGGER.info(
            "Search completed (count=%s, found=%s)", result.count, len(result.invoices)
        )
        return result

    async def get_health(self) -> HealthResponse:
        _LOGGER.info("Checking invoice API health")
        result = await self._get("check_health", HEALTH_PATH, HealthResponse)
        _LOGGER.info(
            "Health check completed (status=%s, database=%s)",
            result.status,
            result.database,
        )
        return result

    async def get_stats(self) -> StatsResponse:
        _LOGGER.info("Fetching invoice cache statistics")
        result = await self._get("get_stats", STATS_PATH, StatsResponse)
        _LOGGER.info(
            "Stats completed (total_invoices=%s, total_items=%s)",
            result.total_invoices,
            result.total_items,
        )
        return result

    async def _get(
        self,
        operation: str,
        path: str,
        model: type[PayloadT],
        *,
        params: dict[str, Any] | None = None,
    ) -> PayloadT:
        try:
            response = await self._http.get(path, params=params)
        except httpx.TimeoutException as exc:
            raise self._failure(
                operation, None, f"timeout of {self._timeout:g}s exceeded"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise self._failure(operation, None, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise self._failure(operation, response.status_code, _error_message(response))

        try:
            return model.from_body(response.json())
        except ValueError as exc:
            # ValidationError subclasses ValueError; so does JSONDecodeError.
            kind = "unexpected" if isinstance(exc, ValidationError) else "malformed"
            raise self._failure(
                operation, response.status_code, f"{kind} response body from {path}"
            ) from exc

    def _failure(
        self, operation: str, status_code: int | None, message: str
    ) -> UpstreamError:
        _LOGGER.error(
            "HTTP error during %s (status=%s, message=%s)", operation, status_code, message
        )
        return UpstreamError(status_code, message)


__all__ = ["HEALTH_PATH", "InvoiceApiClient", "SEARCH_PATH", "STATS_PATH"]

"""Pydantic models for the invoice API requests and responses."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr


class SearchParams(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    reference: str


class ApiPayload(BaseModel):
    """Wrapper-shape check for an API body.

    Only the wrapper keys are validated; values inside them are left as sent.
    The decoded body is kept so it can be returned without re-serialising.
    """

    model_config = ConfigDict(extra="allow")

    _raw: dict[str, Any] | None = PrivateAttr(default=None)

    @classmethod
    def from_body(cls, body: Any) -> "ApiPayload":
        payload = cls.model_validate(body)
        payload._raw = body
        return payload

    def to_payload(self) -> dict[str, Any]:
        """Return the body exactly as the API sent it."""
        if self._raw is not None:
            return self._raw
        return self.model_dump(mode="json", exclude_unset=True)


class Invoice(ApiPayload):
    id: Any = None
    reference: Any = None
    customer_name: Any = None
    amount: Any = None
    currency: Any = None
    status: Any = None
    created_at: Any = None
    updated_at: Any = None


class SearchResponse(ApiPayload):
    invoices: list[Invoice]
    count: Any
    limit: Any
    offset: Any


class HealthResponse(ApiPayload):
    status: Any
    database: Any


class StatsResponse(ApiPayload):
    total_invoices: Any
    total_items: Any
    date_range: dict[str, Any]
    status_breakdown: list[dict[str, Any]]


__all__ = [
    "ApiPayload",
    "HealthResponse",
    "Invoice",
    "SearchParams",
    "SearchResponse",
    "StatsResponse",
]

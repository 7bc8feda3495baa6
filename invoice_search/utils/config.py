"""Runtime configuration helpers for the invoice search server."""
from __future__ import annotations

import logging
import os
from typing import Final, Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from ..errors import ConfigurationError

# Load .env file from project root (if it exists)
load_dotenv()

_LOGGER = logging.getLogger("invoice_search.utils.config")

DEFAULT_API_USERNAME: Final[str] = "api"
REQUEST_TIMEOUT_SECONDS: Final[float] = 30.0


class InvoiceApiConfig(BaseModel):
    """Connection settings for the upstream invoice API."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")

    api_url: str = Field(min_length=1)
    api_username: str = DEFAULT_API_USERNAME
    api_token: str = Field(min_length=1, repr=False)


def _env_str(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_config(environ: Mapping[str, str] | None = None) -> InvoiceApiConfig:
    """Build the API configuration from ``INVOICE_API_URL``, ``API_USERNAME`` and ``API_TOKEN``.

    Raises ConfigurationError when a required variable is missing or blank.
    """

    env = os.environ if environ is None else environ

    api_url = _env_str(env, "INVOICE_API_URL")
    api_username = _env_str(env, "API_USERNAME") or DEFAULT_API_USERNAME
    api_token = _env_str(env, "API_TOKEN")

    if not api_url:
        raise ConfigurationError("INVOICE_API_URL environment variable is required")
    if not api_token:
        raise ConfigurationError("API_TOKEN environment variable is required")

    config = InvoiceApiConfig(
        api_url=api_url, api_username=api_username, api_token=api_token
    )
    _LOGGER.info(
        "Configuration loaded (api_url=%s, api_username=%s, has_token=%s)",
        config.api_url,
        config.api_username,
        bool(config.api_token),
    )
    return config


__all__ = [
    "DEFAULT_API_USERNAME",
    "InvoiceApiConfig",
    "REQUEST_TIMEOUT_SECONDS",
    "load_config",
]

#!/usr/bin/env python3
"""Smoke check for the upstream invoice API.

Loads INVOICE_API_URL / API_USERNAME / API_TOKEN (from the environment or a
.env file), calls the health endpoint through the same client the server uses
and, optionally, searches one reference. Exits non-zero with a readable error
when anything fails.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import anyio

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from invoice_search.backends.invoice_api import InvoiceApiClient  # noqa: E402
from invoice_search.backends.invoice_api_models import SearchParams  # noqa: E402
from invoice_search.errors import ConfigurationError, UpstreamError  # noqa: E402
from invoice_search.utils.config import load_config  # noqa: E402


async def run_smoke_check(reference: str | None) -> int:
    """Perform the smoke check and return the desired exit code."""

    try:
        config = load_config()
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    async with InvoiceApiClient(config) as client:
        try:
            health = await client.get_health()
            print(f"SUCCESS: {config.api_url} health={health.status} database={health.database}")
            if reference:
                result = await client.search_invoice(SearchParams(reference=reference))
                print(json.dumps(result.to_payload(), indent=2))
        except UpstreamError as exc:
            print(f"ERROR: {exc.message}", file=sys.stderr)
            return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check that the configured invoice API is reachable with the configured credentials."
    )
    parser.add_argument(
        "--reference",
        default=None,
        help="Optional invoice reference to search for after the health check",
    )
    args = parser.parse_args()

    sys.exit(anyio.run(run_smoke_check, args.reference))


if __name__ == "__main__":
    main()

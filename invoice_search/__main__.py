"""Entry point for python -m invoice_search."""
from __future__ import annotations

import logging
import sys


def main() -> None:
    """Load configuration, build the server and run the selected transport."""
    # Import here so configure_root runs before any module logs
    from invoice_search.utils.logging import configure_root

    configure_root()

    import anyio
    import uvicorn

    from invoice_search.api.tools import ToolGateway
    from invoice_search.app import build_server, build_sse_app, serve_stdio
    from invoice_search.backends.invoice_api import InvoiceApiClient
    from invoice_search.cli import build_parser, run
    from invoice_search.errors import ConfigurationError
    from invoice_search.utils.config import load_config

    logger = logging.getLogger("invoice_search.cli")

    parser = build_parser()
    args = parser.parse_args()

    try:
        config = load_config()
    except ConfigurationError as exc:
        logger.error("Fatal error: %s", exc)
        sys.exit(1)

    client = InvoiceApiClient(config)
    server = build_server(ToolGateway(client))

    def _start_sse(host: str, port: int) -> None:
        """Launch the MCP SSE server."""
        uvicorn.run(build_sse_app(server, client=client), host=host, port=port)

    def _run_stdio() -> None:
        """Run stdio transport."""
        anyio.run(serve_stdio, server, client)

    try:
        run(args, logger=logger, start_sse=_start_sse, run_stdio=_run_stdio)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()

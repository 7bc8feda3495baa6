import base64
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx

from invoice_search.backends.invoice_api import InvoiceApiClient
from invoice_search.backends.invoice_api_models import SearchParams
from invoice_search.errors import UpstreamError
from invoice_search.utils.config import InvoiceApiConfig

SEARCH_PAYLOAD = {
    "invoices": [{"id": 1, "reference": "INV-011"}],
    "count": 1,
    "limit": 20,
    "offset": 0,
}


class InvoiceApiClientTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.config = InvoiceApiConfig(
            api_url="https://invoices.example.com",
            api_username="api",
            api_token="s3cret",
        )
        self.requests: list[httpx.Request] = []

    async def _client(self, handler) -> InvoiceApiClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        client = InvoiceApiClient(self.config, transport=httpx.MockTransport(recording_handler))
        self.addAsyncCleanup(client.aclose)
        return client

    async def test_search_sends_reference_with_basic_auth(self):
        client = await self._client(lambda request: httpx.Response(200, json=SEARCH_PAYLOAD))

        result = await client.search_invoice(SearchParams(reference="INV-011"))

        self.assertEqual(result.to_payload(), SEARCH_PAYLOAD)
        request = self.requests[0]
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.url.path, "/api/invoices")
        self.assertEqual(request.url.params["reference"], "INV-011")
        expected = "Basic " + base64.b64encode(b"api:s3cret").decode("ascii")
        self.assertEqual(request.headers["authorization"], expected)
        self.assertEqual(request.headers["accept"], "application/json")

    async def test_search_preserves_unknown_invoice_fields(self):
        payload = {
            "invoices": [
                {
                    "id": 7,
                    "reference": "100056",
                    "amount": "120.50",
                    "customer_name": None,
                    "contact_url": "https://api.example.com/contacts/3",
                }
            ],
            "count": 1,
            "limit": 20,
            "offset": 0,
        }
        client = await self._client(lambda request: httpx.Response(200, json=payload))

        result = await client.search_invoice(SearchParams(reference="100056"))

        self.assertEqual(result.to_payload(), payload)

    async def test_health_and_stats_hit_fixed_paths(self):
        stats = {
            "total_invoices": 12,
            "total_items": 40,
            "date_range": {"earliest": "2024-01-01", "latest": "2024-06-30"},
            "status_breakdown": [{"status": "paid", "count": 10}],
        }

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/health":
                return httpx.Response(200, json={"status": "ok", "database": "connected"})
            return httpx.Response(200, json=stats)

        client = await self._client(handler)

        health = await client.get_health()
        result = await client.get_stats()

        self.assertEqual(health.status, "ok")
        self.assertEqual(health.database, "connected")
        self.assertEqual(result.to_payload(), stats)
        self.assertEqual([r.url.path for r in self.requests], ["/health", "/api/stats"])

    async def test_error_status_uses_body_message(self):
        client = await self._client(
            lambda request: httpx.Response(500, json={"message": "db down"})
        )

        with self.assertRaises(UpstreamError) as ctx:
            await client.search_invoice(SearchParams(reference="INV-011"))

        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIn("db down", ctx.exception.message)
        self.assertEqual(ctx.exception.message, "Invoice API error (500): db down")

    async def test_search_leaves_invoice_values_untouched(self):
        payload = {
            "invoices": [
                {"id": "7", "reference": 100056, "amount": 100, "created_at": 1718000000},
                {"id": 8, "reference": "INV-012", "amount": 12.5, "lines": [{"qty": "2"}]},
            ],
            "count": "2",
            "limit": 20,
            "offset": 0,
            "next": None,
        }
        client = await self._client(lambda request: httpx.Response(200, json=payload))

        result = await client.search_invoice(SearchParams(reference="100056"))

        self.assertEqual(result.to_payload(), payload)
        self.assertIsInstance(result.to_payload()["invoices"][0]["id"], str)
        self.assertIsInstance(result.to_payload()["invoices"][0]["amount"], int)

    async def test_stats_date_range_values_pass_through(self):
        stats = {
            "total_invoices": 3,
            "total_items": 9,
            "date_range": {"span_days": 30, "earliest": None},
            "status_breakdown": [{"status": "open", "count": "3"}],
        }
        client = await self._client(lambda request: httpx.Response(200, json=stats))

        result = await client.get_stats()

        self.assertEqual(result.to_payload(), stats)

    async def test_wrapper_shape_is_still_checked(self):
        bodies = (
            ["not", "an", "object"],
            {"invoices": {"id": 1}, "count": 1, "limit": 20, "offset": 0},
            {"invoices": ["INV-011"], "count": 1, "limit": 20, "offset": 0},
            {"invoices": [], "count": 0, "limit": 20},
        )
        for body in bodies:
            with self.subTest(body=body):
                client = await self._client(lambda request, body=body: httpx.Response(200, json=body))

                with self.assertRaises(UpstreamError) as ctx:
                    await client.search_invoice(SearchParams(reference="INV-011"))

                self.assertIn("unexpected response body from /api/invoices", ctx.exception.message)

    async def test_stats_date_range_must_be_a_mapping(self):
        stats = {
            "total_invoices": 3,
            "total_items": 9,
            "date_range": ["2024-01-01", "2024-03-01"],
            "status_breakdown": [],
        }
        client = await self._client(lambda request: httpx.Response(200, json=stats))

        with self.assertRaises(UpstreamError) as ctx:
            await client.get_stats()

        self.assertIn("unexpected response body from /api/stats", ctx.exception.message)

    async def test_error_status_with_non_string_message(self):
        bodies = (
            ({"message": {"code": "DB_DOWN"}}, '{"code": "DB_DOWN"}'),
            ({"message": 503}, "503"),
        )
        for body, expected in bodies:
            with self.subTest(body=body):
                client = await self._client(lambda request, body=body: httpx.Response(503, json=body))

                with self.assertRaises(UpstreamError) as ctx:
                    await client.get_health()

                self.assertEqual(ctx.exception.status_code, 503)
                self.assertEqual(ctx.exception.detail, expected)

    async def test_error_status_with_empty_message_uses_status_line(self):
        client = await self._client(lambda request: httpx.Response(502, json={"message": ""}))

        with self.assertRaises(UpstreamError) as ctx:
            await client.get_health()

        self.assertEqual(ctx.exception.detail, "Request failed with status code 502")

    async def test_error_status_without_message_field(self):
        client = await self._client(lambda request: httpx.Response(401, text="Unauthorized"))

        with self.assertRaises(UpstreamError) as ctx:
            await client.get_health()

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIn("Request failed with status code 401", ctx.exception.message)

    async def test_timeout_maps_to_upstream_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = await self._client(handler)

        with self.assertRaises(UpstreamError) as ctx:
            await client.get_stats()

        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("timeout of 30s exceeded", ctx.exception.message)

    async def test_connection_failure_maps_to_upstream_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        client = await self._client(handler)

        with self.assertRaises(UpstreamError) as ctx:
            await client.get_health()

        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("Name or service not known", ctx.exception.message)

    async def test_malformed_body_maps_to_upstream_error(self):
        client = await self._client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with self.assertRaises(UpstreamError) as ctx:
            await client.search_invoice(SearchParams(reference="INV-011"))

        self.assertEqual(ctx.exception.status_code, 200)
        self.assertIn("malformed response body", ctx.exception.message)

    async def test_unexpected_shape_maps_to_upstream_error(self):
        client = await self._client(lambda request: httpx.Response(200, json={"status": "ok"}))

        with self.assertRaises(UpstreamError) as ctx:
            await client.get_health()

        self.assertIn("unexpected response body from /health", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()

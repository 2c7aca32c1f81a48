import json
import shutil
import tempfile
import unittest
from pathlib import Path

import httpx

from admin.bridge import FetchBridge, as_location


def client_for(routes: dict, calls: list) -> httpx.AsyncClient:
    """routes maps a path to (status, body) or to an exception to raise."""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        outcome = routes[request.url.path]
        if isinstance(outcome, Exception):
            raise outcome
        status, body = outcome
        return httpx.Response(status, json=body)

    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://portfolio.test"
    )


class FetchBridgeTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.calls = []

    async def load(self, routes, primary, fallback):
        async with client_for(routes, self.calls) as http:
            return await FetchBridge(http).load(primary, fallback)

    async def test_primary_success_never_touches_fallback(self):
        data = await self.load(
            {"/api/galleries": (200, {"a": []}), "/galleries.json": (200, {"b": []})},
            "/api/galleries",
            "/galleries.json",
        )
        self.assertEqual(data, {"a": []})
        self.assertEqual(self.calls, ["/api/galleries"])

    async def test_non_success_status_uses_fallback(self):
        data = await self.load(
            {"/api/galleries": (500, {"error": "read-failed"}), "/galleries.json": (200, {"b": []})},
            "/api/galleries",
            "/galleries.json",
        )
        self.assertEqual(data, {"b": []})
        self.assertEqual(self.calls, ["/api/galleries", "/galleries.json"])

    async def test_transport_error_uses_fallback(self):
        data = await self.load(
            {
                "/api/site": httpx.ConnectError("refused"),
                "/site.json": (200, {"bio": "cached"}),
            },
            "/api/site",
            "/site.json",
        )
        self.assertEqual(data, {"bio": "cached"})

    async def test_fallback_failure_propagates(self):
        with self.assertRaises(httpx.HTTPStatusError):
            await self.load(
                {"/api/site": (500, {}), "/site.json": (404, {})},
                "/api/site",
                "/site.json",
            )
        self.assertEqual(self.calls, ["/api/site", "/site.json"])

    async def test_without_fallback_primary_error_propagates(self):
        with self.assertRaises(httpx.ConnectError):
            await self.load({"/api/site": httpx.ConnectError("refused")}, "/api/site", None)


class LocalSnapshotTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    async def test_path_fallback(self):
        snapshot = self.tmpdir / "galleries.json"
        snapshot.write_text(json.dumps({"home": [{"title": "Bundled"}]}))
        calls = []
        async with client_for({"/api/galleries": (503, {})}, calls) as http:
            data = await FetchBridge(http).load("/api/galleries", snapshot)
        self.assertEqual(data, {"home": [{"title": "Bundled"}]})

    async def test_missing_snapshot_raises(self):
        calls = []
        async with client_for({"/api/galleries": (503, {})}, calls) as http:
            with self.assertRaises(FileNotFoundError):
                await FetchBridge(http).load("/api/galleries", self.tmpdir / "missing.json")

    def test_as_location(self):
        self.assertIsNone(as_location(None))
        self.assertIsNone(as_location(""))
        self.assertEqual(as_location("https://cdn.test/galleries.json"), "https://cdn.test/galleries.json")
        self.assertEqual(as_location("public/galleries.json"), Path("public/galleries.json"))


if __name__ == "__main__":
    unittest.main()

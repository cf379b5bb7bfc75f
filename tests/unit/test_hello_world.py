"""
Unit tests for the Hello World responder.
The greeting must not depend on method, path, headers or body.
"""

import asyncio
import logging

import pytest
import uvicorn
from fastapi.testclient import TestClient

import hello_world
from hello_world import GREETING, app


@pytest.fixture
def client():
    """
    Create isolated test client for each test.
    """
    return TestClient(app)


class TestGreeting:
    """Every request gets the same plain-text response."""

    def test_root_returns_success_status(self, client):
        """Verify root endpoint returns 200 OK status."""
        response = client.get("/")

        assert response.status_code == 200

    def test_root_returns_hello_world(self, client):
        """Verify the exact body and content type."""
        response = client.get("/")

        assert response.text == "Hello World\n"
        assert response.content == GREETING.encode()
        assert response.headers["content-type"] == "text/plain"

    @pytest.mark.parametrize(
        "path", ["/anything/path", "/health", "/docs", "/openapi.json", "/a/b/c?x=1"]
    )
    def test_any_path_returns_greeting(self, client, path):
        """Verify path independence, including former docs routes."""
        response = client.get(path)

        assert response.status_code == 200
        assert response.text == GREETING

    @pytest.mark.parametrize(
        "method",
        ["POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "PROPFIND", "FOO"],
    )
    def test_any_method_returns_greeting(self, client, method):
        """Verify method independence."""
        response = client.request(method, "/", content=b"ignored body")

        assert response.status_code == 200
        assert response.text == GREETING

    def test_head_returns_success(self, client):
        response = client.head("/")

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/plain"

    def test_headers_do_not_matter(self, client):
        response = client.get("/", headers={"Accept": "application/json"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/plain"
        assert response.text == GREETING


class TestServe:
    """The process entry point runs the listener and the probe together."""

    @pytest.mark.anyio
    async def test_serve_logs_address_then_probe_value(self, monkeypatch, caplog):
        caplog.set_level(logging.INFO)

        async def fake_serve(self, sockets=None):
            # Let the probe and its continuation run
            for _ in range(3):
                await asyncio.sleep(0)

        monkeypatch.setattr(uvicorn.Server, "serve", fake_serve)

        await hello_world.serve("127.0.0.1", 1337)

        messages = [
            r.getMessage()
            for r in caplog.records
            if r.name in ("hello_world", "async_probe")
        ]
        assert messages == ["Server running at http://127.0.0.1:1337/", "Then: True"]

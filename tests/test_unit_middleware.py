"""
Unit tests for the request size limit middleware.

Tests cover:
- Rejection of oversized bodies with 413
- Normal handling of bodies within the limit
"""

import json

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from jsonlogic_rules.core.middleware import RequestSizeLimitMiddleware


def _echo_app(max_size_mb: int = 1) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestSizeLimitMiddleware, max_size_mb=max_size_mb)

    @app.post("/echo")
    async def echo(request: Request) -> dict:
        body = await request.body()
        return {"size": len(body)}

    return app


class TestRequestSizeLimitMiddleware:
    """Tests for RequestSizeLimitMiddleware."""

    @pytest.mark.anyio
    async def test_small_body_passes_through(self):
        client = TestClient(_echo_app())
        resp = client.post("/echo", content=b"x" * 100)
        assert resp.status_code == 200
        assert resp.json() == {"size": 100}

    @pytest.mark.anyio
    async def test_oversized_body_rejected(self):
        client = TestClient(_echo_app())
        resp = client.post("/echo", content=b"x" * (1024 * 1024 + 1))
        assert resp.status_code == 413
        body = resp.json()
        assert body["error"] == "RequestTooLarge"
        assert body["details"] == {"max_size_bytes": 1024 * 1024}

    @pytest.mark.anyio
    async def test_get_request_unaffected(self):
        app = _echo_app()

        @app.get("/ping")
        async def ping() -> dict:
            return {"ok": True}

        resp = TestClient(app).get("/ping")
        assert resp.status_code == 200


@pytest.mark.anyio
async def test_rules_api_rejects_oversized_rule(client) -> None:
    """The rules API applies the size limit before parsing the rule."""
    payload = json.dumps({"rule": {"==": ["x" * (1024 * 1024), "y"]}})
    resp = client.post(
        "/api/v1/rules/evaluate",
        content=payload,
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 413

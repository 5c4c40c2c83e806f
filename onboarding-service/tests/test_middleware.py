"""
Unit tests for middleware — RequestIDMiddleware and RequestTimingMiddleware.

Uses httpx.AsyncClient against a lightweight FastAPI test app to exercise
both middleware classes through their full dispatch cycle.
"""

import logging
import uuid

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.core.logging import request_id_ctx
from app.middleware import REQUEST_ID_HEADER, RequestIDMiddleware, RequestTimingMiddleware


def _make_test_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def test_endpoint():
        return {"request_id": request_id_ctx.get()}

    return app


async def _get(headers=None):
    transport = ASGITransport(app=_make_test_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get("/test", headers=headers or {})


class TestRequestIDMiddleware:
    @pytest.mark.asyncio
    async def test_generates_request_id_when_absent(self):
        resp = await _get()
        uuid.UUID(resp.headers[REQUEST_ID_HEADER])  # raises if invalid

    @pytest.mark.asyncio
    async def test_honours_existing_request_id(self):
        resp = await _get({REQUEST_ID_HEADER: "my-trace-id-12345"})
        assert resp.headers[REQUEST_ID_HEADER] == "my-trace-id-12345"

    @pytest.mark.asyncio
    async def test_request_id_visible_to_handlers(self):
        resp = await _get({REQUEST_ID_HEADER: "trace-abc"})
        assert resp.json() == {"request_id": "trace-abc"}

    @pytest.mark.asyncio
    async def test_context_cleared_after_request(self):
        await _get({REQUEST_ID_HEADER: "trace-abc"})
        assert request_id_ctx.get() is None


class TestRequestTimingMiddleware:
    @pytest.mark.asyncio
    async def test_adds_process_time_header(self):
        resp = await _get()
        value = resp.headers["X-Process-Time"]
        assert value.endswith("ms")
        assert float(value[:-2]) >= 0

    @pytest.mark.asyncio
    async def test_logs_structured_fields(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="app.middleware"):
            await _get()

        record = next(r for r in caplog.records if r.name == "app.middleware")
        assert record.method == "GET"
        assert record.path == "/test"
        assert record.status_code == 200

# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.
"""Unit tests for Observability API."""

import pytest
from httpx import AsyncClient, ASGITransport
from promptloom.main import app


class TestObservabilityAPI:
    @pytest.fixture(autouse=True)
    def setup_context(self, loom_ctx):
        self.ctx = loom_ctx

    @pytest.mark.asyncio
    async def test_health(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            resp = await c.get("/health")
            assert resp.status_code == 200
            data = resp.json()
            assert data["status"] == "ok"
            assert data["documents"] == 7
            assert data["load_failures"] == 0
            assert data["root"] == str(self.ctx.root)
            assert "metrics" in data

    @pytest.mark.asyncio
    async def test_metrics_after_compose(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            await c.post("/api/prompts/helm/compose",
                json={"params": {"chart": "c", "branch": "b"}},
            )
            resp = await c.get("/api/metrics")
            assert resp.status_code == 200
            data = resp.json()
            assert data["counters"]["compositions"] == 1
            assert data["counters"]["http_requests"] >= 1
            assert "uptime_seconds" in data

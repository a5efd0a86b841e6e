"""Tests for the HTTP surface -- static pages and status."""

from unittest.mock import patch

import pytest

from tests.conftest import make_ws_mock


class TestPages:

    @pytest.mark.asyncio
    async def test_index_page(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "startInterview" in resp.text

    @pytest.mark.asyncio
    async def test_coding_page(self, client):
        resp = await client.get("/coding")
        assert resp.status_code == 200
        assert "liveCodeUpdate" in resp.text

    @pytest.mark.asyncio
    async def test_missing_page_is_404(self, client, tmp_path):
        with patch("interview_relay.server.FRONTEND_DIR", tmp_path):
            resp = await client.get("/coding")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_shared_script_served(self, client):
        resp = await client.get("/static/relay.js")
        assert resp.status_code == 200
        assert "realtimeInput" in resp.text


class TestStatus:

    @pytest.mark.asyncio
    async def test_reports_upstream_and_clients(self, client, registry, fake_live):
        registry.add(make_ws_mock())
        registry.add(make_ws_mock())
        fake_live.is_open = False

        resp = await client.get("/api/status")

        assert resp.json() == {"upstream_open": False, "clients": 2}

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from config import settings
from main import app


@pytest.mark.asyncio
async def test_readiness_reports_missing_blob_store_config():
    with patch.multiple(settings, R2_ENDPOINT="", R2_BUCKET=""):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            resp = await client.get("/health/ready")

    assert resp.status_code == 503
    payload = resp.json()
    assert payload["ready"] is False
    assert {"R2_ENDPOINT", "R2_BUCKET"} <= set(payload["missing"])


@pytest.mark.asyncio
async def test_readiness_ok_when_blob_store_configured():
    with patch.multiple(
        settings,
        R2_ENDPOINT="https://account.r2.cloudflarestorage.com",
        R2_ACCESS_KEY_ID="access-key",
        R2_SECRET_ACCESS_KEY="secret-key",
        R2_BUCKET="research-assets",
    ):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            resp = await client.get("/health/ready")
            live = await client.get("/health/live")

    assert resp.status_code == 200
    assert resp.json() == {"ready": True}
    assert live.json() == {"alive": True}

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from api.main import app as api_app
from gluestick import fetcher
from tests.integration.mock_target import app as target_app


@pytest_asyncio.fixture
async def mock_client():
    transport = httpx.ASGITransport(app=target_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def target_fetcher(monkeypatch):
    """Route every fetcher request to the mock target app."""

    def build_client() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=target_app),
            follow_redirects=True,
        )

    monkeypatch.setattr(fetcher, "_CLIENTS", {})
    monkeypatch.setattr(fetcher, "_build_httpx_client", build_client)
    return monkeypatch


@pytest_asyncio.fixture
async def api_client(target_fetcher):
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://gluestick") as client:
        yield client
    await fetcher.close_http_clients()

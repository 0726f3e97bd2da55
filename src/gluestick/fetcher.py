from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from core.config import settings

logger = logging.getLogger(__name__)
_CLIENTS: dict[str, httpx.AsyncClient] = {}
_CLIENT_LOCK = asyncio.Lock()
_DEFAULT_CLIENT = "default"


class FetcherError(Exception):
    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


@dataclass(frozen=True)
class FetchResult:
    url: str
    status: int
    html: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


async def fetch_html(
    url: str,
    *,
    timeout_ms: int | None = None,
    max_bytes: int | None = None,
) -> FetchResult:
    """GET ``url`` once and decode the body.

    Transport failures raise ``FetcherError``; HTTP error statuses are
    returned and left to the caller. Nothing is retried.
    """
    resolved_timeout = settings.fetch_timeout_ms if timeout_ms is None else timeout_ms
    timeout = None
    if resolved_timeout and resolved_timeout > 0:
        timeout = httpx.Timeout(resolved_timeout / 1000)
    resolved_max = settings.fetch_max_bytes if max_bytes is None else max_bytes
    limit = resolved_max if resolved_max and resolved_max > 0 else None
    request_headers = {"User-Agent": settings.fetch_user_agent}

    buffer: list[bytes] = []
    total = 0
    truncated = False
    try:
        client = await _get_httpx_client()
        async with client.stream("GET", url, headers=request_headers, timeout=timeout) as response:
            async for chunk in response.aiter_bytes():
                if limit is not None and total + len(chunk) > limit:
                    remaining = limit - total
                    if remaining > 0:
                        buffer.append(chunk[:remaining])
                        total += remaining
                    truncated = True
                    break
                buffer.append(chunk)
                total += len(chunk)
            content = b"".join(buffer)
            encoding = response.encoding or "utf-8"
            if truncated:
                logger.info("fetch_truncated: %s at %s bytes", url, total)
            return FetchResult(
                url=str(response.url),
                status=response.status_code,
                html=content.decode(encoding, errors="ignore"),
            )
    except httpx.TimeoutException as exc:
        logger.warning("fetch_timeout: %s", exc)
        raise FetcherError("timeout") from exc
    except httpx.RequestError as exc:
        logger.warning("fetch_failed: %s", exc)
        raise FetcherError("fetch_failed") from exc


async def _get_httpx_client() -> httpx.AsyncClient:
    client = _CLIENTS.get(_DEFAULT_CLIENT)
    if client:
        return client
    async with _CLIENT_LOCK:
        client = _CLIENTS.get(_DEFAULT_CLIENT)
        if client:
            return client
        client = _build_httpx_client()
        _CLIENTS[_DEFAULT_CLIENT] = client
        return client


def _build_httpx_client() -> httpx.AsyncClient:
    limits = None
    max_conn = settings.fetch_pool_max_connections
    max_keepalive = settings.fetch_pool_max_keepalive
    if max_conn > 0 or max_keepalive > 0:
        limits = httpx.Limits(
            max_connections=max_conn if max_conn > 0 else None,
            max_keepalive_connections=max_keepalive if max_keepalive > 0 else None,
        )
    if limits is None:
        return httpx.AsyncClient(follow_redirects=True)
    return httpx.AsyncClient(follow_redirects=True, limits=limits)


async def close_http_clients() -> None:
    async with _CLIENT_LOCK:
        clients = list(_CLIENTS.values())
        _CLIENTS.clear()
    for client in clients:
        await client.aclose()

"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts, pool limits and auth headers for every Linode call.
- Makes testing easy: callers accept any `httpx.AsyncClient`, so tests pass
  one built on `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

USER_AGENT = "cert-webhook/0.1"


def build_timeout(settings: AppSettings) -> httpx.Timeout:
    return httpx.Timeout(settings.http_timeout_seconds, connect=settings.http_connect_timeout_seconds)


def build_async_client(
    settings: AppSettings,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared `httpx.AsyncClient` for the Linode API.

    One client per process: its connection pool is shared by all concurrent
    syncs and is safe for concurrent use.
    """

    headers: dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
        "Authorization": f"Bearer {settings.linode_token}",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.linode_api_url.rstrip("/"),
        timeout=build_timeout(settings),
        limits=httpx.Limits(
            max_keepalive_connections=settings.http_max_keepalive_connections,
            keepalive_expiry=settings.http_keepalive_expiry_seconds,
        ),
        headers=headers,
        transport=transport,
    )

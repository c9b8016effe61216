"""Linode NodeBalancer adapter.

Implements `core.interfaces.LoadBalancerAPI` over the Linode v4 REST API:

- `GET  /nodebalancers/{id}/configs` (paginated) -> list configs
- `POST /nodebalancers/{id}/configs`             -> create
- `PUT  /nodebalancers/{id}/configs/{config_id}` -> update

These are I/O only; the find-or-create decision lives in the core.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from core.domain.errors import RemoteAPIError, ResolveError, UpsertError
from core.domain.models import TerminatorConfig

logger = logging.getLogger(__name__)

_MAX_PAGES = 100


def _error_text(response: httpx.Response) -> str:
    """Linode answers `{"errors": [{"field": ..., "reason": ...}]}`; fall back to raw text."""

    try:
        payload = response.json()
    except ValueError:
        return response.text
    errors = payload.get("errors") if isinstance(payload, dict) else None
    if not isinstance(errors, list) or not errors:
        return response.text
    reasons: list[str] = []
    for err in errors:
        if not isinstance(err, dict):
            continue
        reason = str(err.get("reason") or "").strip()
        field = err.get("field")
        reasons.append(f"{field}: {reason}" if field else reason)
    return "; ".join(r for r in reasons if r) or response.text


class LinodeNodeBalancerClient:
    """Thin async client for NodeBalancer configs.

    The `httpx.AsyncClient` is injected (see `adapters.http_client`) and
    must already carry the base URL and bearer token. Its timeouts apply per
    phase (connect, read, write); `total_timeout` bounds each whole request.
    """

    def __init__(self, client: httpx.AsyncClient, *, total_timeout: float | None = 30.0) -> None:
        self._client = client
        self.total_timeout = total_timeout

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await asyncio.wait_for(self._client.request(method, url, **kwargs), timeout=self.total_timeout)
        except asyncio.TimeoutError as exc:
            raise httpx.TimeoutException(f"no response within {self.total_timeout:g}s") from exc

    async def _send(
        self,
        error_cls: type[RemoteAPIError],
        method: str,
        url: str,
        *,
        action: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise error_cls(f"Failed to {action}: {type(exc).__name__}: {exc}") from exc
        if response.is_success:
            return response
        body = _error_text(response)
        logger.error("Failed to %s (HTTP %s): %s", action, response.status_code, body)
        raise error_cls(
            f"Failed to {action}: HTTP {response.status_code}: {body}",
            status_code=response.status_code,
            body=body,
        )

    async def list_terminators(self, load_balancer_id: str) -> list[TerminatorConfig]:
        url = f"/nodebalancers/{load_balancer_id}/configs"
        configs: list[TerminatorConfig] = []
        page = 1
        while True:
            response = await self._send(
                ResolveError, "GET", url, action="list NodeBalancer configs", params={"page": page}
            )
            try:
                payload = response.json()
                configs.extend(TerminatorConfig.model_validate(item) for item in payload.get("data") or [])
                pages = int(payload.get("pages") or 1)
            except (ValueError, AttributeError, ValidationError) as exc:
                raise ResolveError(f"Unexpected NodeBalancer config listing: {exc}") from exc
            if page >= pages or page >= _MAX_PAGES:
                return configs
            page += 1

    async def create_terminator(self, load_balancer_id: str, payload: dict[str, Any]) -> int:
        response = await self._send(
            UpsertError,
            "POST",
            f"/nodebalancers/{load_balancer_id}/configs",
            action="create config",
            json=payload,
        )
        try:
            return int(response.json()["id"])
        except (ValueError, KeyError, TypeError) as exc:
            raise UpsertError(f"Config created but response had no id: {exc}") from exc

    async def update_terminator(self, load_balancer_id: str, config_id: int, payload: dict[str, Any]) -> None:
        await self._send(
            UpsertError,
            "PUT",
            f"/nodebalancers/{load_balancer_id}/configs/{config_id}",
            action="update config",
            json=payload,
        )

    async def check_load_balancer(self, load_balancer_id: str) -> tuple[bool, str]:
        """Reachability check for the deep health check."""

        try:
            response = await self._request("GET", f"/nodebalancers/{load_balancer_id}")
        except httpx.HTTPError as exc:
            return False, f"Failed to connect to Linode API: {exc}"
        if response.is_success:
            return True, f"HTTP {response.status_code}"
        return False, f"Linode API responded with status: {response.status_code}"

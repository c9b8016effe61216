"""Load-balancer API contract."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.models import TerminatorConfig


@runtime_checkable
class LoadBalancerAPI(Protocol):
    """Operations the sync engine needs on the termination configs.

    Failures surface as `ResolveError` (listing) or `UpsertError`
    (create/update), carrying the remote status and body.
    """

    async def list_terminators(self, load_balancer_id: str) -> list[TerminatorConfig]:
        """Every config attached to the load balancer, in API order."""

        ...

    async def create_terminator(self, load_balancer_id: str, payload: dict[str, Any]) -> int:
        """Create a config and return its identifier."""

        ...

    async def update_terminator(self, load_balancer_id: str, config_id: int, payload: dict[str, Any]) -> None:
        ...

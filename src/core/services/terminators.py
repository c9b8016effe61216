"""Find-or-create of the HTTPS termination config.

Known limitations:
- "The" HTTPS terminator is the first config bound to port 443 in the order
  the API lists them (or by ascending id with `sort_by_id`). Extra port-443
  configs are ignored.
- Creating is not idempotent. Resolution is re-run before every upsert
  attempt, but a create whose response is lost can still leave a duplicate.
"""

from __future__ import annotations

import logging
from typing import Any

from core.domain.models import CertificateMaterial, TerminatorConfig
from core.interfaces.load_balancer import LoadBalancerAPI

HTTPS_PORT = 443

DEFAULT_TERMINATOR: dict[str, Any] = {
    "port": HTTPS_PORT,
    "protocol": "https",
    "algorithm": "roundrobin",
    "stickiness": "none",
    "check": "http_body",
    "check_path": "/",
    "check_interval": 30,
    "check_timeout": 5,
    "check_attempts": 3,
    "cipher_suite": "recommended",
}

logger = logging.getLogger(__name__)


def select_https_terminator(
    configs: list[TerminatorConfig],
    *,
    sort_by_id: bool = False,
) -> TerminatorConfig | None:
    """Return the first port-443 config, or `None` when there is none."""

    ordered = sorted(configs, key=lambda c: c.id) if sort_by_id else configs
    for config in ordered:
        if config.port == HTTPS_PORT:
            return config
    return None


class TerminatorResolver:
    def __init__(self, api: LoadBalancerAPI, *, sort_by_id: bool = False) -> None:
        self._api = api
        self._sort_by_id = sort_by_id

    async def resolve(self, load_balancer_id: str) -> TerminatorConfig | None:
        configs = await self._api.list_terminators(load_balancer_id)
        found = select_https_terminator(configs, sort_by_id=self._sort_by_id)
        if found is None:
            logger.info("No HTTPS config on NodeBalancer %s (%d configs listed)", load_balancer_id, len(configs))
        else:
            logger.debug("Resolved HTTPS config %s on NodeBalancer %s", found.id, load_balancer_id)
        return found


class TerminatorUpserter:
    def __init__(self, api: LoadBalancerAPI) -> None:
        self._api = api

    async def upsert(
        self,
        load_balancer_id: str,
        existing: TerminatorConfig | None,
        material: CertificateMaterial,
    ) -> int:
        """Install `material`; return the id of the config that now holds it."""

        tls = {"ssl_cert": material.certificate_pem, "ssl_key": material.private_key_pem}

        if existing is not None:
            logger.info("Updating HTTPS config (ID: %s)", existing.id)
            await self._api.update_terminator(load_balancer_id, existing.id, {"protocol": "https", **tls})
            return existing.id

        logger.info("Creating HTTPS config on NodeBalancer %s", load_balancer_id)
        config_id = await self._api.create_terminator(load_balancer_id, {**DEFAULT_TERMINATOR, **tls})
        logger.info("Created HTTPS config (ID: %s)", config_id)
        return config_id

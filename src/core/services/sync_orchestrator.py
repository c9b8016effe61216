"""Sync orchestration.

This module sequences one request/response cycle:

1. validate the request (no network on failure);
2. read the secret through the retry executor;
3. resolve and upsert the HTTPS config, retried together so each attempt
   re-checks the current NodeBalancer state.

There is no rollback: when step 3 fails after the remote side applied a
change, the failure is reported and the caller re-triggers the sync.
"""

from __future__ import annotations

import asyncio
import logging

from core.config import AppSettings
from core.domain.errors import CertWebhookError, InvalidRequestError
from core.domain.models import CertificateMaterial, CertificateRequest, SyncOutcome, SyncStatus
from core.interfaces.load_balancer import LoadBalancerAPI
from core.interfaces.secret_store import SecretStore
from core.services.retry import RetryExecutor
from core.services.secret_fetcher import SecretFetcher
from core.services.terminators import TerminatorResolver, TerminatorUpserter
from core.services.validator import validate_request

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Composes validator, fetcher, resolver and upserter.

    Instances hold no per-request state and can serve concurrent calls.
    """

    def __init__(
        self,
        *,
        load_balancer_id: str,
        fetcher: SecretFetcher,
        resolver: TerminatorResolver,
        upserter: TerminatorUpserter,
        retry: RetryExecutor | None = None,
        deadline_seconds: float | None = None,
    ) -> None:
        self.load_balancer_id = load_balancer_id
        self._fetcher = fetcher
        self._resolver = resolver
        self._upserter = upserter
        self._retry = retry or RetryExecutor()
        self._deadline = deadline_seconds or None

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        secret_store: SecretStore,
        load_balancer: LoadBalancerAPI,
    ) -> "SyncOrchestrator":
        return cls(
            load_balancer_id=settings.nodebalancer_id,
            fetcher=SecretFetcher(secret_store),
            resolver=TerminatorResolver(load_balancer, sort_by_id=settings.terminator_sort_by_id),
            upserter=TerminatorUpserter(load_balancer),
            retry=RetryExecutor(
                max_attempts=settings.retry_max_attempts,
                base_delay=settings.retry_base_delay_seconds,
            ),
            deadline_seconds=settings.sync_deadline_seconds,
        )

    async def synchronize(self, request: CertificateRequest) -> SyncOutcome:
        logger.info("Processing certificate request for %s", request)
        if self._deadline is None:
            return await self._run(request)
        try:
            return await asyncio.wait_for(self._run(request), timeout=self._deadline)
        except asyncio.TimeoutError:
            logger.error("Sync of %s abandoned after %.1fs", request, self._deadline)
            return SyncOutcome(
                status=SyncStatus.TIMEOUT,
                message=f"Sync did not complete within {self._deadline:g}s",
            )

    async def _run(self, request: CertificateRequest) -> SyncOutcome:
        try:
            validate_request(request)
        except InvalidRequestError as exc:
            logger.error("Validation error: %s", exc)
            return SyncOutcome(status=SyncStatus.VALIDATION_ERROR, message=f"Invalid request: {exc}")

        try:
            material = await self._retry.execute(
                lambda: self._fetcher.fetch(request.namespace, request.secret_name),
                label=f"fetch secret {request}",
            )
        except Exception as exc:
            self._log_failure("Failed to retrieve certificate data", exc)
            return SyncOutcome(
                status=SyncStatus.FETCH_ERROR,
                message=f"Failed to retrieve certificate data: {exc}",
            )

        try:
            await self._retry.execute(
                lambda: self._resolve_and_upsert(material),
                label=f"update NodeBalancer {self.load_balancer_id}",
            )
        except Exception as exc:
            self._log_failure("Failed to update NodeBalancer", exc)
            return SyncOutcome(
                status=SyncStatus.UPSERT_ERROR,
                message=f"Failed to update NodeBalancer: {exc}",
            )

        logger.info("Successfully updated certificate for %s", request)
        return SyncOutcome(status=SyncStatus.SUCCESS)

    async def _resolve_and_upsert(self, material: CertificateMaterial) -> int:
        existing = await self._resolver.resolve(self.load_balancer_id)
        return await self._upserter.upsert(self.load_balancer_id, existing, material)

    @staticmethod
    def _log_failure(what: str, exc: Exception) -> None:
        if isinstance(exc, CertWebhookError):
            logger.error("%s: %s", what, exc)
        else:
            logger.exception("%s: unexpected %s", what, type(exc).__name__)

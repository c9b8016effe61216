"""Webhook server.

Routes:
- `GET  /health`                    liveness
- `GET  /health/deep`               Kubernetes + NodeBalancer reachability
- `GET  /metrics`                   Prometheus exposition
- `POST /update-nodebalancer-cert`  cert-manager style payload
- `POST /sync`                      flat `{namespace, secret_name}` payload

Outcomes map to HTTP as: success 200, validationError 400, fetchError and
upsertError 500, timeout 504.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.routing import Match

from adapters.http_client import build_async_client
from adapters.kube_secrets import KubernetesSecretStore
from adapters.linode_api import LinodeNodeBalancerClient
from api.limits import PayloadLimitMiddleware
from api.metrics import WebhookMetrics
from core.config import AppSettings
from core.domain.models import (
    ApiResponse,
    CertificateRequest,
    CertManagerHook,
    SyncOutcome,
    SyncRequestBody,
    SyncStatus,
)
from core.services.sync_orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

UNMATCHED_ROUTE = "unmatched"

HealthCheck = Callable[[], Awaitable[tuple[bool, str]]]

STATUS_CODES: dict[SyncStatus, int] = {
    SyncStatus.SUCCESS: 200,
    SyncStatus.VALIDATION_ERROR: 400,
    SyncStatus.FETCH_ERROR: 500,
    SyncStatus.UPSERT_ERROR: 500,
    SyncStatus.TIMEOUT: 504,
}


@dataclass
class ServiceState:
    """What the routes need; built once per process in the lifespan."""

    orchestrator: SyncOrchestrator
    health_checks: list[HealthCheck] = field(default_factory=list)


def _json(status_code: int, status: str, message: str | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiResponse(status=status, message=message).model_dump())


def route_label(request: Request) -> str:
    """Route template of the request, so unknown paths share one series."""

    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return getattr(route, "path", UNMATCHED_ROUTE)
    return UNMATCHED_ROUTE


def outcome_response(outcome: SyncOutcome) -> JSONResponse:
    status = "success" if outcome.ok else "error"
    return _json(STATUS_CODES[outcome.status], status, outcome.message)


@asynccontextmanager
async def _default_state(settings: AppSettings) -> AsyncIterator[ServiceState]:
    http_client = build_async_client(settings)
    secret_store = KubernetesSecretStore.from_settings(settings)
    linode = LinodeNodeBalancerClient(http_client, total_timeout=settings.http_timeout_seconds)

    async def linode_check() -> tuple[bool, str]:
        return await linode.check_load_balancer(settings.nodebalancer_id)

    try:
        yield ServiceState(
            orchestrator=SyncOrchestrator.from_settings(settings, secret_store=secret_store, load_balancer=linode),
            health_checks=[secret_store.check_connection, linode_check],
        )
    finally:
        await http_client.aclose()
        secret_store.close()


def create_app(
    settings: AppSettings | None = None,
    *,
    state: ServiceState | None = None,
    metrics: WebhookMetrics | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    When `state` is given (tests, embedding) no client is created; otherwise
    the Kubernetes and Linode clients are built on startup and closed on
    shutdown.
    """

    settings = settings or AppSettings()
    metrics = metrics or WebhookMetrics()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if state is not None:
            app.state.service = state
            yield
            return
        async with _default_state(settings) as built:
            app.state.service = built
            logger.info("Webhook ready for NodeBalancer %s", settings.nodebalancer_id)
            yield

    app = FastAPI(title="cert-webhook", lifespan=lifespan)
    app.state.metrics = metrics

    app.add_middleware(PayloadLimitMiddleware, max_bytes=settings.max_payload_bytes)

    @app.middleware("http")
    async def count_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        response = await call_next(request)
        metrics.http_requests.labels(request.method, route_label(request), str(response.status_code)).inc()
        return response

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.error("JSON payload error: %s", exc.errors())
        return _json(400, "error", "Invalid JSON payload")

    async def run_sync(request: Request, cert_request: CertificateRequest) -> JSONResponse:
        service: ServiceState = request.app.state.service
        started = time.perf_counter()
        outcome = await service.orchestrator.synchronize(cert_request)
        metrics.sync_duration.observe(time.perf_counter() - started)
        metrics.sync_outcomes.labels(outcome.status.value).inc()
        return outcome_response(outcome)

    @app.get("/health")
    async def health() -> JSONResponse:
        return _json(200, "healthy")

    @app.get("/health/deep")
    async def deep_health(request: Request) -> JSONResponse:
        service: ServiceState = request.app.state.service
        for check in service.health_checks:
            ok, detail = await check()
            if not ok:
                logger.warning("Deep health check failed: %s", detail)
                return _json(503, "degraded", detail)
        return _json(200, "healthy")

    @app.get("/metrics")
    async def metrics_endpoint() -> Response:
        body, content_type = metrics.render()
        return Response(content=body, media_type=content_type)

    @app.post("/update-nodebalancer-cert")
    async def update_nodebalancer_cert(request: Request, hook: CertManagerHook) -> JSONResponse:
        return await run_sync(request, hook.to_request())

    @app.post("/sync")
    async def sync(request: Request, body: SyncRequestBody) -> JSONResponse:
        return await run_sync(request, body.to_request())

    return app

"""Command-line entry point."""

from __future__ import annotations

import asyncio

import typer
import uvicorn
from rich.console import Console

from adapters.http_client import build_async_client
from adapters.kube_secrets import KubernetesSecretStore
from adapters.linode_api import LinodeNodeBalancerClient
from api.app import create_app
from cli import doctor
from cli.ui_components import build_outcome_panel, print_banner
from core.config import AppSettings
from core.domain.models import CertificateRequest, SyncOutcome
from core.log_config import configure_logging
from core.services.sync_orchestrator import SyncOrchestrator

app = typer.Typer(no_args_is_help=True, help="Sync Kubernetes TLS secrets to a Linode NodeBalancer.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Bind address (default: CERT_WEBHOOK_HOST)."),
    port: int | None = typer.Option(None, help="Bind port (default: CERT_WEBHOOK_PORT / PORT)."),
) -> None:
    """Run the webhook HTTP server."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    print_banner(_console)
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        timeout_keep_alive=75,
        timeout_graceful_shutdown=30,
        log_config=None,
    )


async def _sync_once(settings: AppSettings, request: CertificateRequest) -> SyncOutcome:
    secret_store = KubernetesSecretStore.from_settings(settings)
    try:
        async with build_async_client(settings) as http_client:
            orchestrator = SyncOrchestrator.from_settings(
                settings,
                secret_store=secret_store,
                load_balancer=LinodeNodeBalancerClient(http_client, total_timeout=settings.http_timeout_seconds),
            )
            return await orchestrator.synchronize(request)
    finally:
        secret_store.close()


@app.command()
def sync(
    namespace: str = typer.Option(..., "--namespace", "-n", help="Namespace of the TLS secret."),
    secret_name: str = typer.Option(..., "--secret-name", "-s", help="Name of the TLS secret."),
) -> None:
    """Run one sync without the HTTP server (e.g. from a CronJob)."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    request = CertificateRequest(namespace=namespace, secret_name=secret_name)
    outcome = asyncio.run(_sync_once(settings, request))
    _console.print(build_outcome_panel(request, outcome))
    if not outcome.ok:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()

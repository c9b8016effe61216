"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.kube_secrets import KubernetesSecretStore
from adapters.linode_api import LinodeNodeBalancerClient
from cli.ui_components import build_settings_table
from core.config import AppSettings

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_linode(settings: AppSettings) -> tuple[bool, str]:
    async with build_async_client(settings) as client:
        linode = LinodeNodeBalancerClient(client, total_timeout=settings.http_timeout_seconds)
        return await linode.check_load_balancer(settings.nodebalancer_id)


async def _check_kubernetes(settings: AppSettings) -> tuple[bool, str]:
    try:
        store = KubernetesSecretStore.from_settings(settings)
    except Exception as exc:
        return False, f"No usable Kubernetes configuration: {exc}"
    try:
        return await store.check_connection()
    finally:
        store.close()


async def _run_checks(settings: AppSettings) -> list[tuple[str, bool, str]]:
    kube_ok, kube_detail = await _check_kubernetes(settings)
    linode_ok, linode_detail = await _check_linode(settings)
    return [
        ("Kubernetes API", kube_ok, kube_detail),
        ("Linode NodeBalancer", linode_ok, linode_detail),
    ]


@app.command()
def run() -> None:
    """Run baseline diagnostics and show what is misconfigured."""

    try:
        settings = AppSettings()
    except ValidationError as exc:
        _console.print(f"[red]Configuration invalid:[/red]\n{exc}")
        raise typer.Exit(code=2)

    _console.print(build_settings_table(settings))

    table = Table(title="cert-webhook Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    results = asyncio.run(_run_checks(settings))
    for name, ok, detail in results:
        table.add_row(name, "OK" if ok else "FAIL", detail)
    _console.print(table)

    if not all(ok for _, ok, _ in results):
        _console.print(
            "\n[yellow]Note:[/yellow] syncs will fail until every check passes; "
            "see CERT_WEBHOOK_* variables in the README."
        )
        raise typer.Exit(code=1)

"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Lets `sync` and `doctor` share panels and tables.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import AppSettings
from core.domain.models import CertificateRequest, SyncOutcome


def print_banner(console: Console) -> None:
    title = Text("cert-webhook", style="bold cyan")
    subtitle = Text("Kubernetes TLS secrets -> Linode NodeBalancer", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_settings_table(settings: AppSettings) -> Table:
    """Non-secret settings; the token is only reported as set/unset."""

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("NodeBalancer", settings.nodebalancer_id)
    table.add_row("Linode API", settings.linode_api_url)
    table.add_row("Linode token", "set" if settings.linode_token else "missing")
    table.add_row("Retries", f"{settings.retry_max_attempts} x {settings.retry_base_delay_seconds:g}s base")
    table.add_row("Sync deadline", f"{settings.sync_deadline_seconds:g}s" if settings.sync_deadline_seconds else "off")
    table.add_row("Kubeconfig", str(settings.kubeconfig_path) if settings.kubeconfig_path else "in-cluster / default")
    return table


def build_outcome_panel(request: CertificateRequest, outcome: SyncOutcome) -> Panel:
    """Panel presenting the result of a one-shot sync."""

    style = "green" if outcome.ok else "red"
    body = Text()
    body.append("Secret: ", style="bold")
    body.append(f"{request}\n")
    body.append("Status: ", style="bold")
    body.append(outcome.status.value, style=style)
    if outcome.message:
        body.append(f"\n\n{outcome.message}")
    return Panel(body, title=Text("Sync", style=f"bold {style}"), border_style=style)

"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `lookup` y `doctor`.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import LookupReport, OutcomeRecord, ValidationRejection


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (se omite con `--quiet`)."""

    title = Text("sub2tenant", style="bold cyan")
    subtitle = Text("Azure subscription → Entra ID tenant", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_results_table(records: Iterable[OutcomeRecord], *, enriched: bool) -> Table:
    table = Table(title="Resolved Subscriptions")
    table.add_column("Subscription", style="white", no_wrap=True)
    table.add_column("Tenant", style="cyan", no_wrap=True)
    if enriched:
        table.add_column("Display name", style="green")
        table.add_column("Default domain", style="magenta")
    for record in records:
        row = [record.subscription_id, record.tenant_id]
        if enriched:
            row += [record.display_name or "", record.default_domain_name or ""]
        table.add_row(*row)
    return table


def build_errors_table(records: Iterable[OutcomeRecord]) -> Table:
    table = Table(title="Unresolved Subscriptions")
    table.add_column("Subscription", style="white", no_wrap=True)
    table.add_column("Tenant", style="dim", no_wrap=True)
    table.add_column("Error", style="red")
    table.add_column("Detail", style="dim")
    for record in records:
        error = record.error
        table.add_row(
            record.subscription_id,
            record.tenant_id,
            error.kind.value if error else "",
            (error.detail or "") if error else "",
        )
    return table


def build_rejections_panel(rejections: Iterable[ValidationRejection]) -> Panel:
    body = Text()
    for rejection in rejections:
        body.append("- ")
        body.append(repr(rejection.raw), style="bold")
        body.append(f": {rejection.reason}\n")
    return Panel(body, title=Text("Invalid input", style="bold yellow"), border_style="yellow")


def render_report(console: Console, report: LookupReport) -> None:
    """Presenta el reporte: resueltos, errores, rechazos y una línea de resumen.

    Los avisos (`report.warnings`) se muestran en vivo vía `PipelineHooks`.
    """

    if report.resolved:
        console.print(build_results_table(report.resolved, enriched=report.enriched))
    if report.errored:
        console.print(build_errors_table(report.errored))
    if report.rejections:
        console.print(build_rejections_panel(report.rejections))

    console.print(
        f"[dim]{len(report.records)} looked up • {len(report.resolved)} resolved • "
        f"{len(report.errored)} unresolved • {len(report.rejections)} rejected • "
        f"{report.elapsed_seconds:.2f}s[/dim]"
    )

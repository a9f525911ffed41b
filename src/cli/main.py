"""CLI principal (Typer).

Comandos:
- `lookup`: resuelve suscripciones a tenants (con `--enrich` opcional).
- `doctor`: diagnósticos de entorno y configuración.

La CLI solo imprime; toda la lógica vive en `core.services.tenant_pipeline`.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from adapters.csv_exporter import export_records_csv
from adapters.input_reader import read_subscription_ids
from adapters.json_exporter import export_report_json
from cli import doctor
from cli.ui_components import print_banner, render_report
from core.config import AppSettings
from core.errors import Sub2TenantError
from core.services.tenant_pipeline import LookupRequest, PipelineHooks, run_lookup

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Find the Entra ID tenant that owns each Azure subscription.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="<level>{level: <8}</level> {message}")


def load_settings() -> AppSettings:
    try:
        return AppSettings()
    except ValidationError as exc:
        _err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def lookup(
    subscription_ids: Optional[List[str]] = typer.Argument(
        None,
        help="Subscription ids (GUIDs).",
        show_default=False,
    ),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Read ids from a file (one per line, or CSV with a SubscriptionId column). Use '-' for stdin.",
        allow_dash=True,
    ),
    enrich: bool = typer.Option(
        False,
        "--enrich",
        "-e",
        help="Add tenant display name and default domain from Microsoft Graph.",
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        "-c",
        min=1,
        max=500,
        help="Max subscriptions in flight (default: SUB2TENANT_MAX_CONCURRENCY or 10).",
    ),
    sequential: bool = typer.Option(
        False,
        "--sequential",
        help="Process one subscription at a time (same as --concurrency 1).",
    ),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Write results as CSV."),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Write the full report as JSON."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="No banner or progress bar."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """Resolve subscriptions to their owning tenant."""

    settings = load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)

    raw_ids: list[str] = list(subscription_ids or [])
    if file is not None:
        try:
            raw_ids.extend(read_subscription_ids(file))
        except (OSError, UnicodeDecodeError) as exc:
            raise typer.BadParameter(f"cannot read {file}: {exc}", param_hint="--file") from exc
    if not raw_ids:
        raise typer.BadParameter("provide subscription ids as arguments or with --file")

    if sequential and concurrency not in (None, 1):
        raise typer.BadParameter("--sequential conflicts with --concurrency", param_hint="--sequential")

    if not quiet:
        print_banner(_console)

    request = LookupRequest(
        subscription_ids=raw_ids,
        enrich=enrich,
        max_concurrency=1 if sequential else concurrency,
    )

    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=_console,
        transient=True,
        disable=quiet,
    )
    task_ids: list[int] = []

    def on_start(total: int) -> None:
        task_ids.append(progress.add_task("Probing ARM", total=total))

    def on_done(_record: object) -> None:
        if task_ids:
            progress.advance(task_ids[0])

    hooks = PipelineHooks(
        warning=lambda message: _err_console.print(f"[yellow]Warning:[/yellow] {message}"),
        lookup_start=on_start,
        lookup_progress=on_done,
    )

    try:
        with progress:
            report = run_lookup(settings=settings, request=request, hooks=hooks)
    except Sub2TenantError as exc:
        _err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if not report.records and not report.rejections:
        _err_console.print("[yellow]Warning:[/yellow] no subscription ids to look up.")

    render_report(_console, report)

    if csv_path is not None:
        out = export_records_csv(records=report.records, output_path=csv_path)
        _console.print(f"[green]CSV written to:[/green] {out}")
    if json_path is not None:
        out = export_report_json(report=report, output_path=json_path)
        _console.print(f"[green]JSON written to:[/green] {out}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()

"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adapters.arm_probe import ArmChallengeResolver
from adapters.credentials import build_credential_provider
from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars
from core.domain.models import ResolutionErrorKind
from core.errors import ResolutionFailed

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

# Suscripción inexistente: ARM debe contestar 401 con challenge (o 404).
_PROBE_SUBSCRIPTION = "00000000-0000-0000-0000-000000000000"


async def _check_arm(settings: AppSettings) -> tuple[bool, str]:
    async with build_async_client(settings) as client:
        resolver = ArmChallengeResolver(client, settings)
        try:
            tenant_id = await resolver.resolve(_PROBE_SUBSCRIPTION)
        except ResolutionFailed as exc:
            if exc.error.kind is ResolutionErrorKind.NOT_FOUND:
                return True, "HTTP 404 (reachable)"
            return False, exc.error.describe()
    return True, f"challenge parsed (tenant {tenant_id})"


async def _check_token(settings: AppSettings) -> tuple[bool, str]:
    provider = build_credential_provider(settings)
    token = await provider.get_token()
    if not token:
        return False, "no token (enrichment will be skipped)"
    source = "SUB2TENANT_GRAPH_TOKEN" if settings.graph_token else settings.az_cli_path
    return True, f"token obtained via {source}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="sub2tenant Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("ARM endpoint", "OK", f"{settings.arm_base_url} (api-version {settings.arm_api_version})")
    table.add_row("Issuer hosts", "OK", ", ".join(settings.issuer_hosts))
    table.add_row("Concurrency", "OK", str(settings.max_concurrency))

    # Connectivity (best-effort)
    ok_arm, detail_arm = asyncio.run(_check_arm(settings))
    table.add_row("ARM probe", "OK" if ok_arm else "FAIL", detail_arm)

    ok_token, detail_token = asyncio.run(_check_token(settings))
    table.add_row("Graph token", "OK" if ok_token else "OPTIONAL", detail_token)

    _console.print(table)

    if not ok_token:
        _console.print(
            "\n[yellow]Note:[/yellow] run `az login` or set SUB2TENANT_GRAPH_TOKEN to enable `--enrich`."
        )


@app.command()
def configure(
    concurrency: Optional[int] = typer.Option(None, "--concurrency", min=1, max=500),
    issuer_hosts: Optional[str] = typer.Option(
        None,
        "--issuer-hosts",
        help="Comma-separated issuer hosts accepted in authorization_uri.",
    ),
    arm_base_url: Optional[str] = typer.Option(None, "--arm-base-url"),
    graph_base_url: Optional[str] = typer.Option(None, "--graph-base-url"),
) -> None:
    """Store non-secret defaults in the user config .env (tokens are never stored)."""

    values: dict[str, str] = {}
    if concurrency is not None:
        values["SUB2TENANT_MAX_CONCURRENCY"] = str(concurrency)
    if issuer_hosts:
        values["SUB2TENANT_ISSUER_HOSTS"] = issuer_hosts
    if arm_base_url:
        values["SUB2TENANT_ARM_BASE_URL"] = arm_base_url
    if graph_base_url:
        values["SUB2TENANT_GRAPH_BASE_URL"] = graph_base_url
    if not values:
        raise typer.BadParameter("nothing to configure")

    # Valida antes de escribir.
    try:
        AppSettings(**{key.removeprefix("SUB2TENANT_").lower(): value for key, value in values.items()})
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved config to:[/green] {env_path}")

"""Proveedores de credenciales para Microsoft Graph.

Por qué está en adapters:
- Emitir tokens es responsabilidad de un mecanismo externo (Azure CLI o una
  variable de entorno); el Core solo consume el bearer resultante.

Ambos proveedores devuelven `None` en vez de lanzar: la falta de token es un
modo degradado (sin enriquecimiento), no un error del run.
"""

from __future__ import annotations

import asyncio
import shutil

from loguru import logger

from core.config import AppSettings
from core.interfaces.credentials import CredentialProvider


class StaticCredentialProvider(CredentialProvider):
    """Token ya emitido (p.ej. `SUB2TENANT_GRAPH_TOKEN`)."""

    def __init__(self, token: str | None) -> None:
        self._token = (token or "").strip() or None

    async def get_token(self) -> str | None:
        return self._token


class AzureCliCredentialProvider(CredentialProvider):
    """Obtiene un token de Graph con `az account get-access-token`.

    Requisitos:
    - Azure CLI instalado y con sesión iniciada (`az login`).
    """

    def __init__(self, settings: AppSettings | None = None, *, resource: str | None = None) -> None:
        self._settings = settings or AppSettings()
        self._resource = resource or self._settings.graph_base_url

    def command(self) -> list[str]:
        return [
            self._settings.az_cli_path,
            "account",
            "get-access-token",
            "--resource",
            self._resource,
            "--query",
            "accessToken",
            "--output",
            "tsv",
        ]

    async def get_token(self) -> str | None:
        executable = shutil.which(self._settings.az_cli_path)
        if executable is None:
            logger.warning("Azure CLI not found ({}); Graph token unavailable", self._settings.az_cli_path)
            return None

        cmd = self.command()
        cmd[0] = executable
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("Could not start Azure CLI: {}", exc)
            return None

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(),
                timeout=self._settings.credential_timeout_seconds,
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning(
                "Azure CLI token request timed out after {}s",
                self._settings.credential_timeout_seconds,
            )
            return None

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip().splitlines()
            logger.warning(
                "Azure CLI exited with code {}: {}",
                proc.returncode,
                message[-1] if message else "no output",
            )
            return None

        token = stdout.decode("utf-8", errors="replace").strip()
        return token or None


def build_credential_provider(settings: AppSettings) -> CredentialProvider:
    """Token estático si está configurado; si no, Azure CLI."""

    if settings.graph_token:
        return StaticCredentialProvider(settings.graph_token)
    return AzureCliCredentialProvider(settings)

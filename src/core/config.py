"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (ARM/Graph/Azure CLI) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_ISSUER_HOSTS: tuple[str, ...] = (
    "login.windows.net",
    "login.microsoftonline.com",
)


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "sub2tenant"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "sub2tenant"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "sub2tenant"
    return Path.home() / ".config" / "sub2tenant"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Nunca se usa para tokens: solo overrides no secretos (concurrencia, hosts).
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# sub2tenant user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="SUB2TENANT_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="sub2tenant/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para las peticiones a ARM/Graph.",
    )
    max_concurrency: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Máximo de suscripciones procesándose a la vez.",
    )

    arm_base_url: str = Field(
        default="https://management.azure.com",
        min_length=8,
        description="Endpoint de Azure Resource Manager usado para la sonda anónima.",
    )
    arm_api_version: str = Field(
        default="2022-12-01",
        min_length=1,
        description="api-version fijada para GET /subscriptions/{id}.",
    )
    issuer_hosts: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_ISSUER_HOSTS),
        min_length=1,
        description="Hosts de emisor aceptados en authorization_uri (coma-separados en env).",
    )

    graph_base_url: str = Field(
        default="https://graph.microsoft.com",
        min_length=8,
        description="Endpoint de Microsoft Graph para el enriquecimiento.",
    )
    graph_token: str | None = Field(
        default=None,
        description="Bearer token estático para Graph (si no, se usa Azure CLI).",
    )
    az_cli_path: str = Field(
        default="az",
        min_length=1,
        description="Ejecutable de Azure CLI usado como proveedor de credenciales.",
    )
    credential_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Tiempo máximo para obtener el token de Graph (segundos).",
    )

    log_level: str = Field(
        default="WARNING",
        description="Nivel mínimo de log (loguru) para stderr.",
    )

    @field_validator("issuer_hosts", mode="before")
    @classmethod
    def _split_issuer_hosts(cls, value: object) -> object:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("issuer_hosts")
    @classmethod
    def _normalize_issuer_hosts(cls, value: list[str]) -> list[str]:
        hosts: list[str] = []
        for host in value:
            host = host.strip().lower().removeprefix("https://").rstrip("/")
            if host and host not in hosts:
                hosts.append(host)
        if not hosts:
            raise ValueError("at least one issuer host is required")
        return hosts

    @field_validator("arm_base_url", "graph_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

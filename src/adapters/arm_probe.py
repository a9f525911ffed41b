"""Resolución de tenant vía sonda anónima a Azure Resource Manager.

Implementación:
- GET `/subscriptions/{id}?api-version=...` sin credenciales.
- ARM responde 401 con `WWW-Authenticate: Bearer authorization_uri="https://<issuer>/<tenant>" ...`.
- El segmento `<tenant>` se devuelve tal cual (no se re-valida como GUID).

Notas:
- 404 => la suscripción no existe.
- 2xx => la sonda no se comportó como se esperaba (se reporta como `unexpected`).
"""

from __future__ import annotations

import re
from typing import Iterable

import httpx
from loguru import logger

from core.config import AppSettings
from core.domain.models import ResolutionErrorKind
from core.errors import ResolutionFailed
from core.interfaces.resolver import TenantResolver

CHALLENGE_HEADER = "WWW-Authenticate"


def build_challenge_pattern(issuer_hosts: Iterable[str]) -> re.Pattern[str]:
    hosts = "|".join(re.escape(host) for host in issuer_hosts)
    return re.compile(
        rf'authorization_uri\s*=\s*"https://(?:{hosts})/(?P<tenant>[^"/?#\s]+)',
        re.IGNORECASE,
    )


def parse_challenge_tenant(values: Iterable[str], pattern: re.Pattern[str]) -> str | None:
    """Extrae el tenant del primer challenge que encaje con `pattern`."""

    for value in values:
        match = pattern.search(value)
        if match:
            return match.group("tenant")
    return None


class ArmChallengeResolver(TenantResolver):
    """Resuelve el tenant propietario a partir del challenge 401 de ARM."""

    def __init__(self, client: httpx.AsyncClient, settings: AppSettings | None = None) -> None:
        self._client = client
        self._settings = settings or AppSettings()
        self._pattern = build_challenge_pattern(self._settings.issuer_hosts)

    def probe_url(self, subscription_id: str) -> str:
        return f"{self._settings.arm_base_url}/subscriptions/{subscription_id}"

    async def resolve(self, subscription_id: str) -> str:
        try:
            response = await self._client.get(
                self.probe_url(subscription_id),
                params={"api-version": self._settings.arm_api_version},
            )
        except httpx.HTTPError as exc:
            logger.debug("ARM probe transport failure for {}: {!r}", subscription_id, exc)
            raise ResolutionFailed.of(
                ResolutionErrorKind.UNEXPECTED,
                str(exc) or exc.__class__.__name__,
            ) from exc

        status = response.status_code
        logger.debug("ARM probe for {} -> HTTP {}", subscription_id, status)

        if response.is_success:
            raise ResolutionFailed.of(
                ResolutionErrorKind.UNEXPECTED,
                f"probe succeeded without credentials (HTTP {status})",
                status_code=status,
            )
        if status == 404:
            raise ResolutionFailed.of(
                ResolutionErrorKind.NOT_FOUND,
                "subscription not found",
                status_code=status,
            )
        if status != 401:
            raise ResolutionFailed.of(
                ResolutionErrorKind.UNEXPECTED,
                f"HTTP {status}",
                status_code=status,
            )

        # httpx.Headers es case-insensitive.
        challenges = response.headers.get_list(CHALLENGE_HEADER)
        if not challenges:
            raise ResolutionFailed.of(
                ResolutionErrorKind.HEADER_PARSE_FAILURE,
                f"missing {CHALLENGE_HEADER} header",
                status_code=status,
            )
        tenant_id = parse_challenge_tenant(challenges, self._pattern)
        if tenant_id is None:
            raise ResolutionFailed.of(
                ResolutionErrorKind.HEADER_PARSE_FAILURE,
                "authorization_uri not found for a recognized issuer",
                status_code=status,
            )
        return tenant_id

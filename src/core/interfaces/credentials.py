"""Contrato del proveedor de credenciales (externo)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialProvider(Protocol):
    """Emite un bearer token para Graph; se invoca como mucho una vez por run.

    Devuelve `None` si no hay token disponible (modo degradado, no error).
    """

    async def get_token(self) -> str | None:
        ...

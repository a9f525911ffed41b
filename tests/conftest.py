"""Shared fixtures: settings and a simulated ARM/Graph backend.

`FakeAzure` answers both hosts through one `httpx.MockTransport`, so the real
adapters run end to end without network access.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import httpx
import pytest

from core.config import AppSettings

TENANT_A = "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"
TENANT_B = "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb"
SUB_1 = "11111111-1111-1111-1111-111111111111"
SUB_2 = "22222222-2222-2222-2222-222222222222"
SUB_3 = "33333333-3333-3333-3333-333333333333"

_SUB_PATH_RE = re.compile(r"^/subscriptions/(?P<sid>[^/]+)$")
_GRAPH_PATH_RE = re.compile(r"findTenantInformationByTenantId\(tenantId='(?P<tid>[^']+)'\)")


def challenge(tenant_id: str, issuer: str = "login.windows.net") -> str:
    return (
        f'Bearer authorization_uri="https://{issuer}/{tenant_id}", '
        'error="invalid_token", '
        "error_description=\"The authentication failed because of missing 'Authorization' header.\""
    )


@dataclass
class FakeAzure:
    """In-memory ARM + Graph.

    - `owners`: subscription -> tenant (answered with 401 + challenge).
    - `statuses`: subscription -> status code to return instead.
    - `tenants`: tenant -> Graph JSON body.
    """

    owners: dict[str, str] = field(default_factory=dict)
    statuses: dict[str, int] = field(default_factory=dict)
    tenants: dict[str, dict] = field(default_factory=dict)
    graph_status: int = 200
    issuer: str = "login.windows.net"
    arm_calls: list[httpx.Request] = field(default_factory=list)
    graph_calls: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "management.azure.com":
            return self._arm(request)
        if request.url.host == "graph.microsoft.com":
            return self._graph(request)
        return httpx.Response(599, request=request)

    def _arm(self, request: httpx.Request) -> httpx.Response:
        self.arm_calls.append(request)
        match = _SUB_PATH_RE.match(request.url.path)
        if not match:
            return httpx.Response(400, request=request)
        sid = match.group("sid")
        if sid in self.statuses:
            return httpx.Response(self.statuses[sid], json={}, request=request)
        tenant = self.owners.get(sid)
        if tenant is None:
            return httpx.Response(404, json={"error": {"code": "SubscriptionNotFound"}}, request=request)
        return httpx.Response(
            401,
            headers={"WWW-Authenticate": challenge(tenant, self.issuer)},
            json={"error": {"code": "AuthenticationFailed"}},
            request=request,
        )

    def _graph(self, request: httpx.Request) -> httpx.Response:
        self.graph_calls.append(request)
        if not request.headers.get("Authorization", "").startswith("Bearer "):
            return httpx.Response(401, request=request)
        if self.graph_status != 200:
            return httpx.Response(self.graph_status, request=request)
        match = _GRAPH_PATH_RE.search(request.url.path)
        body = self.tenants.get(match.group("tid")) if match else None
        if body is None:
            return httpx.Response(404, request=request)
        return httpx.Response(200, json=body, request=request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeCredentialProvider:
    def __init__(self, token: str | None = "test-token") -> None:
        self.token = token
        self.calls = 0

    async def get_token(self) -> str | None:
        self.calls += 1
        return self.token


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, graph_token=None, max_concurrency=10)


@pytest.fixture
def fake_azure() -> FakeAzure:
    return FakeAzure(
        owners={SUB_1: TENANT_A, SUB_2: TENANT_B},
        tenants={
            TENANT_A: {"displayName": "Contoso", "defaultDomainName": "contoso.onmicrosoft.com", "tenantId": TENANT_A},
            TENANT_B: {"displayName": "Fabrikam", "defaultDomainName": "fabrikam.onmicrosoft.com", "tenantId": TENANT_B},
        },
    )

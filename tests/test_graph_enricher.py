import asyncio

import httpx
import pytest

from adapters.graph_enricher import GraphTenantEnricher
from adapters.http_client import build_async_client

from conftest import TENANT_A


def _enrich(settings, handler, token="test-token", tenant_id=TENANT_A):
    async def go():
        async with build_async_client(settings, transport=httpx.MockTransport(handler)) as client:
            return await GraphTenantEnricher(client, settings).enrich(tenant_id, token)

    return asyncio.run(go())


def test_enrich_parses_display_name_and_default_domain(settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "@odata.context": "https://graph.microsoft.com/v1.0/$metadata#microsoft.graph.tenantInformation",
                "tenantId": TENANT_A,
                "displayName": "Contoso",
                "defaultDomainName": "contoso.onmicrosoft.com",
                "federationBrandName": None,
            },
            request=request,
        )

    metadata = _enrich(settings, handler)

    assert metadata.display_name == "Contoso"
    assert metadata.default_domain_name == "contoso.onmicrosoft.com"
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.url.host == "graph.microsoft.com"
    assert f"findTenantInformationByTenantId(tenantId='{TENANT_A}')" in request.url.path


@pytest.mark.parametrize("token", [None, ""])
def test_enrich_without_token_skips_io(settings, token):
    def handler(request):
        raise AssertionError("no request expected")

    assert _enrich(settings, handler, token=token) is None


@pytest.mark.parametrize("status", [400, 401, 403, 404, 500])
def test_enrich_http_errors_degrade_to_none(settings, status):
    assert _enrich(settings, lambda request: httpx.Response(status, request=request)) is None


def test_enrich_transport_error_degrades_to_none(settings):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    assert _enrich(settings, handler) is None


@pytest.mark.parametrize(
    "body",
    [b"<html>oops</html>", b"[1, 2, 3]", b'{"displayName": 42}', b"{}"],
)
def test_enrich_malformed_bodies_degrade_to_none(settings, body):
    handler = lambda request: httpx.Response(  # noqa: E731
        200, content=body, headers={"content-type": "application/json"}, request=request
    )
    assert _enrich(settings, handler) is None


def test_enrich_keeps_partial_metadata(settings):
    handler = lambda request: httpx.Response(200, json={"displayName": "Only Name"}, request=request)  # noqa: E731
    metadata = _enrich(settings, handler)
    assert metadata.display_name == "Only Name"
    assert metadata.default_domain_name is None

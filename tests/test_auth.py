"""Tests for bearer-token authentication."""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import build_layer, pages_transport, PRODUCT_PAGE
from wishlist_scraper.errors import Unauthorized
from wishlist_scraper.layers.auth import AuthenticationLayer, AuthStatus, parse_bearer_token
from wishlist_scraper.main import app
from wishlist_scraper.routes.scrape import get_auth_layer, get_extraction_layer

URL = "https://shop.example.com/p/1"
SUPABASE_URL = "https://project.supabase.example"


def identity_provider() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/user"
        assert request.headers["apikey"] == "anon-key"
        if request.headers.get("Authorization") == "Bearer good-token":
            return httpx.Response(200, json={"id": "user-123", "email": "a@example.com"})
        return httpx.Response(401, json={"msg": "invalid JWT"})
    return httpx.MockTransport(handler)


def enforced_layer(transport: httpx.AsyncBaseTransport = None) -> AuthenticationLayer:
    return AuthenticationLayer(
        supabase_url=SUPABASE_URL,
        supabase_key="anon-key",
        required=True,
        transport=transport or identity_provider(),
    )


def test_parse_bearer_token() -> None:
    assert parse_bearer_token("Bearer abc") == "abc"
    assert parse_bearer_token("bearer  abc ") == "abc"
    assert parse_bearer_token("Basic abc") is None
    assert parse_bearer_token("Bearer ") is None
    assert parse_bearer_token(None) is None


@pytest.mark.asyncio
async def test_valid_token() -> None:
    result = await enforced_layer().authenticate("Bearer good-token")

    assert result.status == AuthStatus.AUTHORIZED
    assert result.user_id == "user-123"


@pytest.mark.asyncio
async def test_missing_and_invalid_tokens() -> None:
    layer = enforced_layer()

    with pytest.raises(Unauthorized):
        await layer.authenticate(None)
    with pytest.raises(Unauthorized):
        await layer.authenticate("Bearer bad-token")


@pytest.mark.asyncio
async def test_unreachable_provider_is_unauthorized() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(Unauthorized):
        await enforced_layer(httpx.MockTransport(handler)).authenticate("Bearer good-token")


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [[{"id": "user-123"}], {"email": "a@example.com"}, "user-123"])
async def test_unexpected_user_payload_is_unauthorized(body) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))

    with pytest.raises(Unauthorized):
        await enforced_layer(transport).authenticate("Bearer good-token")


@pytest.mark.asyncio
async def test_unconfigured_provider_skips_check() -> None:
    layer = AuthenticationLayer(supabase_url="", supabase_key="", required=True)

    assert not layer.is_enforced()
    assert layer.get_missing_settings() == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]
    assert (await layer.authenticate(None)).status == AuthStatus.SKIPPED


def test_missing_settings_reports_each_unset_value() -> None:
    layer = AuthenticationLayer(supabase_url=SUPABASE_URL, supabase_key="")

    assert not layer.is_configured()
    assert layer.get_missing_settings() == ["SUPABASE_ANON_KEY"]


@pytest.mark.asyncio
async def test_auth_can_be_disabled() -> None:
    layer = AuthenticationLayer(supabase_url=SUPABASE_URL, supabase_key="anon-key", required=False)
    assert (await layer.authenticate(None)).status == AuthStatus.SKIPPED


@pytest.mark.asyncio
async def test_scrape_endpoint_requires_token() -> None:
    app.dependency_overrides[get_extraction_layer] = lambda: build_layer(pages_transport({URL: PRODUCT_PAGE}))
    app.dependency_overrides[get_auth_layer] = lambda: enforced_layer()
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            anonymous = await client.get("/api/scrape", params={"url": URL})
            rejected = await client.get(
                "/api/scrape", params={"url": URL}, headers={"Authorization": "Bearer bad-token"}
            )
            accepted = await client.get(
                "/api/scrape", params={"url": URL}, headers={"Authorization": "Bearer good-token"}
            )
    finally:
        app.dependency_overrides.clear()

    assert anonymous.status_code == 401
    assert anonymous.json() == {"error": "Unauthorized"}
    assert rejected.status_code == 401
    assert accepted.status_code == 200
    assert accepted.json()["title"] == "Trail Runner 2"

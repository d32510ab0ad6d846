from urllib.parse import parse_qs

import pytest
import httpx

from shopify_gmc_sync.auth import GoogleRefreshTokenProvider
from shopify_gmc_sync.config import GoogleConfig, GOOGLE_TOKEN_URI
from shopify_gmc_sync.exceptions import TokenError


def make_config():
    return GoogleConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        merchant_id="123456",
    )


@pytest.mark.asyncio
async def test_refresh_token_grant():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={
            "access_token": "ya29.token",
            "expires_in": 3599,
            "scope": "https://www.googleapis.com/auth/content",
            "token_type": "Bearer",
        })

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    token = await GoogleRefreshTokenProvider(make_config(), client=client).acquire_access_token()

    assert token.access_token == "ya29.token"
    assert token.authorization == "Bearer ya29.token"
    request = seen[0]
    assert str(request.url) == GOOGLE_TOKEN_URI
    form = parse_qs(request.content.decode())
    assert form == {
        "client_id": ["client-id"],
        "client_secret": ["client-secret"],
        "refresh_token": ["refresh-token"],
        "grant_type": ["refresh_token"],
    }


@pytest.mark.asyncio
async def test_rejected_refresh_token():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(TokenError, match="invalid_grant"):
        await GoogleRefreshTokenProvider(make_config(), client=client).acquire_access_token()


@pytest.mark.asyncio
async def test_response_without_access_token():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token_type": "Bearer"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(TokenError):
        await GoogleRefreshTokenProvider(make_config(), client=client).acquire_access_token()

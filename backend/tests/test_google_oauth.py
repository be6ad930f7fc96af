from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from site_sentinel.auth.google_oauth import SCOPES, TOKEN_ENDPOINT, GoogleOAuthClient
from site_sentinel.config import GoogleOAuthConfig
from site_sentinel.errors import OAuthError

CONFIG = GoogleOAuthConfig(
    client_id="client-id",
    client_secret="client-secret",
    redirect_uri="https://dash.test/api/auth/google/callback",
    app_url="https://dash.test",
)


def _client(handler) -> GoogleOAuthClient:
    return GoogleOAuthClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_authorization_url_requests_offline_consent() -> None:
    url = GoogleOAuthClient(CONFIG).authorization_url()
    query = parse_qs(urlsplit(url).query)

    assert query["client_id"] == ["client-id"]
    assert query["redirect_uri"] == [CONFIG.redirect_uri]
    assert query["access_type"] == ["offline"]
    assert query["prompt"] == ["consent"]
    assert query["scope"] == [" ".join(SCOPES)]


def test_exchange_code_posts_form() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"access_token": "tok", "expires_in": 3599})

    tokens = asyncio.run(_client(handler).exchange_code("auth-code"))

    assert tokens.access_token == "tok"
    assert tokens.expires_in == 3599
    assert captured["url"] == TOKEN_ENDPOINT
    assert captured["form"]["code"] == ["auth-code"]
    assert captured["form"]["grant_type"] == ["authorization_code"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(400, json={"error": "invalid_grant"}),
        httpx.Response(200, json={"token_type": "Bearer"}),
        httpx.Response(200, text="not json"),
    ],
)
def test_exchange_failures_raise_oauth_error(response: httpx.Response) -> None:
    with pytest.raises(OAuthError):
        asyncio.run(_client(lambda request: response).exchange_code("auth-code"))

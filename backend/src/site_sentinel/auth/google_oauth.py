from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from fastapi import Request

from site_sentinel.config import GoogleOAuthConfig
from site_sentinel.errors import AuthenticationRequired, OAuthError

logger = logging.getLogger(__name__)

AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
SCOPES = [
    "https://www.googleapis.com/auth/webmasters",
    "https://www.googleapis.com/auth/webmasters.readonly",
]
ACCESS_TOKEN_COOKIE = "google_access_token"
ACCESS_TOKEN_MAX_AGE = 3600


@dataclass(frozen=True)
class OAuthTokens:
    access_token: str
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None


class GoogleOAuthClient:
    def __init__(self, config: GoogleOAuthConfig, http_client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._http_client = http_client

    @property
    def app_url(self) -> str:
        return self._config.app_url

    def authorization_url(self) -> str:
        params = {
            "client_id": self._config.client_id,
            "redirect_uri": self._config.redirect_uri,
            "response_type": "code",
            "access_type": "offline",
            "prompt": "consent",
            "scope": " ".join(SCOPES),
        }
        return f"{AUTH_ENDPOINT}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthTokens:
        data = {
            "code": code,
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "redirect_uri": self._config.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            if self._http_client is not None:
                response = await self._http_client.post(TOKEN_ENDPOINT, data=data)
            else:
                async with httpx.AsyncClient(timeout=15.0) as client:
                    response = await client.post(TOKEN_ENDPOINT, data=data)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Token exchange failed: %s", exc)
            raise OAuthError("Failed to complete authentication") from exc

        access_token = payload.get("access_token")
        if not access_token:
            raise OAuthError("Token response did not include an access token")
        return OAuthTokens(
            access_token=access_token,
            expires_in=payload.get("expires_in"),
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
        )


def require_access_token(request: Request) -> str:
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise AuthenticationRequired("Authentication required")
    return token

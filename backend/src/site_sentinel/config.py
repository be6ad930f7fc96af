from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from site_sentinel.errors import ConfigError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36 Site-Sentinel/1.0"
)
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000
DEFAULT_ANALYSIS_MODEL = "gpt-4o-mini"
DEFAULT_APP_URL = "http://localhost:3000"


def _split_csv(raw: str | None, default: list[str]) -> list[str]:
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_timeout_ms(raw: str | None) -> int:
    if not raw or not raw.strip():
        return DEFAULT_NAVIGATION_TIMEOUT_MS
    try:
        parsed = int(raw)
    except ValueError:
        raise ConfigError(f"SITE_SENTINEL_NAVIGATION_TIMEOUT_MS must be an integer, got {raw!r}") from None
    if parsed <= 0:
        raise ConfigError("SITE_SENTINEL_NAVIGATION_TIMEOUT_MS must be positive")
    return parsed


@dataclass(frozen=True)
class AppConfig:
    supabase_url: str | None = None
    supabase_key: str | None = None
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    cors_origins: list[str] = field(default_factory=lambda: [DEFAULT_APP_URL])
    user_agent: str = DEFAULT_USER_AGENT
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    log_level: str = "INFO"

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @staticmethod
    def from_env() -> "AppConfig":
        load_dotenv()
        return AppConfig(
            supabase_url=os.environ.get("SUPABASE_URL") or None,
            supabase_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or None,
            analysis_model=os.environ.get("SITE_SENTINEL_ANALYSIS_MODEL") or DEFAULT_ANALYSIS_MODEL,
            cors_origins=_split_csv(os.environ.get("SITE_SENTINEL_CORS_ORIGINS"), [DEFAULT_APP_URL]),
            user_agent=os.environ.get("SITE_SENTINEL_USER_AGENT") or DEFAULT_USER_AGENT,
            navigation_timeout_ms=_parse_timeout_ms(os.environ.get("SITE_SENTINEL_NAVIGATION_TIMEOUT_MS")),
            log_level=(os.environ.get("SITE_SENTINEL_LOG_LEVEL") or "INFO").upper(),
        )


@dataclass(frozen=True)
class GoogleOAuthConfig:
    """Credentials for the Google consent flow.

    Built once at startup and handed to `GoogleOAuthClient`; a missing
    variable fails fast with every missing name listed.
    """

    client_id: str
    client_secret: str
    redirect_uri: str
    app_url: str

    @staticmethod
    def from_env() -> "GoogleOAuthConfig":
        load_dotenv()
        client_id = os.environ.get("GOOGLE_CLIENT_ID")
        client_secret = os.environ.get("GOOGLE_CLIENT_SECRET")
        app_url = os.environ.get("APP_URL")

        missing = [
            name
            for name, value in (
                ("GOOGLE_CLIENT_ID", client_id),
                ("GOOGLE_CLIENT_SECRET", client_secret),
                ("APP_URL", app_url),
            )
            if not value
        ]
        if missing:
            raise ConfigError("Missing environment variables: " + ", ".join(missing))

        app_url = app_url.rstrip("/")
        redirect_uri = os.environ.get("GOOGLE_REDIRECT_URI") or f"{app_url}/api/auth/google/callback"
        return GoogleOAuthConfig(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            app_url=app_url,
        )

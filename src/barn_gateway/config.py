"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

TWITCH_SCOPES: tuple[str, ...] = ("channel:bot", "user:read:email", "user:read:chat")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_url: str
    twitch_client_id: str | None = None
    twitch_client_secret: str | None = None
    twitch_redirect_uri: str | None = None
    twitch_authorize_url: str = "https://id.twitch.tv/oauth2/authorize"
    twitch_token_url: str = "https://id.twitch.tv/oauth2/token"
    twitch_users_url: str = "https://api.twitch.tv/helix/users"
    session_cookie_name: str = "jwt"
    session_ttl_hours: int = 24
    cookie_secure: bool | None = None
    http_timeout_seconds: float = 10
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def api_base_url(self) -> str:
        """API URL without a trailing slash."""
        return self.api_url.rstrip("/")

    @property
    def secure_cookies(self) -> bool:
        """Return True when session cookies must be marked secure."""
        if self.cookie_secure is not None:
            return self.cookie_secure
        return self.environment == "production"


def twitch_scope_param(scopes: tuple[str, ...] = TWITCH_SCOPES) -> str:
    """Join scopes into the space-delimited form the provider expects."""
    return " ".join(scopes)

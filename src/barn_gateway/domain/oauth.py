"""Domain models for the third-party OAuth exchange."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OAuthGrant:
    """Access/refresh token pair issued by the provider."""

    access_token: str
    refresh_token: str
    expires_at: datetime
    scopes: tuple[str, ...] = ()
    token_type: str = "bearer"


@dataclass(frozen=True)
class ProviderProfile:
    """Profile of the principal that authorized the application."""

    id: str
    login: str
    email: str
    display_name: str | None = None
    profile_image_url: str | None = None

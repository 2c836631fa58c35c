"""Twitch OAuth authorization-code and refresh client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from barn_gateway.adapters.identity_client import bearer
from barn_gateway.adapters.payloads import TwitchTokenPayload, TwitchUsersPayload
from barn_gateway.config import TWITCH_SCOPES, Settings, twitch_scope_param
from barn_gateway.domain.errors import ConfigurationError, ErrorKind, Ok, Result, err
from barn_gateway.domain.oauth import OAuthGrant, ProviderProfile


class TwitchOAuthClient(Protocol):
    """Interface for the provider's OAuth endpoints."""

    def build_authorize_url(self) -> str:
        """Return the URL the user is sent to for authorization."""

    async def exchange_code(self, code: str) -> Result[OAuthGrant]:
        """Exchange an authorization code for tokens."""

    async def refresh(self, refresh_token: str) -> Result[OAuthGrant]:
        """Refresh an expired access token."""

    async def fetch_profile(self, access_token: str) -> Result[ProviderProfile]:
        """Return the profile of the authorizing principal."""


@dataclass(frozen=True)
class TwitchCredentials:
    """Application credentials registered with Twitch."""

    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: tuple[str, ...] = TWITCH_SCOPES

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwitchCredentials":
        """Build credentials, failing fast when any of them is missing."""
        missing = [
            name
            for name, value in (
                ("TWITCH_CLIENT_ID", settings.twitch_client_id),
                ("TWITCH_CLIENT_SECRET", settings.twitch_client_secret),
                ("TWITCH_REDIRECT_URI", settings.twitch_redirect_uri),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required Twitch credentials: {', '.join(missing)}"
            )
        return cls(
            client_id=settings.twitch_client_id or "",
            client_secret=settings.twitch_client_secret or "",
            redirect_uri=settings.twitch_redirect_uri or "",
        )


@dataclass
class HttpxTwitchOAuthClient(TwitchOAuthClient):
    """Twitch OAuth client implemented with httpx.

    Credentials are resolved lazily so a deployment without Twitch configured
    can still serve every other route.
    """

    settings: Settings
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, settings: Settings) -> "HttpxTwitchOAuthClient":
        """Create a Twitch client with a managed httpx session."""
        return cls(settings=settings, http_client=httpx.AsyncClient())

    @property
    def credentials(self) -> TwitchCredentials:
        return TwitchCredentials.from_settings(self.settings)

    def build_authorize_url(self) -> str:
        """Build the authorize URL from the configured credentials."""
        creds = self.credentials
        params = urlencode(
            {
                "response_type": "code",
                "client_id": creds.client_id,
                "redirect_uri": creds.redirect_uri,
                "scope": twitch_scope_param(creds.scopes),
            }
        )
        return f"{self.settings.twitch_authorize_url}?{params}"

    async def exchange_code(self, code: str) -> Result[OAuthGrant]:
        """Exchange an authorization code at the token endpoint."""
        creds = self.credentials
        return await self._request_grant(
            {
                "client_id": creds.client_id,
                "client_secret": creds.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": creds.redirect_uri,
            },
            action="getting tokens",
        )

    async def refresh(self, refresh_token: str) -> Result[OAuthGrant]:
        """Refresh an access token at the token endpoint."""
        creds = self.credentials
        return await self._request_grant(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": creds.client_id,
                "client_secret": creds.client_secret,
            },
            action="refreshing tokens",
        )

    async def fetch_profile(self, access_token: str) -> Result[ProviderProfile]:
        """Fetch the Helix user record for the access token."""
        headers = bearer(access_token) | {"Client-Id": self.credentials.client_id}
        try:
            response = await self.http_client.get(
                self.settings.twitch_users_url,
                headers=headers,
                timeout=self.settings.http_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            return err(ErrorKind.UNKNOWN, f"Twitch user info request failed: {exc!r}")
        if not response.is_success:
            return err(
                ErrorKind.PROVIDER_REJECTED,
                f"Bad response from Twitch getting user info, status: "
                f"{response.status_code}",
                status=response.status_code,
            )
        try:
            payload = TwitchUsersPayload.model_validate(response.json())
        except (ValueError, ValidationError):
            return err(
                ErrorKind.MALFORMED_PROFILE,
                "No usable user record in Twitch response",
                status=response.status_code,
            )
        return Ok(payload.data[0].to_profile())

    async def _request_grant(
        self, form: dict[str, str], action: str
    ) -> Result[OAuthGrant]:
        try:
            response = await self.http_client.post(
                self.settings.twitch_token_url,
                data=form,
                timeout=self.settings.http_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            return err(ErrorKind.UNKNOWN, f"Twitch token request failed: {exc!r}")
        if not response.is_success:
            return err(
                ErrorKind.PROVIDER_REJECTED,
                f"Bad response from Twitch {action}, status: {response.status_code}",
                status=response.status_code,
            )
        try:
            payload = TwitchTokenPayload.model_validate(response.json())
        except (ValueError, ValidationError):
            return err(
                ErrorKind.MALFORMED_GRANT,
                "Invalid token response from Twitch",
                status=response.status_code,
            )
        return Ok(payload.to_grant())

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

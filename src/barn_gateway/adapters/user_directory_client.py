"""User directory client: lookups, provisioning and settings."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from barn_gateway.adapters.identity_client import (
    bearer,
    decode_identity,
    fetch_current_user,
)
from barn_gateway.adapters.payloads import TokenPayload, UserListPayload, UserPayload
from barn_gateway.domain.errors import ErrorKind, Ok, Result, classify_status, err
from barn_gateway.domain.identity import Identity, ProvisionedAccount
from barn_gateway.domain.oauth import OAuthGrant, ProviderProfile

_logger = logging.getLogger(__name__)

PROVIDER_TWITCH = "twitch"


class UserDirectoryClient(Protocol):
    """Interface for looking up and provisioning local accounts."""

    async def lookup_by_token(self, token: str) -> Result[Identity]:
        """Return the account owning a session token."""

    async def lookup_by_email(self, email: str, token: str) -> Result[Identity]:
        """Return the account registered with an email, or NOT_FOUND."""

    async def find_or_provision(
        self,
        profile: ProviderProfile,
        grant: OAuthGrant,
        token: str | None = None,
    ) -> Result[ProvisionedAccount]:
        """Link the provider profile to an account, creating it if absent."""

    async def update_settings(
        self, token: str, username: str, settings: dict[str, bool]
    ) -> Result[Identity]:
        """Persist notification settings for the current account."""


@dataclass
class HttpxUserDirectoryClient(UserDirectoryClient):
    """User directory backed by the API."""

    api_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(cls, api_url: str, timeout: float = 10) -> "HttpxUserDirectoryClient":
        """Create a directory client with a managed httpx session."""
        return cls(
            api_url=api_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def lookup_by_token(self, token: str) -> Result[Identity]:
        """Return the account owning the token via ``GET /user/me``."""
        return await fetch_current_user(
            self.http_client, self.api_url, token, self.timeout
        )

    async def lookup_by_email(self, email: str, token: str) -> Result[Identity]:
        """Look up an account by email via ``GET /user?email=``."""
        try:
            response = await self.http_client.get(
                f"{self.api_url}/user",
                params={"email": email},
                headers=bearer(token),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            return err(ErrorKind.UNKNOWN, f"User lookup failed: {exc!r}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return err(ErrorKind.NOT_FOUND, "No user with that email", status=404)
        if not response.is_success:
            return classify_status(response.status_code)
        try:
            body = response.json()
            if isinstance(body, dict) and "users" in body:
                users = UserListPayload.model_validate(body).users
            else:
                users = [UserPayload.model_validate(body)]
        except (ValueError, ValidationError):
            return err(ErrorKind.UNKNOWN, "User lookup response could not be decoded")
        if not users:
            return err(ErrorKind.NOT_FOUND, "No user with that email")
        return Ok(users[0].to_identity())

    async def find_or_provision(
        self,
        profile: ProviderProfile,
        grant: OAuthGrant,
        token: str | None = None,
    ) -> Result[ProvisionedAccount]:
        """Upsert the account keyed by email via ``POST /auth/twitch``.

        The API performs lookup and creation in one request. A 409 means a
        concurrent callback created the account between its lookup and insert;
        the request is replayed once and then resolves to that account. Linked
        provider tokens are last-writer-wins.
        """
        body = {
            "provider": PROVIDER_TWITCH,
            "provider_user_id": profile.id,
            "login": profile.login,
            "email": profile.email,
            "display_name": profile.display_name,
            "access_token": grant.access_token,
            "refresh_token": grant.refresh_token,
            "expires_at": grant.expires_at.isoformat(),
            "scopes": list(grant.scopes),
        }
        headers = bearer(token) if token else {}
        for attempt in range(2):
            try:
                response = await self.http_client.post(
                    f"{self.api_url}/auth/twitch",
                    json=body,
                    headers=headers,
                    timeout=self.timeout,
                )
            except httpx.HTTPError as exc:
                return err(ErrorKind.UNKNOWN, f"Account provisioning failed: {exc!r}")
            if response.status_code == httpx.codes.CONFLICT and attempt == 0:
                _logger.info("Provisioning raced for provider user %s", profile.id)
                continue
            break
        if not response.is_success:
            return classify_status(response.status_code)
        try:
            payload = TokenPayload.model_validate(response.json())
        except (ValueError, ValidationError):
            return err(ErrorKind.UNKNOWN, "Provisioning response missing token")
        return Ok(ProvisionedAccount(token=payload.token, created=payload.created))

    async def update_settings(
        self, token: str, username: str, settings: dict[str, bool]
    ) -> Result[Identity]:
        """Update the current account via ``PUT /user/me``."""
        try:
            response = await self.http_client.put(
                f"{self.api_url}/user/me",
                json={"username": username, "settings": settings},
                headers=bearer(token),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            return err(ErrorKind.UNKNOWN, f"Settings update failed: {exc!r}")
        if not response.is_success:
            return classify_status(response.status_code)
        return decode_identity(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

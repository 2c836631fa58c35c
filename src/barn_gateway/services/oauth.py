"""Twitch OAuth callback flow."""

import logging
from dataclasses import dataclass

from barn_gateway.adapters.twitch_client import TwitchOAuthClient
from barn_gateway.adapters.user_directory_client import UserDirectoryClient
from barn_gateway.domain.errors import Err, ErrorKind, Ok, Result, err
from barn_gateway.domain.identity import ProvisionedAccount
from barn_gateway.domain.oauth import OAuthGrant

_logger = logging.getLogger(__name__)


@dataclass
class OAuthCallbackService:
    """Composes code exchange, profile fetch and account provisioning."""

    oauth_client: TwitchOAuthClient
    directory: UserDirectoryClient

    def authorize_url(self) -> str:
        """Return the provider authorize URL."""
        return self.oauth_client.build_authorize_url()

    async def handle_callback(
        self,
        code: str | None,
        error: str | None = None,
        error_description: str | None = None,
        current_token: str | None = None,
    ) -> Result[ProvisionedAccount]:
        """Turn the provider's redirect into a session token for a local account."""
        if error:
            _logger.info("Twitch authorization denied: %s", error)
            return err(
                ErrorKind.AUTHORIZATION_FAILED,
                f"Authorization failed: {error_description or error}",
            )
        if not code:
            return err(
                ErrorKind.INVALID_REQUEST,
                "No authorization code received from Twitch",
            )

        exchanged = await self.oauth_client.exchange_code(code)
        if isinstance(exchanged, Err):
            _logger.warning("Failed to get access tokens: %s", exchanged.error.message)
            return exchanged
        grant = exchanged.value

        fetched = await self.oauth_client.fetch_profile(grant.access_token)
        if isinstance(fetched, Err):
            _logger.warning("Failed to get Twitch user info: %s", fetched.error.message)
            return fetched
        profile = fetched.value

        result = await self.directory.find_or_provision(
            profile, grant, token=current_token
        )
        match result:
            case Ok(account):
                _logger.info(
                    "Twitch user %s signed in (new account: %s)",
                    profile.login,
                    account.created,
                )
            case Err(failure):
                _logger.warning(
                    "Failed to provision account for %s: %s",
                    profile.login,
                    failure.message,
                )
        return result

    async def refresh_grant(self, refresh_token: str) -> Result[OAuthGrant]:
        """Refresh an expired provider access token."""
        return await self.oauth_client.refresh(refresh_token)

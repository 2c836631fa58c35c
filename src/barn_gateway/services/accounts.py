"""Password login, registration and account settings."""

from dataclasses import dataclass

from barn_gateway.adapters.auth_client import AuthClient
from barn_gateway.adapters.user_directory_client import UserDirectoryClient
from barn_gateway.domain.errors import ErrorKind, Result, err
from barn_gateway.domain.identity import Identity

SETTING_FIELDS = (
    "stream_status_enabled",
    "chat_messages_enabled",
    "channel_points_enabled",
    "follows_subs_enabled",
)


@dataclass
class AccountService:
    """Validates account input before forwarding it to the API."""

    auth_client: AuthClient
    directory: UserDirectoryClient

    async def login(self, username: str | None, password: str | None) -> Result[str]:
        """Return a session token for valid credentials."""
        cleaned = (username or "").strip()
        if not cleaned or not password:
            return err(ErrorKind.INVALID_REQUEST, "Username and password are required")
        return await self.auth_client.login(cleaned, password)

    async def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        password_confirmation: str | None,
    ) -> Result[str]:
        """Create an account and return its session token."""
        cleaned_username = (username or "").strip()
        cleaned_email = (email or "").strip()
        if (
            not cleaned_username
            or not cleaned_email
            or not password
            or not password_confirmation
        ):
            return err(ErrorKind.INVALID_REQUEST, "All fields are required")
        if password != password_confirmation:
            return err(ErrorKind.INVALID_REQUEST, "Passwords do not match")
        return await self.auth_client.register(
            cleaned_username, cleaned_email, password
        )

    async def update_settings(
        self, identity: Identity, token: str, toggles: dict[str, bool]
    ) -> Result[Identity]:
        """Persist the Twitch notification toggles for the signed-in user."""
        settings = {name: bool(toggles.get(name, False)) for name in SETTING_FIELDS}
        return await self.directory.update_settings(
            token, identity.username, settings
        )

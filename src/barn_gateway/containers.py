"""Dependency container wiring for the gateway."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from barn_gateway.adapters.auth_client import AuthClient, HttpxAuthClient
from barn_gateway.adapters.identity_client import HttpxIdentityClient, IdentityClient
from barn_gateway.adapters.twitch_client import (
    HttpxTwitchOAuthClient,
    TwitchOAuthClient,
)
from barn_gateway.adapters.upload_client import HttpxUploadClient
from barn_gateway.adapters.user_directory_client import (
    HttpxUserDirectoryClient,
    UserDirectoryClient,
)
from barn_gateway.adapters.video_client import HttpxVideoClient, VideoClient
from barn_gateway.config import Settings
from barn_gateway.services.accounts import AccountService
from barn_gateway.services.oauth import OAuthCallbackService
from barn_gateway.services.sessions import CookieTokenStore, SessionResolver
from barn_gateway.services.uploads import UploadOrchestrator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_client: IdentityClient
    directory_client: UserDirectoryClient
    twitch_client: TwitchOAuthClient
    auth_client: AuthClient
    video_client: VideoClient
    session_resolver: SessionResolver
    oauth_service: OAuthCallbackService
    upload_orchestrator: UploadOrchestrator
    account_service: AccountService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    api_url = resolved_settings.api_base_url
    timeout = resolved_settings.http_timeout_seconds

    identity_client = HttpxIdentityClient.create(api_url, timeout=timeout)
    directory_client = HttpxUserDirectoryClient.create(api_url, timeout=timeout)
    upload_client = HttpxUploadClient.create(api_url, timeout=timeout)
    auth_client = HttpxAuthClient.create(api_url, timeout=timeout)
    video_client = HttpxVideoClient.create(api_url, timeout=timeout)
    twitch_client = HttpxTwitchOAuthClient.create(resolved_settings)

    token_store = CookieTokenStore(
        cookie_name=resolved_settings.session_cookie_name,
        ttl_hours=resolved_settings.session_ttl_hours,
        secure=resolved_settings.secure_cookies,
    )
    session_resolver = SessionResolver(
        token_store=token_store, identity_client=identity_client
    )
    oauth_service = OAuthCallbackService(
        oauth_client=twitch_client, directory=directory_client
    )
    upload_orchestrator = UploadOrchestrator(upload_client)
    account_service = AccountService(
        auth_client=auth_client, directory=directory_client
    )

    async def close_resources() -> None:
        await identity_client.close()
        await directory_client.close()
        await upload_client.close()
        await auth_client.close()
        await video_client.close()
        await twitch_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_client=identity_client,
        directory_client=directory_client,
        twitch_client=twitch_client,
        auth_client=auth_client,
        video_client=video_client,
        session_resolver=session_resolver,
        oauth_service=oauth_service,
        upload_orchestrator=upload_orchestrator,
        account_service=account_service,
        close_resources=close_resources,
    )

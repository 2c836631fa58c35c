"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from barn_gateway.adapters.auth_client import AuthClient
from barn_gateway.adapters.identity_client import IdentityClient
from barn_gateway.adapters.twitch_client import TwitchOAuthClient
from barn_gateway.adapters.upload_client import UploadClient
from barn_gateway.adapters.user_directory_client import UserDirectoryClient
from barn_gateway.adapters.video_client import VideoClient
from barn_gateway.config import Settings
from barn_gateway.containers import AppContainer
from barn_gateway.domain.errors import Err, ErrorKind, Ok, Result, err
from barn_gateway.domain.identity import Identity, ProvisionedAccount, UserRole
from barn_gateway.domain.oauth import OAuthGrant, ProviderProfile
from barn_gateway.domain.uploads import CompletedPart, PartUrl, UploadSession
from barn_gateway.domain.videos import VideoRecord
from barn_gateway.services.accounts import AccountService
from barn_gateway.services.oauth import OAuthCallbackService
from barn_gateway.services.sessions import CookieTokenStore, SessionResolver
from barn_gateway.services.uploads import UploadOrchestrator

ALICE = Identity(id="u-1", username="alice", email="alice@example.com")


@dataclass
class FakeIdentityClient(IdentityClient):
    """Identity client resolving tokens from an in-memory table."""

    identities: dict[str, Identity] = field(default_factory=dict)
    failures: dict[str, ErrorKind] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def resolve(self, token: str) -> Result[Identity]:
        self.calls.append(token)
        if token in self.failures:
            return err(self.failures[token], "fake failure", status=503)
        identity = self.identities.get(token)
        if identity is None:
            return err(ErrorKind.INVALID_TOKEN, "unknown token", status=401)
        return Ok(identity)


@dataclass
class FakeUserDirectoryClient(UserDirectoryClient):
    """Directory that provisions accounts keyed by email."""

    accounts: dict[str, Identity] = field(default_factory=dict)
    tokens: dict[str, str] = field(default_factory=dict)
    provisioned: list[tuple[str, str | None]] = field(default_factory=list)
    settings: dict[str, dict[str, bool]] = field(default_factory=dict)

    async def lookup_by_token(self, token: str) -> Result[Identity]:
        for email, account_token in self.tokens.items():
            if account_token == token:
                return Ok(self.accounts[email])
        return err(ErrorKind.INVALID_TOKEN, "unknown token", status=401)

    async def lookup_by_email(self, email: str, token: str) -> Result[Identity]:
        identity = self.accounts.get(email)
        if identity is None:
            return err(ErrorKind.NOT_FOUND, "no such user", status=404)
        return Ok(identity)

    async def find_or_provision(
        self,
        profile: ProviderProfile,
        grant: OAuthGrant,
        token: str | None = None,
    ) -> Result[ProvisionedAccount]:
        self.provisioned.append((profile.email, token))
        created = profile.email not in self.accounts
        if created:
            self.accounts[profile.email] = Identity(
                id=f"u-{len(self.accounts) + 1}",
                username=profile.login,
                email=profile.email,
                role=UserRole.CREATOR,
            )
            self.tokens[profile.email] = f"session-{profile.login}"
        return Ok(
            ProvisionedAccount(token=self.tokens[profile.email], created=created)
        )

    async def update_settings(
        self, token: str, username: str, settings: dict[str, bool]
    ) -> Result[Identity]:
        self.settings[username] = settings
        return await self.lookup_by_token(token)


@dataclass
class FakeTwitchOAuthClient(TwitchOAuthClient):
    """Twitch client returning canned grants and profiles."""

    grant_result: Result[OAuthGrant] | None = None
    profile_result: Result[ProviderProfile] | None = None
    exchanged_codes: list[str] = field(default_factory=list)
    refreshed: list[str] = field(default_factory=list)

    def build_authorize_url(self) -> str:
        return "https://id.twitch.tv/oauth2/authorize?response_type=code"

    async def exchange_code(self, code: str) -> Result[OAuthGrant]:
        self.exchanged_codes.append(code)
        return self.grant_result or Ok(make_grant())

    async def refresh(self, refresh_token: str) -> Result[OAuthGrant]:
        self.refreshed.append(refresh_token)
        return self.grant_result or Ok(make_grant(access_token="access-2"))

    async def fetch_profile(self, access_token: str) -> Result[ProviderProfile]:
        return self.profile_result or Ok(
            ProviderProfile(id="tw-1", login="streamer", email="streamer@example.com")
        )


@dataclass
class FakeUploadClient(UploadClient):
    """Upload API that tracks the part numbers issued per upload."""

    issued: dict[str, tuple[int, ...]] = field(default_factory=dict)
    completed: list[tuple[str, list[CompletedPart]]] = field(default_factory=list)
    start_calls: int = 0
    complete_failure: Err | None = None

    async def start_upload(
        self,
        token: str,
        key: str,
        content_type: str,
        parts: int,
        title: str | None = None,
    ) -> Result[UploadSession]:
        self.start_calls += 1
        upload_id = f"upload-{uuid4()}"
        session = UploadSession(
            upload_id=upload_id,
            video_id=f"video-{self.start_calls}",
            key=key,
            part_urls=tuple(
                PartUrl(part_number=number, url=f"https://r2.test/{key}?part={number}")
                for number in range(1, parts + 1)
            ),
        )
        self.issued[upload_id] = session.part_numbers
        return Ok(session)

    async def complete_upload(
        self,
        token: str,
        upload_id: str,
        video_id: str,
        key: str,
        completed_parts: list[CompletedPart],
    ) -> Result[None]:
        if self.complete_failure is not None:
            return self.complete_failure
        numbers = tuple(part.part_number for part in completed_parts)
        if numbers != self.issued.get(upload_id):
            return err(
                ErrorKind.INCOMPLETE_PARTS,
                "parts mismatch",
                status=409,
                phase="completing",
            )
        self.completed.append((upload_id, completed_parts))
        return Ok(None)


@dataclass
class FakeAuthClient(AuthClient):
    """Auth client with a fixed set of credentials."""

    passwords: dict[str, str] = field(default_factory=lambda: {"alice": "secret"})
    registered: list[str] = field(default_factory=list)

    async def login(self, username: str, password: str) -> Result[str]:
        if self.passwords.get(username) != password:
            return err(ErrorKind.INVALID_TOKEN, "Invalid credentials", status=401)
        return Ok(f"session-{username}")

    async def register(self, username: str, email: str, password: str) -> Result[str]:
        if username in self.passwords:
            return err(ErrorKind.INVALID_REQUEST, "Username taken", status=400)
        self.passwords[username] = password
        self.registered.append(email)
        return Ok(f"session-{username}")


@dataclass
class FakeVideoClient(VideoClient):
    """Video catalog held in memory."""

    videos: list[VideoRecord] = field(default_factory=list)
    owners: dict[str, str] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)
    delete_failure: Err | None = None

    async def list_videos(
        self, channel: str | None = None
    ) -> Result[list[VideoRecord]]:
        if channel is None:
            return Ok(list(self.videos))
        return Ok(
            [video for video in self.videos if self.owners.get(video.id) == channel]
        )

    async def get_video(self, video_id: str) -> Result[VideoRecord]:
        for video in self.videos:
            if video.id == video_id:
                return Ok(video)
        return err(ErrorKind.NOT_FOUND, "not found")

    async def delete_videos(self, video_ids: list[str], token: str) -> Result[None]:
        if self.delete_failure is not None:
            return self.delete_failure
        self.deleted.extend(video_ids)
        self.videos = [video for video in self.videos if video.id not in video_ids]
        return Ok(None)


def make_grant(
    access_token: str = "access-1", refresh_token: str = "refresh-1"
) -> OAuthGrant:
    return OAuthGrant(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=datetime.now(tz=UTC) + timedelta(hours=4),
        scopes=("channel:bot", "user:read:email", "user:read:chat"),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_url="https://api.test",
        twitch_client_id="client-id",
        twitch_client_secret="client-secret",
        twitch_redirect_uri="https://app.test/auth/twitch/callback",
        environment="test",
    )


@pytest.fixture
def identity_client() -> FakeIdentityClient:
    return FakeIdentityClient(identities={"good-token": ALICE})


@pytest.fixture
def directory_client() -> FakeUserDirectoryClient:
    return FakeUserDirectoryClient(
        accounts={ALICE.email: ALICE}, tokens={ALICE.email: "good-token"}
    )


@pytest.fixture
def twitch_client() -> FakeTwitchOAuthClient:
    return FakeTwitchOAuthClient()


@pytest.fixture
def upload_client() -> FakeUploadClient:
    return FakeUploadClient()


@pytest.fixture
def video_client() -> FakeVideoClient:
    return FakeVideoClient()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    identity_client: FakeIdentityClient,
    directory_client: FakeUserDirectoryClient,
    twitch_client: FakeTwitchOAuthClient,
    upload_client: FakeUploadClient,
    video_client: FakeVideoClient,
) -> AppContainer:
    token_store = CookieTokenStore(
        cookie_name=settings.session_cookie_name,
        ttl_hours=settings.session_ttl_hours,
        secure=settings.secure_cookies,
    )
    auth_client = FakeAuthClient()

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity_client=identity_client,
        directory_client=directory_client,
        twitch_client=twitch_client,
        auth_client=auth_client,
        video_client=video_client,
        session_resolver=SessionResolver(
            token_store=token_store, identity_client=identity_client
        ),
        oauth_service=OAuthCallbackService(
            oauth_client=twitch_client, directory=directory_client
        ),
        upload_orchestrator=UploadOrchestrator(upload_client),
        account_service=AccountService(
            auth_client=auth_client, directory=directory_client
        ),
        close_resources=close_resources,
    )

"""Pydantic models for upstream API and provider payloads."""

from datetime import UTC, datetime, timedelta
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from barn_gateway.domain.identity import Identity, UserRole
from barn_gateway.domain.oauth import OAuthGrant, ProviderProfile
from barn_gateway.domain.uploads import PartUrl, UploadSession
from barn_gateway.domain.videos import VideoRecord


def _as_str(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


StrId = Annotated[str, BeforeValidator(_as_str)]


class UserPayload(BaseModel):
    """User object returned by the identity authority."""

    id: StrId
    username: str
    email: str
    role: UserRole = UserRole.VIEWER

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: object) -> object:
        if value is None:
            return UserRole.VIEWER
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id, username=self.username, email=self.email, role=self.role
        )


class UserListPayload(BaseModel):
    """Envelope used by user search endpoints."""

    users: list[UserPayload]


class TokenPayload(BaseModel):
    """Session token minted by the API."""

    token: str = Field(min_length=1)
    created: bool = False


class ErrorPayload(BaseModel):
    """Error body returned by the API."""

    message: str | None = None


class TwitchTokenPayload(BaseModel):
    """Token endpoint response."""

    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)
    expires_in: int = 0
    scope: list[str] = Field(default_factory=list)
    token_type: str = "bearer"

    @field_validator("scope", mode="before")
    @classmethod
    def _split_scope(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return value

    def to_grant(self, now: datetime | None = None) -> OAuthGrant:
        issued_at = now or datetime.now(tz=UTC)
        return OAuthGrant(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=issued_at + timedelta(seconds=self.expires_in),
            scopes=tuple(self.scope),
            token_type=self.token_type,
        )


class TwitchUserPayload(BaseModel):
    """Single Helix user record."""

    id: StrId = Field(min_length=1)
    login: str = Field(min_length=1)
    email: str = Field(min_length=1)
    display_name: str | None = None
    profile_image_url: str | None = None

    def to_profile(self) -> ProviderProfile:
        return ProviderProfile(
            id=self.id,
            login=self.login,
            email=self.email,
            display_name=self.display_name,
            profile_image_url=self.profile_image_url,
        )


class TwitchUsersPayload(BaseModel):
    """Helix ``/users`` envelope."""

    data: list[TwitchUserPayload] = Field(min_length=1)


class PartUrlPayload(BaseModel):
    """Pre-signed part URL."""

    part_number: int
    url: str


class UploadStartPayload(BaseModel):
    """Response of ``POST /upload/start``."""

    upload_id: str = Field(min_length=1)
    video_id: StrId = Field(min_length=1)
    key: str | None = None
    part_urls: list[PartUrlPayload]

    def to_session(self, default_key: str) -> UploadSession:
        parts = sorted(self.part_urls, key=lambda part: part.part_number)
        return UploadSession(
            upload_id=self.upload_id,
            video_id=self.video_id,
            key=self.key or default_key,
            part_urls=tuple(
                PartUrl(part_number=part.part_number, url=part.url) for part in parts
            ),
        )


class VideoPayload(BaseModel):
    """Video row returned by ``GET /video``."""

    id: StrId
    title: str
    processing_status: str
    video_path: str
    created_at: str
    updated_at: str

    def to_record(self, api_url: str) -> VideoRecord:
        return VideoRecord(
            id=self.id,
            title=self.title,
            status=self.processing_status,
            playlist_url=f"{api_url}/{self.video_path}",
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class VideoListPayload(BaseModel):
    """Envelope returned by ``GET /video``."""

    videos: list[VideoPayload] | None = None

"""Pydantic models for gateway request bodies."""

from pydantic import BaseModel, ConfigDict, Field

from barn_gateway.domain.uploads import CompletedPart


class LoginRequest(BaseModel):
    """Password login form."""

    username: str | None = None
    password: str | None = None


class RegisterRequest(BaseModel):
    """Registration form."""

    model_config = ConfigDict(populate_by_name=True)

    username: str | None = None
    email: str | None = None
    password: str | None = None
    password_confirmation: str | None = Field(
        default=None, alias="passwordConfirmation"
    )


class InitUploadRequest(BaseModel):
    """Upload initialization form."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    file_name: str | None = Field(default=None, alias="fileName")
    file_type: str | None = Field(default=None, alias="fileType")
    parts: int | None = None


class CompletedPartModel(BaseModel):
    """Part acknowledged by object storage."""

    part_number: int
    etag: str | None = None

    def to_domain(self) -> CompletedPart:
        return CompletedPart(part_number=self.part_number, etag=self.etag or "")


class CompleteUploadRequest(BaseModel):
    """Upload completion form."""

    upload_id: str | None = None
    video_id: str | None = None
    key: str | None = None
    completed_parts: list[CompletedPartModel] = Field(default_factory=list)
    issued_parts: list[int] | None = None


class TwitchSettingsRequest(BaseModel):
    """Twitch notification toggles."""

    model_config = ConfigDict(populate_by_name=True)

    stream_status: bool = Field(default=False, alias="streamStatus")
    chat_messages: bool = Field(default=False, alias="chatMessages")
    channel_points: bool = Field(default=False, alias="channelPoints")
    follows_subs: bool = Field(default=False, alias="followsSubs")

    def to_toggles(self) -> dict[str, bool]:
        return {
            "stream_status_enabled": self.stream_status,
            "chat_messages_enabled": self.chat_messages,
            "channel_points_enabled": self.channel_points,
            "follows_subs_enabled": self.follows_subs,
        }

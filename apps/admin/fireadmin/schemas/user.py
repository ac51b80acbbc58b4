"""User account schemas for the relying-party API."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fireadmin.schemas.error import RelyingPartyErrorItem

GOOGLE_PROVIDER = "google.com"
FACEBOOK_PROVIDER = "facebook.com"
GITHUB_PROVIDER = "github.com"
TWITTER_PROVIDER = "twitter.com"
PASSWORD_PROVIDER = "password"
PHONE_PROVIDER = "phone"


def _from_epoch_millis(value: Any) -> datetime | None:
    if value in (None, "", 0, "0"):
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromtimestamp(int(value) / 1000, tz=UTC)


class _RemoteModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProviderInfo(_RemoteModel):
    user_id: str = Field(default="", alias="rawId")
    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    photo_url: str | None = Field(default=None, alias="photoUrl")
    provider_id: str = Field(default="", alias="providerId")


class UserMetadata(BaseModel):
    created_at: datetime | None = None
    last_signed_in_at: datetime | None = None


class UserRecord(_RemoteModel):
    """Transient copy of a remote user account."""

    user_id: str = Field(alias="localId")
    email: str | None = None
    email_verified: bool = Field(default=False, alias="emailVerified")
    display_name: str | None = Field(default=None, alias="displayName")
    photo_url: str | None = Field(default=None, alias="photoUrl")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    disabled: bool = False
    password_hash: str | None = Field(default=None, alias="passwordHash")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    last_signed_in_at: datetime | None = Field(default=None, alias="lastLoginAt")
    provider_data: list[ProviderInfo] = Field(default_factory=list, alias="providerUserInfo")

    @field_validator("created_at", "last_signed_in_at", mode="before")
    @classmethod
    def _parse_millis(cls, value: Any) -> datetime | None:
        return _from_epoch_millis(value)

    @property
    def metadata(self) -> UserMetadata:
        return UserMetadata(created_at=self.created_at, last_signed_in_at=self.last_signed_in_at)


class User(BaseModel):
    """Account fields for create and update calls.

    ``password`` is plain text and write-only; it is never read back.
    """

    user_id: str = ""
    email: str | None = None
    email_verified: bool | None = None
    password: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    disabled: bool | None = None


class GetAccountInfoResponse(_RemoteModel):
    users: list[UserRecord] = Field(default_factory=list)


class LocalIdResponse(_RemoteModel):
    local_id: str = Field(default="", alias="localId")


class UploadAccountResponse(_RemoteModel):
    error: list[RelyingPartyErrorItem] = Field(default_factory=list)


class DownloadAccountResponse(_RemoteModel):
    users: list[UserRecord] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class CreateAuthUriResponse(_RemoteModel):
    auth_uri: str = Field(default="", alias="authUri")
    provider_id: str | None = Field(default=None, alias="providerId")
    session_id: str | None = Field(default=None, alias="sessionId")


class VerifyAssertionResponse(_RemoteModel):
    local_id: str = Field(default="", alias="localId")
    display_name: str | None = Field(default=None, alias="displayName")
    email: str | None = None
    photo_url: str | None = Field(default=None, alias="photoUrl")
    provider_id: str | None = Field(default=None, alias="providerId")

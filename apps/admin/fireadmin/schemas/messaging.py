"""Cloud Messaging request/response schemas."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fireadmin.errors import MessagingProviderError, provider_error


class Notification(BaseModel):
    title: str | None = None
    body: str | None = None
    android_channel_id: str | None = None
    icon: str | None = None
    sound: str | None = None
    badge: str | None = None
    tag: str | None = None
    color: str | None = None
    click_action: str | None = None
    body_loc_key: str | None = None
    body_loc_args: list[str] | None = None
    title_loc_key: str | None = None
    title_loc_args: list[str] | None = None


class Message(BaseModel):
    """Legacy HTTP send payload; exactly one recipient field is filled at send time."""

    to: str | None = None
    registration_ids: list[str] | None = None
    condition: str | None = None
    collapse_key: str | None = None
    priority: Literal["normal", "high"] | None = None
    content_available: bool | None = None
    mutable_content: bool | None = None
    time_to_live: int | None = None
    restricted_package_name: str | None = None
    dry_run: bool | None = None
    data: dict[str, Any] | None = None
    notification: Notification | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Result(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    message_id: str | None = None
    registration_id: str | None = None
    error: MessagingProviderError | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _map_error_code(cls, value: Any) -> Any:
        if value is None or isinstance(value, MessagingProviderError):
            return value
        return provider_error(str(value))


class Response(BaseModel):
    multicast_id: int = 0
    success: int = 0
    failure: int = 0
    canonical_ids: int = 0
    results: list[Result] = Field(default_factory=list)


class TopicManagementRequest(BaseModel):
    to: str
    registration_tokens: list[str]

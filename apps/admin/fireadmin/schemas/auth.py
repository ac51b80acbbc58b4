"""Token claim schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CustomTokenClaims(BaseModel):
    """Payload of a custom token minted for ``signInWithCustomToken``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    issuer: str = Field(alias="iss")
    subject: str = Field(alias="sub")
    audience: str = Field(alias="aud")
    issued_at: int = Field(alias="iat")
    expires_at: int = Field(alias="exp")
    user_id: str = Field(alias="uid")
    claims: Any = None

    def to_jwt_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class FirebaseIdentities(BaseModel):
    model_config = ConfigDict(extra="allow")

    identities: dict[str, list[str]] = Field(default_factory=dict)
    sign_in_provider: str = ""
    tenant: str | None = None


class IdTokenClaims(BaseModel):
    """Decoded claims of a verified Firebase ID token.

    Registered claims are exposed under descriptive names; any custom claims
    set on the user stay available as extra fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    issuer: str = Field(default="", alias="iss")
    subject: str = Field(default="", alias="sub")
    audience: str = Field(default="", alias="aud")
    issued_at: int = Field(default=0, alias="iat")
    expires_at: int = Field(default=0, alias="exp")
    auth_time: int | None = None
    user_id: str = ""
    name: str | None = None
    picture: str | None = None
    email: str | None = None
    email_verified: bool = False
    phone_number: str | None = None
    firebase: FirebaseIdentities = Field(default_factory=FirebaseIdentities)

    @property
    def uid(self) -> str:
        return self.user_id or self.subject

    @property
    def sign_in_provider(self) -> str:
        return self.firebase.sign_in_provider

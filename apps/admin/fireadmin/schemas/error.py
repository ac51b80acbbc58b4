"""Error payload schemas."""

from typing import Any

from pydantic import BaseModel


class ErrorPayload(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None
    status_code: int | None = None


class RelyingPartyErrorItem(BaseModel):
    index: int = 0
    message: str = ""

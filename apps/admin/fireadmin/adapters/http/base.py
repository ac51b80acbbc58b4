"""HTTP transport interface."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from fireadmin.errors import TransportError

_RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason}".strip()

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def json(self) -> Any:
        """Decode the body, raising a TransportError for malformed JSON."""
        try:
            return json.loads(self.body)
        except ValueError as exc:
            raise TransportError(
                f"malformed response body: {exc}",
                code="MALFORMED_RESPONSE",
                status_code=self.status_code,
            ) from exc


class HttpTransport(ABC):
    """Executes one HTTP request and returns the raw response."""

    bearer_in_url: bool = False

    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        data: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Perform the request; network failures raise TransportError."""

    def access_token(self) -> str | None:
        """Current bearer token, for endpoints that take it as a URL parameter."""
        return None

    def close(self) -> None:
        return None


def _server_message(response: HttpResponse) -> str | None:
    try:
        data = json.loads(response.body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    error = data.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def raise_for_status(response: HttpResponse, *, service: str) -> HttpResponse:
    """Turn any non-2xx response into a TransportError with the server's message."""
    if response.ok:
        return response

    message = _server_message(response) or response.status_line or "unexpected response"
    raise TransportError(
        f"{service}: {message}",
        code="HTTP_ERROR",
        status_code=response.status_code,
        details={"server_message": message},
        retryable=response.status_code in _RETRYABLE_STATUSES,
    )


__all__ = ["HttpResponse", "HttpTransport", "raise_for_status"]

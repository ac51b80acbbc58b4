"""In-memory transport for local development and tests."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from fireadmin.adapters.http.base import HttpResponse, HttpTransport


@dataclass(slots=True)
class RecordedRequest:
    method: str
    url: str
    params: dict[str, str] = field(default_factory=dict)
    json_body: Any = None
    data: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None

    def body(self) -> Any:
        """Decoded request body, whether it was sent as JSON or raw bytes."""
        if self.data is not None:
            return json.loads(self.data)
        return self.json_body


Handler = Callable[[RecordedRequest], HttpResponse]


def json_response(payload: Any, status_code: int = 200, headers: Mapping[str, str] | None = None) -> HttpResponse:
    return HttpResponse(
        status_code=status_code,
        body=json.dumps(payload).encode("utf-8"),
        headers=dict(headers or {"Content-Type": "application/json"}),
        reason="OK" if status_code == 200 else "",
    )


class MockTransport(HttpTransport):
    """Replays queued responses, or delegates to a handler callable.

    Every request is recorded in ``requests`` so callers can assert on the
    exact method, URL, query parameters and body that were sent.
    """

    def __init__(
        self,
        responses: list[HttpResponse] | None = None,
        *,
        handler: Handler | None = None,
        token: str | None = None,
        bearer_in_url: bool = False,
    ) -> None:
        self._queue: deque[HttpResponse] = deque(responses or [])
        self._handler = handler
        self._token = token
        self.bearer_in_url = bearer_in_url and token is not None
        self.requests: list[RecordedRequest] = []

    def enqueue(self, response: HttpResponse) -> None:
        self._queue.append(response)

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
        recorded = RecordedRequest(
            method=method.upper(),
            url=url,
            params=dict(params or {}),
            json_body=json_body,
            data=data,
            headers=dict(headers or {}),
            timeout=timeout,
        )
        self.requests.append(recorded)

        if self._queue:
            return self._queue.popleft()
        if self._handler is not None:
            return self._handler(recorded)
        raise AssertionError(f"unexpected request: {recorded.method} {recorded.url}")

    def access_token(self) -> str | None:
        return self._token


__all__ = ["MockTransport", "RecordedRequest", "json_response"]

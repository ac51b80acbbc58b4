"""HTTP transport backed by the requests library."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import urlsplit

import google.auth.credentials
import google.auth.exceptions
import requests
from google.auth.transport.requests import AuthorizedSession, Request

from fireadmin.adapters.http.base import HttpResponse, HttpTransport
from fireadmin.errors import TransportError

logger = logging.getLogger(__name__)

_USER_AGENT = "fireadmin/0.1 (python-requests)"


class RequestsTransport(HttpTransport):
    """Blocking transport; attaches OAuth2 bearer tokens when credentials are given."""

    def __init__(
        self,
        credentials: google.auth.credentials.Credentials | None = None,
        *,
        session: requests.Session | None = None,
        default_timeout: float = 10.0,
        bearer_in_url: bool = False,
    ) -> None:
        self._credentials = credentials
        if session is None:
            session = AuthorizedSession(credentials) if credentials is not None else requests.Session()
        session.headers.setdefault("User-Agent", _USER_AGENT)
        self._session = session
        self._default_timeout = default_timeout
        self.bearer_in_url = bearer_in_url and credentials is not None

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
        kwargs: dict[str, Any] = {
            "params": dict(params) if params else None,
            "headers": dict(headers) if headers else None,
            "timeout": timeout or self._default_timeout,
        }
        if data is not None:
            kwargs["data"] = data
        elif json_body is not None:
            kwargs["json"] = json_body

        try:
            response = self._session.request(method.upper(), url, **kwargs)
        except requests.exceptions.Timeout as exc:
            logger.warning("http.timeout method=%s host=%s", method.upper(), _host(url))
            raise TransportError(
                f"request timed out: {exc}", code="DEADLINE_EXCEEDED", retryable=True
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            logger.warning("http.connection_failed method=%s host=%s", method.upper(), _host(url))
            raise TransportError(f"connection failed: {exc}", code="UNAVAILABLE", retryable=True) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"request failed: {exc}", code="TRANSPORT_ERROR") from exc
        except google.auth.exceptions.RefreshError as exc:
            raise TransportError(f"credential refresh failed: {exc}", code="UNAUTHENTICATED") from exc

        return HttpResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
            reason=response.reason or "",
        )

    def access_token(self) -> str | None:
        if self._credentials is None:
            return None
        if not self._credentials.valid:
            try:
                self._credentials.refresh(Request())
            except google.auth.exceptions.RefreshError as exc:
                raise TransportError(f"credential refresh failed: {exc}", code="UNAUTHENTICATED") from exc
        return self._credentials.token

    def close(self) -> None:
        self._session.close()


def _host(url: str) -> str:
    return urlsplit(url).netloc

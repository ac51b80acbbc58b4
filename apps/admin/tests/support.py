"""Shared fixtures: keys, certificates, tokens, clocks and a fake database."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime
from functools import lru_cache
from itertools import count
from typing import Any
from urllib.parse import urlsplit

import jwt
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from fireadmin.adapters.http import HttpResponse, RecordedRequest, json_response

PROJECT_ID = "test-project"
CLIENT_EMAIL = "firebase-adminsdk@test-project.iam.gserviceaccount.com"
DATABASE_URL = "https://test-project.firebaseio.com"
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@lru_cache(maxsize=None)
def rsa_private_key(name: str = "default") -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def private_key_pem(key: rsa.RSAPrivateKey) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


def certificate_pem(key: rsa.RSAPrivateKey, common_name: str = "securetoken.system.gserviceaccount.com") -> str:
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(FIXED_NOW - timedelta(days=1))
        .not_valid_after(FIXED_NOW + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM).decode("utf-8")


def service_account_info(key: rsa.RSAPrivateKey | None = None, **overrides: Any) -> dict[str, Any]:
    info = {
        "type": "service_account",
        "project_id": PROJECT_ID,
        "private_key_id": "key-1",
        "private_key": private_key_pem(key or rsa_private_key()),
        "client_email": CLIENT_EMAIL,
        "client_id": "1234567890",
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    info.update(overrides)
    return info


class FixedClock:
    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


def public_keys_response(certificates: dict[str, str], *, expires_at: datetime) -> HttpResponse:
    return json_response(
        certificates,
        headers={"Content-Type": "application/json", "Expires": format_datetime(expires_at, usegmt=True)},
    )


def id_token_claims(now: datetime = FIXED_NOW, **overrides: Any) -> dict[str, Any]:
    issued_at = int(now.timestamp())
    claims: dict[str, Any] = {
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "aud": PROJECT_ID,
        "auth_time": issued_at,
        "iat": issued_at,
        "exp": issued_at + 3600,
        "sub": "user-123",
        "email": "ada@example.com",
        "firebase": {"identities": {"email": ["ada@example.com"]}, "sign_in_provider": "password"},
    }
    claims.update(overrides)
    return claims


def sign_id_token(
    claims: dict[str, Any],
    *,
    key: rsa.RSAPrivateKey | None = None,
    kid: str | None = "kid-1",
    algorithm: str = "RS256",
) -> str:
    headers = {"kid": kid} if kid is not None else None
    return jwt.encode(claims, key or rsa_private_key(), algorithm=algorithm, headers=headers)


class FakeRealtimeDatabase:
    """In-memory stand-in for the database REST surface, usable as a MockTransport handler."""

    def __init__(self, base_url: str = DATABASE_URL) -> None:
        self._base_path = urlsplit(base_url).path.rstrip("/")
        self.tree: Any = None
        self._ids = count(1)

    def _segments(self, url: str) -> list[str]:
        path = urlsplit(url).path
        if not path.endswith(".json"):
            raise AssertionError(f"database url must end with .json: {url}")
        path = path[len(self._base_path) : -len(".json")]
        return [segment for segment in path.split("/") if segment]

    def _get(self, segments: list[str]) -> Any:
        node = self.tree
        for segment in segments:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node

    def _set(self, segments: list[str], value: Any) -> None:
        if not segments:
            self.tree = value
            return
        if not isinstance(self.tree, dict):
            self.tree = {}
        node = self.tree
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        if value is None:
            node.pop(segments[-1], None)
        else:
            node[segments[-1]] = value

    def __call__(self, request: RecordedRequest) -> HttpResponse:
        segments = self._segments(request.url)
        if request.method == "GET":
            value = self._get(segments)
            if request.params.get("shallow") == "true" and isinstance(value, dict):
                value = {key: True for key in value}
            return json_response(value)
        if request.method == "PUT":
            value = request.body()
            self._set(segments, value)
            return json_response(value)
        if request.method == "PATCH":
            updates = request.body()
            for key, value in updates.items():
                self._set(segments + [part for part in key.split("/") if part], value)
            return json_response(updates)
        if request.method == "POST":
            name = f"-Nfake{next(self._ids):06d}"
            self._set(segments + [name], request.body())
            return json_response({"name": name})
        if request.method == "DELETE":
            self._set(segments, None)
            return json_response(None)
        raise AssertionError(f"unsupported method {request.method}")


def error_response(status_code: int, payload: Any, reason: str = "") -> HttpResponse:
    return HttpResponse(
        status_code=status_code,
        body=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        reason=reason,
    )

"""Service account credential source."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from google.oauth2 import service_account

from fireadmin.adapters.credentials.base import (
    FIREBASE_SCOPES,
    CredentialLoadError,
    CredentialSource,
    ResolvedCredentials,
)
from fireadmin.core.logging_safety import safe_log_identifier

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("private_key", "client_email")

ServiceAccountInput = bytes | str | Path | dict[str, Any]


def _read_info(material: ServiceAccountInput) -> dict[str, Any]:
    if isinstance(material, dict):
        return dict(material)
    if isinstance(material, Path):
        return _read_file(material)
    if isinstance(material, bytes):
        return _parse_json(material)

    text = material.strip()
    if text.startswith("{"):
        return _parse_json(text.encode("utf-8"))
    return _read_file(Path(text))


def _read_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise CredentialLoadError(f"cannot read service account file {path}: {exc}") from exc
    return _parse_json(raw)


def _parse_json(raw: bytes) -> dict[str, Any]:
    try:
        info = json.loads(raw)
    except ValueError as exc:
        raise CredentialLoadError(f"service account is not valid JSON: {exc}") from exc
    if not isinstance(info, dict):
        raise CredentialLoadError("service account JSON must be an object")
    return info


class ServiceAccountSource(CredentialSource):
    """Exchanges service-account JSON for a signing key and a bearer-token source."""

    def __init__(self, material: ServiceAccountInput) -> None:
        self._material = material

    def load(self) -> ResolvedCredentials:
        info = _read_info(self._material)
        if info.get("type", "service_account") != "service_account":
            raise CredentialLoadError(f"unsupported credential type: {info.get('type')}")
        missing = [name for name in _REQUIRED_FIELDS if not info.get(name)]
        if missing:
            raise CredentialLoadError(f"service account is missing fields: {', '.join(missing)}")

        try:
            private_key = serialization.load_pem_private_key(info["private_key"].encode("utf-8"), password=None)
        except (ValueError, TypeError) as exc:
            raise CredentialLoadError(f"service account private key is unreadable: {exc}") from exc
        if not isinstance(private_key, RSAPrivateKey):
            raise CredentialLoadError("service account private key must be an RSA key")

        info.setdefault("token_uri", "https://oauth2.googleapis.com/token")
        google_credentials = service_account.Credentials.from_service_account_info(info, scopes=FIREBASE_SCOPES)

        logger.info(
            "credentials.loaded source=service_account identity=%s",
            safe_log_identifier(info["client_email"], prefix="sa"),
        )
        return ResolvedCredentials(
            signing_key=private_key,
            signing_identity=info["client_email"],
            google_credentials=google_credentials,
            project_id=info.get("project_id"),
        )


__all__ = ["ServiceAccountInput", "ServiceAccountSource"]

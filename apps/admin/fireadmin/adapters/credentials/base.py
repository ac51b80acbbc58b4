"""Credential source interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import google.auth.credentials
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from fireadmin.errors import ConfigurationError

FIREBASE_SCOPES: tuple[str, ...] = (
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/firebase.database",
    "https://www.googleapis.com/auth/identitytoolkit",
)


class CredentialLoadError(ConfigurationError):
    """Raised when credential material cannot be parsed or obtained."""

    default_code = "INVALID_CREDENTIAL"


@dataclass(frozen=True, slots=True)
class ResolvedCredentials:
    """Everything the app derives from its credential source."""

    signing_key: RSAPrivateKey | None = None
    signing_identity: str | None = None
    google_credentials: google.auth.credentials.Credentials | None = None
    project_id: str | None = None

    @property
    def can_sign(self) -> bool:
        return self.signing_key is not None and bool(self.signing_identity)


class CredentialSource(ABC):
    """One way of obtaining credentials at app construction time."""

    @abstractmethod
    def load(self) -> ResolvedCredentials:
        """Load credential material."""


class AnonymousSource(CredentialSource):
    """No credentials: public database rules or API-key-only messaging."""

    def load(self) -> ResolvedCredentials:
        return ResolvedCredentials()


__all__ = [
    "FIREBASE_SCOPES",
    "AnonymousSource",
    "CredentialLoadError",
    "CredentialSource",
    "ResolvedCredentials",
]

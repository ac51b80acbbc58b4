"""Credential source adapters."""

from .base import (
    FIREBASE_SCOPES,
    AnonymousSource,
    CredentialLoadError,
    CredentialSource,
    ResolvedCredentials,
)
from .default import DefaultCredentialsSource
from .service_account import ServiceAccountInput, ServiceAccountSource


def select_source(
    service_account: ServiceAccountInput | None = None,
    *,
    use_default: bool = False,
) -> CredentialSource:
    """Pick exactly one credential strategy; explicit material wins over ambient."""
    if service_account is not None:
        return ServiceAccountSource(service_account)
    if use_default:
        return DefaultCredentialsSource()
    return AnonymousSource()


def resolve_credentials(
    service_account: ServiceAccountInput | None = None,
    *,
    use_default: bool = False,
) -> ResolvedCredentials:
    return select_source(service_account, use_default=use_default).load()


__all__ = [
    "FIREBASE_SCOPES",
    "AnonymousSource",
    "CredentialLoadError",
    "CredentialSource",
    "DefaultCredentialsSource",
    "ResolvedCredentials",
    "ServiceAccountInput",
    "ServiceAccountSource",
    "resolve_credentials",
    "select_source",
]

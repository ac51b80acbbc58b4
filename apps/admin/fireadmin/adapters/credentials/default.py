"""Application default credentials source."""

from __future__ import annotations

import logging

import google.auth
import google.auth.exceptions

from fireadmin.adapters.credentials.base import (
    FIREBASE_SCOPES,
    CredentialLoadError,
    CredentialSource,
    ResolvedCredentials,
)

logger = logging.getLogger(__name__)


class DefaultCredentialsSource(CredentialSource):
    """Ambient credentials; provides a bearer token but no custom-token signing key."""

    def load(self) -> ResolvedCredentials:
        try:
            credentials, project_id = google.auth.default(scopes=FIREBASE_SCOPES)
        except google.auth.exceptions.DefaultCredentialsError as exc:
            raise CredentialLoadError(f"default credentials unavailable: {exc}") from exc

        logger.info("credentials.loaded source=default project_found=%s", bool(project_id))
        return ResolvedCredentials(google_credentials=credentials, project_id=project_id)


__all__ = ["DefaultCredentialsSource"]

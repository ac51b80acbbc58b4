"""In-memory cache of the public keys that sign Firebase ID tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Callable

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from fireadmin.adapters.http import HttpTransport, raise_for_status
from fireadmin.core.locks import ReadWriteLock
from fireadmin.core.logging_safety import safe_log_identifier
from fireadmin.errors import TransportError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CachedKeySet:
    keys: dict[str, RSAPublicKey] = field(default_factory=dict)
    expires_at: datetime | None = None


def parse_public_key(pem: str) -> RSAPublicKey | None:
    """Load an RSA key from a PEM certificate or bare public key; None if unusable."""
    data = pem.encode("utf-8")
    try:
        key = x509.load_pem_x509_certificate(data).public_key()
    except ValueError:
        try:
            key = serialization.load_pem_public_key(data)
        except (ValueError, TypeError):
            return None
    if not isinstance(key, RSAPublicKey):
        return None
    return key


def parse_expires(value: str | None) -> datetime:
    if not value:
        raise TransportError("public key response has no Expires header", code="MALFORMED_RESPONSE")
    try:
        expires_at = parsedate_to_datetime(value)
    except (TypeError, ValueError) as exc:
        raise TransportError(
            f"public key response has malformed Expires header: {value!r}", code="MALFORMED_RESPONSE"
        ) from exc
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    return expires_at


class KeyCache:
    """Key ID to public key lookup with lazy, expiry-driven refresh.

    The key set is replaced wholesale on refresh under the write lock, so
    readers never observe a partially updated set. A caller that finds the
    cache stale refreshes inline; concurrent callers that queued behind it
    re-check freshness under the write lock and skip the duplicate fetch.
    """

    def __init__(
        self,
        transport: HttpTransport,
        *,
        url: str,
        timeout: float | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._transport = transport
        self._url = url
        self._timeout = timeout
        self._clock = clock
        self._lock = ReadWriteLock()
        self._key_set = CachedKeySet()

    @property
    def expires_at(self) -> datetime | None:
        with self._lock.read_locked():
            return self._key_set.expires_at

    def _is_stale(self) -> bool:
        key_set = self._key_set
        return key_set.expires_at is None or key_set.expires_at <= self._clock() or not key_set.keys

    def select_key(self, kid: str) -> RSAPublicKey | None:
        with self._lock.read_locked():
            if not self._is_stale():
                return self._key_set.keys.get(kid)

        try:
            self.refresh()
        except TransportError as exc:
            logger.warning("keys.refresh_failed code=%s reason=%s", exc.code, exc.message)
            return None

        with self._lock.read_locked():
            key = self._key_set.keys.get(kid)
        if key is None:
            logger.info("keys.unknown_kid kid=%s", safe_log_identifier(kid, prefix="kid"))
        return key

    def refresh(self, *, force: bool = False) -> None:
        """Fetch and replace the key set; no-op if another caller already did."""
        with self._lock.write_locked():
            if not force and not self._is_stale():
                return

            logger.debug("keys.refresh_started url=%s", self._url)
            response = raise_for_status(
                self._transport.request("GET", self._url, timeout=self._timeout),
                service="public keys",
            )
            expires_at = parse_expires(response.header("Expires"))
            payload = response.json()
            if not isinstance(payload, dict):
                raise TransportError("public key response must be a JSON object", code="MALFORMED_RESPONSE")

            keys: dict[str, RSAPublicKey] = {}
            for kid, pem in payload.items():
                key = parse_public_key(pem) if isinstance(pem, str) else None
                if key is None:
                    logger.debug("keys.skipped_entry kid=%s", safe_log_identifier(kid, prefix="kid"))
                    continue
                keys[kid] = key

            self._key_set = CachedKeySet(keys=keys, expires_at=expires_at)
            logger.info("keys.refreshed count=%d expires_at=%s", len(keys), expires_at.isoformat())

"""Custom token minting and ID token verification."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from pydantic import ValidationError

from fireadmin.core.logging_safety import safe_log_identifier
from fireadmin.domain.claims import MAX_SUBJECT_LENGTH, ensure_valid_claims
from fireadmin.errors import (
    ConfigurationError,
    IncorrectAlgorithmError,
    InvalidArgumentError,
    InvalidSignatureError,
    MalformedTokenError,
    MissingKidError,
    RequireServiceAccountError,
    RequireUserIdError,
    TokenError,
    UnknownKidError,
)
from fireadmin.repositories.key_cache import Clock, KeyCache, utc_now
from fireadmin.schemas.auth import CustomTokenClaims, IdTokenClaims

logger = logging.getLogger(__name__)

CUSTOM_TOKEN_AUDIENCE = "https://identitytoolkit.googleapis.com/google.identity.identitytoolkit.v1.IdentityToolkit"
CUSTOM_TOKEN_LIFETIME = timedelta(hours=1)
_SIGNING_ALGORITHM = "RS256"
_RSA_ALGORITHMS = frozenset({"RS256", "RS384", "RS512"})


class TokenCodec:
    """Mints custom tokens locally and verifies ID tokens against the key cache."""

    def __init__(
        self,
        *,
        project_id: str | None,
        key_cache: KeyCache,
        signing_key: RSAPrivateKey | None = None,
        signing_identity: str | None = None,
        leeway_seconds: int = 0,
        clock: Clock = utc_now,
    ) -> None:
        self._project_id = project_id
        self._key_cache = key_cache
        self._signing_key = signing_key
        self._signing_identity = signing_identity
        self._leeway_seconds = leeway_seconds
        self._clock = clock
        self._jws = jwt.PyJWS()

    def create_custom_token(self, user_id: str, claims: Any = None) -> str:
        if self._signing_key is None or not self._signing_identity:
            raise RequireServiceAccountError()
        if not user_id:
            raise RequireUserIdError()
        if len(user_id) > MAX_SUBJECT_LENGTH:
            raise InvalidArgumentError(f"user id must not be longer than {MAX_SUBJECT_LENGTH} characters")

        now = self._clock()
        payload = CustomTokenClaims(
            issuer=self._signing_identity,
            subject=self._signing_identity,
            audience=CUSTOM_TOKEN_AUDIENCE,
            issued_at=int(now.timestamp()),
            expires_at=int((now + CUSTOM_TOKEN_LIFETIME).timestamp()),
            user_id=user_id,
            claims=claims,
        )
        return jwt.encode(payload.to_jwt_payload(), self._signing_key, algorithm=_SIGNING_ALGORITHM)

    def verify_id_token(self, id_token: str) -> IdTokenClaims:
        if not self._project_id:
            raise ConfigurationError("firebaseauth: a project id is required to verify ID tokens")
        try:
            claims = self._verify(id_token)
        except TokenError as exc:
            logger.warning("token.rejected reason=%s", exc.code)
            raise

        logger.debug("token.verified uid=%s", safe_log_identifier(claims.uid, prefix="uid"))
        return claims

    def _verify(self, id_token: str) -> IdTokenClaims:
        if not isinstance(id_token, str) or not id_token:
            raise MalformedTokenError("firebaseauth: ID token must be a non-empty string")

        try:
            header = jwt.get_unverified_header(id_token)
        except jwt.exceptions.DecodeError as exc:
            raise MalformedTokenError(f"firebaseauth: malformed ID token: {exc}") from exc

        algorithm = header.get("alg")
        if not isinstance(algorithm, str) or algorithm not in _RSA_ALGORITHMS:
            raise IncorrectAlgorithmError(
                f'firebaseauth: Firebase ID token has incorrect algorithm. Expected "RSA" but got "{algorithm}"'
            )

        kid = header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise MissingKidError('firebaseauth: Firebase ID token has no "kid" claim')

        public_key = self._key_cache.select_key(kid)
        if public_key is None:
            raise UnknownKidError(
                'firebaseauth: Firebase ID token has "kid" claim which does not correspond to a known '
                "public key. Most likely the ID token is expired, so get a fresh token from your client "
                "app and try again"
            )

        try:
            raw_payload = self._jws.decode(id_token, public_key, algorithms=[algorithm])
        except jwt.exceptions.InvalidTokenError as exc:
            raise InvalidSignatureError(f"firebaseauth: invalid token: {exc}") from exc

        try:
            payload = json.loads(raw_payload)
            claims = IdTokenClaims.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            raise MalformedTokenError(f"firebaseauth: ID token payload is malformed: {exc}") from exc

        ensure_valid_claims(
            claims,
            project_id=self._project_id,
            now=int(self._clock().timestamp()),
            leeway=self._leeway_seconds,
        )
        return claims.model_copy(update={"user_id": claims.subject})

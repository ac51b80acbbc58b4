"""ID token claim rules.

The checks run in a fixed order and stop at the first failure, so a token
that breaks one rule is always reported with that rule's error.
"""

from fireadmin.errors import (
    AudienceMismatchError,
    EmptySubjectError,
    IssuerMismatchError,
    SubjectTooLongError,
    TokenExpiredError,
    TokenUsedBeforeIssuedError,
)
from fireadmin.schemas.auth import IdTokenClaims

ISSUER_PREFIX = "https://securetoken.google.com/"
MAX_SUBJECT_LENGTH = 128


def expected_issuer(project_id: str) -> str:
    return f"{ISSUER_PREFIX}{project_id}"


def ensure_valid_claims(claims: IdTokenClaims, *, project_id: str, now: int, leeway: int = 0) -> None:
    """Validate exp, iat, aud, iss and sub in that order."""
    if now > claims.expires_at:
        raise TokenExpiredError(f"firebaseauth: token is expired by {now - claims.expires_at}s")

    if claims.issued_at > now + leeway:
        raise TokenUsedBeforeIssuedError("firebaseauth: token used before issued")

    if claims.audience != project_id:
        raise AudienceMismatchError(
            'firebaseauth: Firebase ID token has incorrect "aud" (audience) claim. '
            f'Expected "{project_id}" but got "{claims.audience}"'
        )

    issuer = expected_issuer(project_id)
    if claims.issuer != issuer:
        raise IssuerMismatchError(
            'firebaseauth: Firebase ID token has incorrect "iss" (issuer) claim. '
            f'Expected "{issuer}" but got "{claims.issuer}"'
        )

    if not claims.subject:
        raise EmptySubjectError('firebaseauth: Firebase ID token has an empty string "sub" (subject) claim')

    if len(claims.subject) > MAX_SUBJECT_LENGTH:
        raise SubjectTooLongError(
            'firebaseauth: Firebase ID token has "sub" (subject) claim longer than 128 characters'
        )

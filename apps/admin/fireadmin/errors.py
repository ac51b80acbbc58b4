"""Exception types raised by the library."""

from __future__ import annotations

from typing import Any

from fireadmin.schemas.error import ErrorPayload


class FirebaseError(Exception):
    """Structured error carrying a stable code callers can branch on."""

    default_code = "UNKNOWN"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message
        self.details = details
        self.status_code = status_code
        self.payload = ErrorPayload(code=self.code, message=message, details=details, status_code=status_code)
        super().__init__(message)


# Configuration


class ConfigurationError(FirebaseError):
    default_code = "CONFIGURATION_ERROR"


class RequireServiceAccountError(ConfigurationError):
    default_code = "SERVICE_ACCOUNT_REQUIRED"

    def __init__(self, message: str = "firebase: requires service account") -> None:
        super().__init__(message)


# Validation


class InvalidArgumentError(FirebaseError, ValueError):
    default_code = "INVALID_ARGUMENT"


class RequireUserIdError(InvalidArgumentError):
    default_code = "USER_ID_REQUIRED"

    def __init__(self, message: str = "firebaseauth: require user id") -> None:
        super().__init__(message)


class MessageValidationError(InvalidArgumentError):
    default_code = "INVALID_MESSAGE"


# Tokens


class TokenError(FirebaseError):
    """ID token rejected; the subclass names the failing check."""

    default_code = "INVALID_ID_TOKEN"


class MalformedTokenError(TokenError):
    default_code = "MALFORMED_TOKEN"


class IncorrectAlgorithmError(TokenError):
    default_code = "INCORRECT_ALGORITHM"


class MissingKidError(TokenError):
    default_code = "MISSING_KID"


class UnknownKidError(TokenError):
    """No public key matches the token's kid; the client should refresh its token."""

    default_code = "UNKNOWN_KID"


class InvalidSignatureError(TokenError):
    default_code = "INVALID_SIGNATURE"


class TokenExpiredError(TokenError):
    default_code = "TOKEN_EXPIRED"


class TokenUsedBeforeIssuedError(TokenError):
    default_code = "TOKEN_USED_BEFORE_ISSUED"


class AudienceMismatchError(TokenError):
    default_code = "AUDIENCE_MISMATCH"


class IssuerMismatchError(TokenError):
    default_code = "ISSUER_MISMATCH"


class EmptySubjectError(TokenError):
    default_code = "EMPTY_SUBJECT"


class SubjectTooLongError(TokenError):
    default_code = "SUBJECT_TOO_LONG"


# Transport


class TransportError(FirebaseError):
    """Network failure, non-2xx status or unreadable response body."""

    default_code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, code=code, details=details, status_code=status_code)
        self.retryable = retryable


# Messaging provider error catalog


class MessagingProviderError(FirebaseError):
    """Per-recipient error code reported by the messaging service."""

    provider_code = ""
    default_code = "MESSAGING_PROVIDER_ERROR"
    default_message = "messaging provider error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message, details={"provider_code": self.provider_code})

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.provider_code == self.provider_code

    def __hash__(self) -> int:
        return hash((type(self), self.provider_code))


class MissingRegistrationError(MessagingProviderError):
    provider_code = "MissingRegistration"
    default_message = "missing registration token"


class InvalidRegistrationError(MessagingProviderError):
    provider_code = "InvalidRegistration"
    default_message = "invalid registration token"


class UnregisteredDeviceError(MessagingProviderError):
    provider_code = "NotRegistered"
    default_message = "unregistered device"


class InvalidPackageNameError(MessagingProviderError):
    provider_code = "InvalidPackageName"
    default_message = "invalid package name"


class MismatchedSenderError(MessagingProviderError):
    provider_code = "MismatchSenderId"
    default_message = "mismatched sender id"


class MessageTooBigError(MessagingProviderError):
    provider_code = "MessageTooBig"
    default_message = "message too big"


class InvalidDataKeyError(MessagingProviderError):
    provider_code = "InvalidDataKey"
    default_message = "invalid data key"


class InvalidTtlError(MessagingProviderError):
    provider_code = "InvalidTtl"
    default_message = "invalid time to live"


class DeviceMessageRateExceededError(MessagingProviderError):
    provider_code = "DeviceMessageRateExceeded"
    default_message = "device message rate exceeded"


class TopicsMessageRateExceededError(MessagingProviderError):
    provider_code = "TopicsMessageRateExceeded"
    default_message = "topics message rate exceeded"


class ProviderUnavailableError(MessagingProviderError):
    """Callers are expected to retry with exponential backoff."""

    provider_code = "Unavailable"
    default_message = "messaging service unavailable"


class ProviderInternalError(MessagingProviderError):
    provider_code = "InternalServerError"
    default_message = "messaging service internal server error"


class InvalidApnsCredentialError(MessagingProviderError):
    provider_code = "InvalidApnsCredential"
    default_message = "invalid APNs credential"


class UnknownProviderError(MessagingProviderError):
    """Provider returned a code outside the known catalog."""

    default_message = "unknown messaging provider error"

    def __init__(self, provider_code: str) -> None:
        self.provider_code = provider_code
        super().__init__(f"unknown messaging provider error: {provider_code}")


_PROVIDER_ERRORS: dict[str, type[MessagingProviderError]] = {
    cls.provider_code: cls
    for cls in (
        MissingRegistrationError,
        InvalidRegistrationError,
        UnregisteredDeviceError,
        InvalidPackageNameError,
        MismatchedSenderError,
        MessageTooBigError,
        InvalidDataKeyError,
        InvalidTtlError,
        DeviceMessageRateExceededError,
        TopicsMessageRateExceededError,
        ProviderUnavailableError,
        ProviderInternalError,
        InvalidApnsCredentialError,
    )
}


def provider_error(code: str | None) -> MessagingProviderError | None:
    """Map a provider error string to its typed error; empty means no error."""
    if not code:
        return None
    error_type = _PROVIDER_ERRORS.get(code)
    if error_type is None:
        return UnknownProviderError(code)
    return error_type()


# Not implemented


class FeatureNotImplementedError(FirebaseError, NotImplementedError):
    default_code = "NOT_IMPLEMENTED"

    def __init__(self, feature: str) -> None:
        super().__init__(f"firebase: {feature} is not implemented", details={"feature": feature})


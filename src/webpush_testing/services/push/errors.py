"""Error kinds raised by the mock push service.

Every failure of a push operation is a :class:`PushError`.  The subclasses
carry a machine readable ``error_code`` and the HTTP status the transport
layer answers with, so the engine never has to know about HTTP.
"""
from __future__ import annotations

__all__ = [
    "PushError",
    "InvalidParameter",
    "InvalidBoolean",
    "InvalidVapidKey",
    "UnsupportedEncoding",
    "InvalidTTL",
    "MissingAuthorization",
    "InvalidAuthorizationHeader",
    "InvalidCryptoKey",
    "InvalidEncryptionHeader",
    "InvalidToken",
    "DecryptionFailed",
    "ClientNotSubscribed",
    "SubscriptionNotFound",
    "SubscriptionExpired",
]


class PushError(RuntimeError):
    """Base class for every error surfaced by the push engine."""

    error_code = "push_error"
    status_code = 400
    default_message = "Push request failed"

    def __init__(self, message: str | None = None, *, error_code: str | None = None) -> None:
        super().__init__(message or self.default_message)
        if error_code:
            self.error_code = error_code

    @property
    def message(self) -> str:
        return str(self)

    def as_dict(self) -> dict[str, str]:
        return {"code": self.error_code, "message": self.message}


# subscription input


class InvalidParameter(PushError):
    error_code = "invalid_parameter"
    default_message = "Invalid subscription parameter"


class InvalidBoolean(InvalidParameter):
    error_code = "invalid_boolean"
    default_message = "Parameter is not of type boolean"


class InvalidVapidKey(PushError):
    error_code = "invalid_vapid_key"
    default_message = "Parameter applicationServerKey does not seem to be a valid VAPID key."


# notification validation


class UnsupportedEncoding(PushError):
    error_code = "unsupported_encoding"
    status_code = 415
    default_message = "Unsupported encoding"


class InvalidTTL(PushError):
    error_code = "invalid_ttl"
    default_message = "TTL header is invalid"


class MissingAuthorization(PushError):
    error_code = "missing_authorization"
    default_message = "Missing or invalid authorization header"


class InvalidAuthorizationHeader(PushError):
    error_code = "invalid_authorization_header"
    default_message = "Invalid Authorization header sent"


class InvalidCryptoKey(PushError):
    error_code = "invalid_crypto_key"
    default_message = "Invalid Crypto-Key header sent"


class InvalidEncryptionHeader(PushError):
    error_code = "invalid_encryption_header"
    default_message = "Invalid Encryption header sent"


class InvalidToken(PushError):
    error_code = "invalid_token"
    default_message = "Invalid authentication token supplied"


class DecryptionFailed(PushError):
    error_code = "decryption_failed"
    default_message = "Unable to decrypt notification payload"


# lookup / lifecycle


class ClientNotSubscribed(PushError):
    error_code = "client_not_subscribed"
    default_message = "Client not subscribed"


class SubscriptionNotFound(PushError):
    error_code = "subscription_not_found"
    status_code = 404
    default_message = "Subscription with specified client hash does not exist"


class SubscriptionExpired(PushError):
    error_code = "subscription_expired"
    status_code = 410
    default_message = "Subscription expired"

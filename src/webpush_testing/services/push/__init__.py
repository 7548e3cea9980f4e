"""In-memory mock of a browser push service: subscriptions, notification
validation and decryption, and the per-subscriber message log."""
from .engine import NotificationEngine
from .errors import (
    ClientNotSubscribed,
    DecryptionFailed,
    InvalidAuthorizationHeader,
    InvalidBoolean,
    InvalidCryptoKey,
    InvalidEncryptionHeader,
    InvalidParameter,
    InvalidToken,
    InvalidTTL,
    InvalidVapidKey,
    MissingAuthorization,
    PushError,
    SubscriptionExpired,
    SubscriptionNotFound,
    UnsupportedEncoding,
)
from .messages import MessageLog
from .models import NotificationHeaders, Subscription
from .registry import SubscriptionRegistry

__all__ = [
    "NotificationEngine",
    "MessageLog",
    "NotificationHeaders",
    "Subscription",
    "SubscriptionRegistry",
    "PushError",
    "ClientNotSubscribed",
    "DecryptionFailed",
    "InvalidAuthorizationHeader",
    "InvalidBoolean",
    "InvalidCryptoKey",
    "InvalidEncryptionHeader",
    "InvalidParameter",
    "InvalidToken",
    "InvalidTTL",
    "InvalidVapidKey",
    "MissingAuthorization",
    "SubscriptionExpired",
    "SubscriptionNotFound",
    "UnsupportedEncoding",
]

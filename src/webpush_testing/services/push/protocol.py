"""Parsing and validation of Web Push notification headers.

All functions here are pure: they look at header values (and, where noted, a
subscription) and either return the parsed fields or raise the matching
:mod:`~webpush_testing.services.push.errors` kind.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple

from ..crypto.encoding import b64url_decode
from .errors import (
    InvalidAuthorizationHeader,
    InvalidCryptoKey,
    InvalidEncryptionHeader,
    InvalidTTL,
    MissingAuthorization,
    UnsupportedEncoding,
)
from .models import SUPPORTED_ENCODINGS, NotificationHeaders, Subscription

__all__ = [
    "WEBPUSH_AUTH_SCHEME",
    "VAPID_AUTH_SCHEME",
    "validate_headers",
    "parse_ttl",
    "parse_crypto_key_field",
    "parse_webpush_authorization_field",
    "parse_vapid_authorization_field",
    "parse_encryption_field",
    "match_application_server_key",
]

WEBPUSH_AUTH_SCHEME = "WebPush"
VAPID_AUTH_SCHEME = "vapid"

UNCOMPRESSED_POINT_LENGTH = 65
UNCOMPRESSED_POINT_PREFIX = 0x04
SALT_LENGTH = 16


def _parameters(fields: Iterable[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for raw in fields:
        name, sep, value = raw.strip().partition("=")
        if not name:
            continue
        params[name.strip()] = value.strip() if sep else ""
    return params


def parse_ttl(value: Any) -> int:
    if value is None or isinstance(value, bool):
        raise InvalidTTL(f"TTL header is invalid: {value}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidTTL(f"TTL header is invalid: {value}") from None


def validate_headers(subscription: Subscription, headers: NotificationHeaders) -> int:
    """Check encoding, TTL and the presence of Authorization; returns the TTL."""
    if headers.encoding not in SUPPORTED_ENCODINGS:
        raise UnsupportedEncoding()
    ttl = parse_ttl(headers.ttl)
    if subscription.vapid and not headers.authorization:
        raise MissingAuthorization()
    return ttl


def parse_crypto_key_field(raw: Optional[str], vapid_mode: bool) -> Tuple[str, Optional[str]]:
    params = _parameters((raw or "").split(";"))
    if "dh" not in params or (vapid_mode and "p256ecdsa" not in params):
        raise InvalidCryptoKey()
    try:
        dh_bytes = b64url_decode(params["dh"])
    except ValueError as exc:
        raise InvalidCryptoKey() from exc
    if len(dh_bytes) != UNCOMPRESSED_POINT_LENGTH or dh_bytes[0] != UNCOMPRESSED_POINT_PREFIX:
        raise InvalidCryptoKey()
    return params["dh"], params.get("p256ecdsa")


def parse_webpush_authorization_field(raw: Optional[str]) -> str:
    """``WebPush <token>``, used with the aesgcm encoding."""
    parts = (raw or "").split(" ")
    if len(parts) != 2 or parts[0] != WEBPUSH_AUTH_SCHEME or not parts[1]:
        raise InvalidAuthorizationHeader()
    return parts[1]


def parse_vapid_authorization_field(raw: Optional[str]) -> Tuple[str, str]:
    """``vapid t=<token>, k=<key>``, used with the aes128gcm encoding."""
    raw = raw or ""
    if not raw.startswith(VAPID_AUTH_SCHEME):
        raise InvalidAuthorizationHeader()
    params = _parameters(raw[len(VAPID_AUTH_SCHEME):].split(","))
    token, key = params.get("t"), params.get("k")
    if not token or not key:
        raise InvalidAuthorizationHeader()
    return token, key


def parse_encryption_field(raw: Optional[str]) -> bytes:
    params = _parameters((raw or "").split(";"))
    salt = params.get("salt")
    if not salt:
        raise InvalidEncryptionHeader()
    try:
        salt_bytes = b64url_decode(salt)
    except ValueError as exc:
        raise InvalidEncryptionHeader() from exc
    if len(salt_bytes) != SALT_LENGTH:
        raise InvalidEncryptionHeader(f"Encryption salt must be {SALT_LENGTH} bytes")
    return salt_bytes


def match_application_server_key(parsed_key: Optional[str], stored_key: Optional[str], crypto) -> None:
    try:
        parsed = b64url_decode(parsed_key or "")
        stored = b64url_decode(stored_key or "")
    except ValueError as exc:
        raise InvalidCryptoKey() from exc
    if not parsed or not crypto.constant_time_equals(parsed, stored):
        raise InvalidCryptoKey()

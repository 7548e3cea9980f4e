from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from cryptography.hazmat.primitives.asymmetric import ec

__all__ = [
    "ENCODING_AESGCM",
    "ENCODING_AES128GCM",
    "SUPPORTED_ENCODINGS",
    "AUTH_SECRET_LENGTH",
    "Subscription",
    "NotificationHeaders",
    "DecryptionParams",
]

ENCODING_AESGCM = "aesgcm"
ENCODING_AES128GCM = "aes128gcm"
SUPPORTED_ENCODINGS = (ENCODING_AESGCM, ENCODING_AES128GCM)

AUTH_SECRET_LENGTH = 16


@dataclass(slots=True)
class Subscription:
    """A mock browser push subscription."""

    client_hash: str
    key_pair: ec.EllipticCurvePrivateKey
    public_key: bytes
    auth_secret: bytes
    application_server_key: Optional[str] = None
    expired: bool = False

    @property
    def vapid(self) -> bool:
        return self.application_server_key is not None

    def expire(self) -> None:
        self.expired = True


@dataclass(frozen=True, slots=True)
class NotificationHeaders:
    encoding: Optional[str] = None
    ttl: Any = None
    authorization: Optional[str] = None
    encryption: Optional[str] = None
    crypto_key: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NotificationHeaders":
        """Build from a plain mapping; ``cryptoKey`` and ``crypto_key`` are both accepted."""
        crypto_key = data.get("crypto_key", data.get("cryptoKey"))
        return cls(
            encoding=data.get("encoding"),
            ttl=data.get("ttl"),
            authorization=data.get("authorization"),
            encryption=data.get("encryption"),
            crypto_key=crypto_key,
        )


@dataclass(slots=True)
class DecryptionParams:
    version: str
    private_key: ec.EllipticCurvePrivateKey
    auth_secret: bytes
    dh: Optional[bytes] = None
    salt: Optional[bytes] = None

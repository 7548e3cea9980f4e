from __future__ import annotations

import os
import time
from typing import Any, Dict, Tuple

import http_ece
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from webpush_testing.services.crypto import b64url, b64url_decode, public_key_bytes
from webpush_testing.services.push import NotificationEngine


@pytest.fixture
def anyio_backend():
    return "asyncio"


class PushSender:
    """Application server side of a push: VAPID key, tokens and encrypted bodies."""

    def __init__(self) -> None:
        self.vapid_key = ec.generate_private_key(ec.SECP256R1())

    @property
    def application_server_key(self) -> str:
        return b64url(public_key_bytes(self.vapid_key))

    def token(self, *, expires_in: int = 3600, key: ec.EllipticCurvePrivateKey | None = None) -> str:
        claims = {
            "aud": "http://localhost:8090",
            "exp": int(time.time()) + expires_in,
            "sub": "mailto:tests@example.com",
        }
        return jwt.encode(claims, key or self.vapid_key, algorithm="ES256")

    def encrypt(self, subscription: Dict[str, Any], text: str, encoding: str) -> Tuple[bytes, str, str]:
        """Returns ``(body, sender_public_key, salt)``, keys base64url encoded."""
        sender = ec.generate_private_key(ec.SECP256R1())
        salt = os.urandom(16)
        body = http_ece.encrypt(
            text.encode("utf-8"),
            salt=salt,
            private_key=sender,
            dh=b64url_decode(subscription["keys"]["p256dh"]),
            auth_secret=b64url_decode(subscription["keys"]["auth"]),
            version=encoding,
        )
        return body, b64url(public_key_bytes(sender)), b64url(salt)

    def aesgcm(self, subscription: Dict[str, Any], text: str, *, vapid: bool = True) -> Tuple[Dict[str, Any], bytes]:
        body, dh, salt = self.encrypt(subscription, text, "aesgcm")
        headers: Dict[str, Any] = {
            "encoding": "aesgcm",
            "ttl": "60",
            "encryption": f"salt={salt}",
            "cryptoKey": f"dh={dh}",
        }
        if vapid:
            headers["cryptoKey"] += f";p256ecdsa={self.application_server_key}"
            headers["authorization"] = f"WebPush {self.token()}"
        return headers, body

    def aes128gcm(self, subscription: Dict[str, Any], text: str, *, vapid: bool = True) -> Tuple[Dict[str, Any], bytes]:
        body, _, _ = self.encrypt(subscription, text, "aes128gcm")
        headers: Dict[str, Any] = {"encoding": "aes128gcm", "ttl": "60"}
        if vapid:
            headers["authorization"] = f"vapid t={self.token()}, k={self.application_server_key}"
        return headers, body


@pytest.fixture
def sender() -> PushSender:
    return PushSender()


@pytest.fixture
def engine() -> NotificationEngine:
    return NotificationEngine(notify_url="http://localhost:8090/notify/")

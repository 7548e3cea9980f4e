"""Cryptographic operations used by the push engine.

The engine never touches primitives directly; it goes through
:class:`CryptoCapability`, which wraps ``cryptography`` for P-256 keys,
PyJWT for ES256 VAPID tokens and ``http_ece`` for the two Web Push content
encodings.  Tests may substitute any object exposing the same methods.
"""
from __future__ import annotations

import hmac
import os
from typing import TYPE_CHECKING

import http_ece
import jwt
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

if TYPE_CHECKING:
    from ..push.models import DecryptionParams

__all__ = ["CryptoCapability", "CryptoError", "public_key_bytes"]

_CURVE = ec.SECP256R1()


class CryptoError(RuntimeError):
    """Raised when a cryptographic operation rejects its input."""


def public_key_bytes(key: ec.EllipticCurvePublicKey | ec.EllipticCurvePrivateKey) -> bytes:
    """Uncompressed X9.62 encoding (65 bytes, leading ``0x04``)."""
    if isinstance(key, ec.EllipticCurvePrivateKey):
        key = key.public_key()
    return key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )


class CryptoCapability:
    token_algorithms: tuple[str, ...] = ("ES256",)

    def generate_key_pair(self) -> ec.EllipticCurvePrivateKey:
        return ec.generate_private_key(_CURVE)

    def random_bytes(self, length: int) -> bytes:
        return os.urandom(length)

    def constant_time_equals(self, left: bytes, right: bytes) -> bool:
        # compare_digest keeps walking the right operand when lengths differ
        return hmac.compare_digest(left, right)

    def load_public_key(self, raw: bytes) -> ec.EllipticCurvePublicKey:
        try:
            return ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, raw)
        except (ValueError, TypeError) as exc:
            raise CryptoError("not a valid P-256 public key") from exc

    def compute_shared_secret(self, private_key: ec.EllipticCurvePrivateKey, peer_public: bytes) -> bytes:
        peer = self.load_public_key(peer_public)
        try:
            return private_key.exchange(ec.ECDH(), peer)
        except ValueError as exc:
            raise CryptoError("ECDH key agreement failed") from exc

    def verify_token(self, token: str, public_key: bytes) -> dict:
        """Verify an ES256 compact token against a raw P-256 public key.

        Expiry (``exp``) is enforced; the audience is not, the mock endpoint
        has no stable origin to compare it with.
        """
        key = self.load_public_key(public_key)
        try:
            return jwt.decode(
                token,
                key=key,
                algorithms=list(self.token_algorithms),
                options={"verify_aud": False},
            )
        except jwt.PyJWTError as exc:
            raise CryptoError(f"token verification failed: {exc}") from exc

    def decrypt(self, ciphertext: bytes, params: DecryptionParams) -> bytes:
        kwargs: dict = {
            "version": params.version,
            "private_key": params.private_key,
            "auth_secret": params.auth_secret,
        }
        if params.dh is not None:
            kwargs["dh"] = params.dh
        if params.salt is not None:
            kwargs["salt"] = params.salt
        try:
            return http_ece.decrypt(ciphertext, **kwargs)
        except (http_ece.ECEException, InvalidTag, ValueError, TypeError) as exc:
            raise CryptoError(f"content decryption failed: {exc!r}") from exc

from .capability import CryptoCapability, CryptoError, public_key_bytes
from .encoding import b64url, b64url_decode

__all__ = ["CryptoCapability", "CryptoError", "public_key_bytes", "b64url", "b64url_decode"]

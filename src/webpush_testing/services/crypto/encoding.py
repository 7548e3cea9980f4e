from __future__ import annotations

import base64
import binascii

__all__ = ["b64url", "b64url_decode"]


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(data: str | bytes) -> bytes:
    """Decode unpadded base64url (RFC 7515 appendix C).

    Standard base64 input is accepted as well, browsers and push libraries
    are not consistent about which alphabet they emit.  Raises ``ValueError``
    on malformed input.
    """
    if isinstance(data, bytes):
        data = data.decode("ascii", errors="strict")
    text = data.strip().replace("+", "-").replace("/", "_").rstrip("=")
    padding = "=" * ((4 - len(text) % 4) % 4)
    try:
        return base64.urlsafe_b64decode(text + padding)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64url value: {data!r}") from exc

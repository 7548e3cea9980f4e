"""Notification engine of the mock push service.

A notification travels through::

    Received -> HeaderValidated -> CryptoKeyValidated -> TokenValidated
             -> Decrypted -> Stored

Any failed check ends it in a rejected state by raising a
:class:`~webpush_testing.services.push.errors.PushError`.  An expired
subscription is rejected right after lookup, before any header is looked at.
The message log is only written once decryption succeeded, so failed
notifications leave no trace in the state.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import anyio

from ..crypto.capability import CryptoCapability, CryptoError
from ..crypto.encoding import b64url_decode
from . import protocol
from .errors import ClientNotSubscribed, DecryptionFailed, InvalidCryptoKey, InvalidToken, PushError, SubscriptionExpired
from .messages import MessageLog
from .models import ENCODING_AES128GCM, ENCODING_AESGCM, DecryptionParams, NotificationHeaders, Subscription
from .registry import SubscriptionRegistry

__all__ = ["NotificationEngine"]

_log = logging.getLogger("webpush_testing.push.engine")


class NotificationEngine:
    def __init__(
        self,
        *,
        notify_url: str = "",
        crypto: Optional[CryptoCapability] = None,
        registry: Optional[SubscriptionRegistry] = None,
        messages: Optional[MessageLog] = None,
    ) -> None:
        self.crypto = crypto or CryptoCapability()
        self.registry = registry or SubscriptionRegistry(self.crypto, notify_url=notify_url)
        self.messages = messages or MessageLog()

    @property
    def notify_url(self) -> str:
        return self.registry.notify_url

    @notify_url.setter
    def notify_url(self, value: str) -> None:
        self.registry.notify_url = value

    # subscriptions

    async def subscribe(self, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return await self.registry.create(options)

    def expire_subscription(self, client_hash: str) -> None:
        self.registry.expire(client_hash)

    # notifications

    async def handle_notification(
        self,
        client_hash: str,
        headers: NotificationHeaders | Mapping[str, Any],
        body: bytes,
    ) -> None:
        if not isinstance(headers, NotificationHeaders):
            headers = NotificationHeaders.from_mapping(headers)
        try:
            text = await self._process(client_hash, headers, body)
        except PushError as exc:
            _log.info(
                "notification rejected: %s",
                exc,
                extra={"client_hash": client_hash, "error_code": exc.error_code},
            )
            raise
        count = await self.messages.append(client_hash, text)
        _log.info(
            "notification stored",
            extra={"client_hash": client_hash, "encoding": headers.encoding, "messages": count},
        )

    async def _process(self, client_hash: str, headers: NotificationHeaders, body: bytes) -> str:
        subscription = self.registry.get(client_hash)
        if subscription.expired:
            raise SubscriptionExpired()

        protocol.validate_headers(subscription, headers)

        if headers.encoding == ENCODING_AESGCM:
            params = await self._aesgcm_params(subscription, headers)
        else:
            params = await self._aes128gcm_params(subscription, headers)

        try:
            plaintext = await anyio.to_thread.run_sync(self.crypto.decrypt, bytes(body or b""), params)
        except CryptoError as exc:
            raise DecryptionFailed() from exc
        return plaintext.decode("utf-8", errors="replace")

    async def _aesgcm_params(self, subscription: Subscription, headers: NotificationHeaders) -> DecryptionParams:
        token = None
        if subscription.vapid:
            token = protocol.parse_webpush_authorization_field(headers.authorization)

        dh, p256ecdsa = protocol.parse_crypto_key_field(headers.crypto_key, subscription.vapid)

        if token is not None:
            await self._verify_token(subscription, token)
            protocol.match_application_server_key(p256ecdsa, subscription.application_server_key, self.crypto)

        dh_bytes = b64url_decode(dh)
        try:
            await anyio.to_thread.run_sync(self.crypto.compute_shared_secret, subscription.key_pair, dh_bytes)
        except CryptoError as exc:
            raise InvalidCryptoKey() from exc

        return DecryptionParams(
            version=ENCODING_AESGCM,
            private_key=subscription.key_pair,
            auth_secret=subscription.auth_secret,
            dh=dh_bytes,
            salt=protocol.parse_encryption_field(headers.encryption),
        )

    async def _aes128gcm_params(self, subscription: Subscription, headers: NotificationHeaders) -> DecryptionParams:
        # without an application server key there is nothing to authenticate
        if subscription.vapid:
            token, key = protocol.parse_vapid_authorization_field(headers.authorization)
            protocol.match_application_server_key(key, subscription.application_server_key, self.crypto)
            await self._verify_token(subscription, token)

        return DecryptionParams(
            version=ENCODING_AES128GCM,
            private_key=subscription.key_pair,
            auth_secret=subscription.auth_secret,
        )

    async def _verify_token(self, subscription: Subscription, token: str) -> None:
        try:
            server_key = b64url_decode(subscription.application_server_key or "")
            await anyio.to_thread.run_sync(self.crypto.verify_token, token, server_key)
        except (CryptoError, ValueError) as exc:
            raise InvalidToken() from exc

    # reader

    def get_notifications(self, request: Mapping[str, Any] | None) -> dict[str, list[str]]:
        client_hash = (request or {}).get("clientHash")
        if not isinstance(client_hash, str) or client_hash not in self.registry:
            raise ClientNotSubscribed()
        return {"messages": self.messages.get_messages(client_hash)}

"""In-memory store of mock push subscriptions."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping

import anyio

from ..crypto.capability import CryptoCapability, CryptoError, public_key_bytes
from ..crypto.encoding import b64url, b64url_decode
from .errors import ClientNotSubscribed, InvalidBoolean, InvalidParameter, InvalidVapidKey, SubscriptionNotFound
from .models import AUTH_SECRET_LENGTH, Subscription

__all__ = ["SubscriptionRegistry"]

_log = logging.getLogger("webpush_testing.push.registry")

CLIENT_HASH_BYTES = 32


def _validate_user_visible_only(value: Any, crypto: CryptoCapability) -> None:
    if value not in ("true", "false"):
        raise InvalidBoolean(f"Parameter userVisibleOnly is not of type boolean: {value}")


def _validate_application_server_key(value: Any, crypto: CryptoCapability) -> None:
    if not isinstance(value, str):
        raise InvalidVapidKey()
    try:
        crypto.load_public_key(b64url_decode(value))
    except (ValueError, CryptoError) as exc:
        raise InvalidVapidKey() from exc


_OPTION_VALIDATORS: Dict[str, Callable[[Any, CryptoCapability], None]] = {
    "userVisibleOnly": _validate_user_visible_only,
    "applicationServerKey": _validate_application_server_key,
}


class SubscriptionRegistry:
    def __init__(self, crypto: CryptoCapability, *, notify_url: str = "") -> None:
        self._crypto = crypto
        self.notify_url = notify_url
        self._subscriptions: dict[str, Subscription] = {}

    def __contains__(self, client_hash: object) -> bool:
        return client_hash in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)

    def validate_options(self, options: Mapping[str, Any]) -> None:
        for name, value in options.items():
            validator = _OPTION_VALIDATORS.get(name)
            if validator is None:
                raise InvalidParameter(f"Invalid property {name} sent.")
            validator(value, self._crypto)

    async def create(self, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        options = options or {}
        # key validation loads a point, keep it off the event loop
        await anyio.to_thread.run_sync(self.validate_options, options)

        key_pair = await anyio.to_thread.run_sync(self._crypto.generate_key_pair)
        client_hash = self._new_client_hash()
        subscription = Subscription(
            client_hash=client_hash,
            key_pair=key_pair,
            public_key=public_key_bytes(key_pair),
            auth_secret=self._crypto.random_bytes(AUTH_SECRET_LENGTH),
            application_server_key=options.get("applicationServerKey"),
        )
        self._subscriptions[client_hash] = subscription
        _log.info("subscription created", extra={"client_hash": client_hash, "vapid": subscription.vapid})
        return {
            "endpoint": f"{self.notify_url}{client_hash}",
            "keys": {
                "p256dh": b64url(subscription.public_key),
                "auth": b64url(subscription.auth_secret),
            },
            "clientHash": client_hash,
        }

    def _new_client_hash(self) -> str:
        while True:
            candidate = self._crypto.random_bytes(CLIENT_HASH_BYTES).hex()
            if candidate not in self._subscriptions:
                return candidate

    def get(self, client_hash: str) -> Subscription:
        try:
            return self._subscriptions[client_hash]
        except (KeyError, TypeError):
            raise ClientNotSubscribed() from None

    def expire(self, client_hash: str) -> None:
        subscription = self._subscriptions.get(client_hash)
        if subscription is None:
            raise SubscriptionNotFound()
        subscription.expire()
        _log.info("subscription expired", extra={"client_hash": client_hash})

    def is_expired(self, client_hash: str) -> bool:
        subscription = self._subscriptions.get(client_hash)
        return subscription.expired if subscription is not None else False

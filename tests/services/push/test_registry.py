from __future__ import annotations

import pytest

from webpush_testing.services.crypto import CryptoCapability, b64url_decode
from webpush_testing.services.push import (
    ClientNotSubscribed,
    InvalidBoolean,
    InvalidParameter,
    InvalidVapidKey,
    SubscriptionNotFound,
    SubscriptionRegistry,
)


@pytest.fixture
def registry() -> SubscriptionRegistry:
    return SubscriptionRegistry(CryptoCapability(), notify_url="http://localhost:8090/notify/")


@pytest.mark.anyio
async def test_subscribe_with_empty_options_returns_keys(registry):
    data = await registry.create({})

    auth = b64url_decode(data["keys"]["auth"])
    p256dh = b64url_decode(data["keys"]["p256dh"])
    assert len(auth) == 16
    assert len(p256dh) == 65
    assert p256dh[0] == 0x04
    assert len(data["clientHash"]) == 64
    assert data["endpoint"] == "http://localhost:8090/notify/" + data["clientHash"]


@pytest.mark.anyio
async def test_client_hashes_are_distinct(registry):
    hashes = {(await registry.create({}))["clientHash"] for _ in range(20)}
    assert len(hashes) == 20
    assert len(registry) == 20


@pytest.mark.anyio
@pytest.mark.parametrize("value", ["true", "false"])
async def test_user_visible_only_accepts_string_booleans(registry, value):
    data = await registry.create({"userVisibleOnly": value})
    assert not registry.get(data["clientHash"]).vapid


@pytest.mark.anyio
async def test_unknown_option_is_rejected_by_name(registry):
    with pytest.raises(InvalidParameter, match="random"):
        await registry.create({"random": "x"})
    assert len(registry) == 0


@pytest.mark.anyio
@pytest.mark.parametrize("value", ["maybe", True, "", "TRUE"])
async def test_user_visible_only_must_be_boolean_string(registry, value):
    with pytest.raises(InvalidBoolean, match="userVisibleOnly"):
        await registry.create({"userVisibleOnly": value})


@pytest.mark.anyio
async def test_invalid_boolean_is_an_invalid_parameter(registry):
    with pytest.raises(InvalidParameter):
        await registry.create({"userVisibleOnly": "maybe"})


@pytest.mark.anyio
@pytest.mark.parametrize("value", ["not-a-key", "", "BAAA", None])
async def test_invalid_application_server_key(registry, value):
    with pytest.raises(InvalidVapidKey):
        await registry.create({"applicationServerKey": value})


@pytest.mark.anyio
async def test_genuine_application_server_key_enables_vapid(registry, sender):
    data = await registry.create({"userVisibleOnly": "true", "applicationServerKey": sender.application_server_key})

    subscription = registry.get(data["clientHash"])
    assert subscription.vapid
    assert subscription.application_server_key == sender.application_server_key


@pytest.mark.anyio
async def test_expire_is_idempotent(registry):
    client_hash = (await registry.create({}))["clientHash"]
    assert registry.is_expired(client_hash) is False

    registry.expire(client_hash)
    registry.expire(client_hash)

    assert registry.is_expired(client_hash) is True


def test_expire_unknown_subscription(registry):
    with pytest.raises(SubscriptionNotFound):
        registry.expire("unknown")


def test_lookup_unknown_subscription(registry):
    assert registry.is_expired("unknown") is False
    assert "unknown" not in registry
    with pytest.raises(ClientNotSubscribed):
        registry.get("unknown")

from __future__ import annotations

import json

import pytest

from chat_relay.domain.entities.profile import Profile
from chat_relay.domain.value_objects.enums import ConnectionState
from chat_relay.infrastructure.ws.protocol import decode_event
from chat_relay.infrastructure.ws.registry import ConnectionRegistry
from chat_relay.services.event_router import EventRouter
from tests.conftest import FakeChatStore, FakeConnection, chat_payload, profile_payload


@pytest.fixture
def room():
    store = FakeChatStore()
    registry = ConnectionRegistry()
    peers = [FakeConnection(name) for name in ("a", "b", "c")]
    for peer in peers:
        registry.register(peer)
    return EventRouter(store, registry), store, peers


def _event(payload):
    return decode_event(json.dumps(payload))


@pytest.mark.asyncio
async def test_chat_is_stored_and_relayed_to_everyone(room):
    router, store, (a, b, c) = room

    await router.route(a, _event(chat_payload()))

    assert [(m.id, m.sender, m.message, m.timestamp) for m in store.messages] == [
        (1, "alice", "hi", "t1")
    ]
    for peer in (a, b, c):
        assert peer.received == [chat_payload()]


@pytest.mark.asyncio
async def test_chat_not_relayed_when_store_fails(room):
    router, store, (a, b, c) = room
    store.fail_writes = True

    await router.route(a, _event(chat_payload()))

    assert b.received == [] and c.received == []
    assert a.received == [
        {"type": "error", "code": "store_unavailable", "event": "chat", "detail": "disk full"}
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("tag", ["typing", "stop_typing"])
async def test_typing_skips_the_sender(room, tag):
    router, store, (a, b, c) = room
    payload = {"type": tag, "sender": "alice"}

    await router.route(a, _event(payload))

    assert a.received == []
    assert b.received == [payload] and c.received == [payload]
    assert store.messages == []


@pytest.mark.asyncio
async def test_profile_is_upserted_and_announced(room):
    router, store, (a, b, c) = room

    await router.route(b, _event(profile_payload()))

    assert store.profiles == {"u1": Profile("u1", "Bob", "a.png", "bobby")}
    expected = {
        "type": "profile_update",
        "profile": {"id": "u1", "name": "Bob", "avatar": "a.png", "pseudo": "bobby"},
    }
    for peer in (a, b, c):
        assert peer.received == [expected]


@pytest.mark.asyncio
async def test_profile_not_announced_when_store_fails(room):
    router, store, (a, b, c) = room
    store.fail_writes = True

    await router.route(b, _event(profile_payload()))

    assert a.received == [] and c.received == []
    assert [m["code"] for m in b.received] == ["store_unavailable"]
    assert b.received[0]["event"] == "profile"


@pytest.mark.asyncio
async def test_unknown_event_is_ignored(room):
    router, store, peers = room

    await router.route(peers[0], _event({"type": "ping"}))

    assert all(peer.received == [] for peer in peers)
    assert store.messages == [] and store.profiles == {}


@pytest.mark.asyncio
async def test_failure_report_to_departed_origin_is_silent(room):
    router, store, (a, b, c) = room
    store.fail_writes = True
    a.state = ConnectionState.CLOSED

    await router.route(a, _event(chat_payload()))

    assert a.received == [] and b.received == []


@pytest.mark.asyncio
async def test_chat_from_departed_connection_still_reaches_others(room):
    router, store, (a, b, c) = room
    a.state = ConnectionState.CLOSING

    await router.route(a, _event(chat_payload()))

    assert len(store.messages) == 1
    assert a.received == []
    assert b.received == [chat_payload()] and c.received == [chat_payload()]

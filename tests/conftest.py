"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from chat_relay.app import create_app
from chat_relay.application.exceptions import DeliveryError, StoreError
from chat_relay.config import Settings
from chat_relay.domain.entities.message import ChatMessage
from chat_relay.domain.entities.profile import Profile
from chat_relay.domain.value_objects.enums import ConnectionState
from chat_relay.domain.value_objects.ids import MessageId


def chat_payload(
    *,
    sender: str = "alice",
    message: str = "hi",
    timestamp: str = "t1",
) -> dict[str, Any]:
    return {"type": "chat", "sender": sender, "message": message, "timestamp": timestamp}


def profile_payload(
    *,
    profile_id: str = "u1",
    name: str = "Bob",
    avatar: str = "a.png",
    pseudo: str = "bobby",
) -> dict[str, Any]:
    return {"type": "profile", "id": profile_id, "name": name, "avatar": avatar, "pseudo": pseudo}


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@dataclass
class FakeChatStore:
    """In-memory ChatStore for unit tests."""
    messages: list[ChatMessage] = field(default_factory=list)
    profiles: dict[str, Profile] = field(default_factory=dict)
    fail_writes: bool = False
    fail_reads: bool = False

    async def append_message(self, sender: str, message: str, timestamp: str) -> MessageId:
        if self.fail_writes:
            raise StoreError("disk full")
        message_id = MessageId(len(self.messages) + 1)
        self.messages.append(ChatMessage(message_id, sender, message, timestamp))
        return message_id

    async def list_messages(self) -> list[ChatMessage]:
        if self.fail_reads:
            raise StoreError("database is locked")
        return list(self.messages)

    async def upsert_profile(self, profile: Profile) -> None:
        if self.fail_writes:
            raise StoreError("disk full")
        self.profiles[profile.id] = profile

    async def list_profiles(self) -> dict[str, Profile]:
        if self.fail_reads:
            raise StoreError("database is locked")
        return dict(self.profiles)

    async def ping(self) -> None:
        if self.fail_reads:
            raise StoreError("database is locked")


@dataclass
class FakeSocket:
    """Stands in for a server-side starlette WebSocket."""
    sent: list[str] = field(default_factory=list)
    close_codes: list[int] = field(default_factory=list)
    inbox: asyncio.Queue = field(default_factory=asyncio.Queue)
    send_delay: float = 0.0
    fail_sends: bool = False
    accepted: bool = False

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, data: str) -> None:
        if self.fail_sends:
            raise RuntimeError("peer went away")
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.close_codes.append(code)

    async def receive(self) -> dict[str, Any]:
        return await self.inbox.get()

    def feed_text(self, text: str) -> None:
        self.inbox.put_nowait({"type": "websocket.receive", "text": text})

    def feed_json(self, payload: dict[str, Any]) -> None:
        self.feed_text(json.dumps(payload))

    def feed_disconnect(self, code: int = 1000) -> None:
        self.inbox.put_nowait({"type": "websocket.disconnect", "code": code})

    def sent_json(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self.sent]


class FakeConnection:
    """Records what the registry queues for it instead of sending anything."""

    def __init__(
        self,
        name: str,
        *,
        capacity: int | None = None,
        on_enqueue: Callable[[], None] | None = None,
    ) -> None:
        self.id = name
        self.state = ConnectionState.OPEN
        self.received: list[dict[str, Any]] = []
        self._capacity = capacity
        self._on_enqueue = on_enqueue

    def __repr__(self) -> str:
        return f"FakeConnection({self.id!r})"

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN

    def enqueue(self, raw: str) -> None:
        if not self.is_open:
            raise DeliveryError(f"{self.id} is {self.state.value}")
        if self._capacity is not None and len(self.received) >= self._capacity:
            raise DeliveryError(f"outbound queue full for {self.id}")
        self.received.append(json.loads(raw))
        if self._on_enqueue is not None:
            self._on_enqueue()

    def mark_closing(self) -> None:
        if self.state == ConnectionState.OPEN:
            self.state = ConnectionState.CLOSING


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'data' / 'chat.db'}",
        STATIC_DIR=str(tmp_path / "public"),
    )


@pytest.fixture
def client(app_settings):
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client

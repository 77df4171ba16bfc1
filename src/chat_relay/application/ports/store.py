from __future__ import annotations

from typing import Protocol

from chat_relay.domain.entities.message import ChatMessage
from chat_relay.domain.entities.profile import Profile
from chat_relay.domain.value_objects.ids import MessageId


class ChatStore(Protocol):
    """Durable message log plus profile directory.

    Every write is committed before the coroutine returns. Failures surface
    as ``StoreError``.
    """

    async def append_message(self, sender: str, message: str, timestamp: str) -> MessageId: ...

    async def list_messages(self) -> list[ChatMessage]: ...

    async def upsert_profile(self, profile: Profile) -> None: ...

    async def list_profiles(self) -> dict[str, Profile]: ...

    async def ping(self) -> None: ...

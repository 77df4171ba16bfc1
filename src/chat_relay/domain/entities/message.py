from __future__ import annotations

from dataclasses import dataclass

from chat_relay.domain.value_objects.ids import MessageId


@dataclass(frozen=True, slots=True)
class ChatMessage:
    id: MessageId
    sender: str | None
    message: str | None
    timestamp: str | None

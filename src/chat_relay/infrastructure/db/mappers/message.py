from __future__ import annotations

from chat_relay.domain.entities.message import ChatMessage
from chat_relay.domain.value_objects.ids import MessageId
from chat_relay.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> ChatMessage:
    return ChatMessage(
        id=MessageId(model.id),
        sender=model.sender,
        message=model.message,
        timestamp=model.timestamp,
    )

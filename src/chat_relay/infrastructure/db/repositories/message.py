from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_relay.domain.entities.message import ChatMessage
from chat_relay.domain.value_objects.ids import MessageId
from chat_relay.infrastructure.db.mappers import message as mapper
from chat_relay.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_messages(self) -> list[ChatMessage]:
        stmt = select(MessageModel).order_by(MessageModel.id.asc())
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, sender: str, message: str, timestamp: str) -> MessageId:
        """Insert a row and return the id the database assigned to it."""
        model = MessageModel(sender=sender, message=message, timestamp=timestamp)
        self._session.add(model)
        await self._session.flush()
        return MessageId(model.id)

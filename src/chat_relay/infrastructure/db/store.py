"""SQLAlchemy implementation of the persistent chat store."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from chat_relay.application.exceptions import StoreError
from chat_relay.domain.entities.message import ChatMessage
from chat_relay.domain.entities.profile import Profile
from chat_relay.domain.value_objects.ids import MessageId
from chat_relay.infrastructure.db import models  # noqa: F401  registers tables
from chat_relay.infrastructure.db.base import Base
from chat_relay.infrastructure.db.session import build_sessionmaker
from chat_relay.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)


class SqlAlchemyChatStore:
    """Implements application.ports.store.ChatStore.

    Each call runs in its own session and commits before returning. Writes
    are serialized by a lock so concurrent appends cannot race on id
    assignment and SQLite never sees two writers at once.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = build_sessionmaker(engine)
        self._write_lock = asyncio.Lock()

    async def init_schema(self) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise StoreError(f"schema creation failed: {exc}") from exc
        logger.info("Chat schema ready on %s", self._engine.url.render_as_string())

    async def close(self) -> None:
        await self._engine.dispose()

    async def ping(self) -> None:
        async with self._unit_of_work() as uow:
            await uow.ping()

    async def append_message(self, sender: str, message: str, timestamp: str) -> MessageId:
        async with self._write_lock:
            async with self._unit_of_work() as uow:
                message_id = await uow.messages_w.append(sender, message, timestamp)
                await uow.commit()
        logger.debug("Stored message id=%d from %s", message_id, sender)
        return message_id

    async def list_messages(self) -> list[ChatMessage]:
        async with self._unit_of_work() as uow:
            return await uow.messages.list_messages()

    async def upsert_profile(self, profile: Profile) -> None:
        async with self._write_lock:
            async with self._unit_of_work() as uow:
                await uow.profiles_w.upsert(profile)
                await uow.commit()
        logger.debug("Stored profile id=%s", profile.id)

    async def list_profiles(self) -> dict[str, Profile]:
        async with self._unit_of_work() as uow:
            return await uow.profiles.list_profiles()

    @asynccontextmanager
    async def _unit_of_work(self) -> AsyncIterator[SqlAlchemyUoW]:
        try:
            async with self._session_factory() as session:
                async with SqlAlchemyUoW(session) as uow:
                    yield uow
        except SQLAlchemyError as exc:
            logger.error("Store operation failed: %s", exc)
            raise StoreError(str(exc)) from exc

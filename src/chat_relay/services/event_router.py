"""Applies inbound events: persistence first, then fan-out."""
from __future__ import annotations

import logging

from chat_relay.application.exceptions import DeliveryError, StoreError
from chat_relay.application.ports.store import ChatStore
from chat_relay.domain.value_objects.enums import EventType
from chat_relay.infrastructure.ws.connection import Connection
from chat_relay.infrastructure.ws.protocol import (
    ChatEvent,
    ErrorEvent,
    InboundEvent,
    ProfileEvent,
    ProfileOut,
    ProfileUpdateEvent,
    TypingEvent,
)
from chat_relay.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class EventRouter:
    """Stateless between events; the only context is the originating connection.

    chat and profile go to every open connection, sender included. typing and
    stop_typing skip the sender. Anything else is ignored.
    """

    def __init__(self, store: ChatStore, registry: ConnectionRegistry) -> None:
        self._store = store
        self._registry = registry

    async def route(self, origin: Connection, event: InboundEvent) -> None:
        if isinstance(event, ChatEvent):
            await self._handle_chat(origin, event)
        elif isinstance(event, TypingEvent):
            self._handle_typing(origin, event)
        elif isinstance(event, ProfileEvent):
            await self._handle_profile(origin, event)
        else:
            logger.debug("Ignoring unknown event type %r from %s", event.type, origin.id)

    async def _handle_chat(self, origin: Connection, event: ChatEvent) -> None:
        try:
            message_id = await self._store.append_message(
                event.sender, event.message, event.timestamp,
            )
        except StoreError as exc:
            logger.warning("chat from %s not stored: %s", origin.id, exc.detail)
            self._report_failure(origin, EventType.CHAT, exc)
            return

        count = self._registry.broadcast(event.model_dump_json())
        logger.debug("chat id=%d relayed to %d connection(s)", message_id, count)

    def _handle_typing(self, origin: Connection, event: TypingEvent) -> None:
        self._registry.broadcast(
            event.model_dump_json(),
            predicate=lambda connection: connection is not origin,
        )

    async def _handle_profile(self, origin: Connection, event: ProfileEvent) -> None:
        profile = event.to_entity()
        try:
            await self._store.upsert_profile(profile)
        except StoreError as exc:
            logger.warning("profile %s from %s not stored: %s", profile.id, origin.id, exc.detail)
            self._report_failure(origin, EventType.PROFILE, exc)
            return

        update = ProfileUpdateEvent(profile=ProfileOut.from_entity(profile))
        self._registry.broadcast(update.model_dump_json())

    def _report_failure(self, origin: Connection, event_type: EventType, exc: StoreError) -> None:
        payload = ErrorEvent(code="store_unavailable", event=event_type.value, detail=exc.detail)
        try:
            origin.enqueue(payload.model_dump_json())
        except DeliveryError:
            logger.debug("Could not report store failure to %s", origin.id)

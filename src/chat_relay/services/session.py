"""Per-connection lifecycle: onboarding, receive loop, teardown."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from fastapi import WebSocketDisconnect, status

from chat_relay.application.exceptions import DecodeError, DeliveryError, StoreError
from chat_relay.application.ports.store import ChatStore
from chat_relay.domain.value_objects.enums import SessionState
from chat_relay.infrastructure.ws.connection import Connection, WebSocketLike
from chat_relay.infrastructure.ws.protocol import HistoryEvent, ProfilesEvent, decode_event
from chat_relay.infrastructure.ws.registry import ConnectionRegistry
from chat_relay.services.event_router import EventRouter

logger = logging.getLogger(__name__)


class ServerWebSocket(WebSocketLike, Protocol):
    async def accept(self) -> None: ...
    async def receive(self) -> dict[str, Any]: ...


class ChatSession:
    def __init__(
        self,
        websocket: ServerWebSocket,
        store: ChatStore,
        registry: ConnectionRegistry,
        router: EventRouter,
        *,
        queue_size: int = 256,
        send_timeout: float = 5.0,
    ) -> None:
        self.state = SessionState.CONNECTING
        self._ws = websocket
        self._store = store
        self._registry = registry
        self._router = router
        self._queue_size = queue_size
        self._send_timeout = send_timeout
        self.connection: Connection | None = None

    async def run(self) -> None:
        await self._ws.accept()
        connection = Connection(
            self._ws, queue_size=self._queue_size, send_timeout=self._send_timeout,
        )
        self.connection = connection
        # Registered before the snapshot is read: broadcasts that land during
        # onboarding queue up behind history/profiles instead of being lost.
        self._registry.register(connection)
        self.state = SessionState.ONBOARDING
        close_code: int | None = None
        try:
            await self._onboard(connection)
            connection.start()
            self.state = SessionState.ACTIVE
            await self._read_loop(connection)
        except WebSocketDisconnect:
            pass
        except StoreError as exc:
            logger.error("Onboarding %s failed: %s", connection.id, exc.detail)
            close_code = status.WS_1011_INTERNAL_ERROR
        except DeliveryError as exc:
            logger.info("Onboarding %s aborted: %s", connection.id, exc.detail)
        except Exception:
            logger.exception("WS error for %s", connection.id)
            close_code = status.WS_1011_INTERNAL_ERROR
        finally:
            self._registry.unregister(connection)
            await connection.close(code=close_code)
            self.state = SessionState.CLOSED
            logger.debug("WS session %s closed", connection.id)

    async def _onboard(self, connection: Connection) -> None:
        messages = await self._store.list_messages()
        profiles = await self._store.list_profiles()
        await connection.send_now(HistoryEvent.from_messages(messages).model_dump_json())
        await connection.send_now(ProfilesEvent.from_profiles(profiles).model_dump_json())

    async def _read_loop(self, connection: Connection) -> None:
        while True:
            message = await self._ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            try:
                event = decode_event(raw)
            except DecodeError as exc:
                logger.debug("Dropping frame from %s: %s", connection.id, exc.detail)
                continue
            await self._router.route(connection, event)

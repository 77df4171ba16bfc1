"""In-process registry of live WebSocket connections."""
from __future__ import annotations

import logging
from typing import Callable

from chat_relay.application.exceptions import DeliveryError
from chat_relay.domain.value_objects.ids import ConnectionId
from chat_relay.infrastructure.ws.connection import Connection

logger = logging.getLogger(__name__)

Predicate = Callable[[Connection], bool]


class ConnectionRegistry:
    """Tracks live connections and fans payloads out to them.

    Everything runs on one event loop and ``broadcast`` never awaits, so it
    works on a snapshot taken at entry; connections leaving mid-broadcast are
    skipped once they stop being OPEN.
    """

    def __init__(self) -> None:
        self._connections: dict[ConnectionId, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def connections(self) -> list[Connection]:
        return list(self._connections.values())

    def register(self, connection: Connection) -> None:
        self._connections[connection.id] = connection
        logger.debug("WS registered: %s (total=%d)", connection.id, len(self._connections))

    def unregister(self, connection: Connection) -> None:
        if self._connections.pop(connection.id, None) is not None:
            logger.debug("WS unregistered: %s (total=%d)", connection.id, len(self._connections))

    def broadcast(self, raw: str, predicate: Predicate | None = None) -> int:
        """Queue ``raw`` for every OPEN connection accepted by ``predicate``.

        Returns the number of connections the payload was queued for.
        """
        delivered = 0
        dead: list[Connection] = []
        for connection in self.connections():
            if not connection.is_open:
                dead.append(connection)
                continue
            if predicate is not None and not predicate(connection):
                continue
            try:
                connection.enqueue(raw)
            except DeliveryError as exc:
                logger.warning("Dropping connection: %s", exc.detail)
                connection.mark_closing()
                dead.append(connection)
                continue
            delivered += 1
        for connection in dead:
            self.unregister(connection)
        return delivered

    async def close_all(self, code: int) -> None:
        for connection in self.connections():
            self.unregister(connection)
            await connection.close(code=code)

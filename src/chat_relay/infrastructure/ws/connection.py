"""One live WebSocket peer with its own bounded outbound queue."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Protocol

from fastapi import status

from chat_relay.application.exceptions import DeliveryError
from chat_relay.domain.value_objects.enums import ConnectionState
from chat_relay.domain.value_objects.ids import ConnectionId

logger = logging.getLogger(__name__)


class WebSocketLike(Protocol):
    async def send_text(self, data: str) -> None: ...
    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class Connection:
    """Outbound side of a peer.

    Broadcasts only ``enqueue``; a dedicated writer task drains the queue with a
    per-send timeout, so a slow peer fills its own queue and gets dropped
    instead of stalling everybody else.
    """

    def __init__(
        self,
        websocket: WebSocketLike,
        *,
        queue_size: int = 256,
        send_timeout: float = 5.0,
    ) -> None:
        self.id = ConnectionId(uuid.uuid4().hex)
        self.state = ConnectionState.OPEN
        self._ws = websocket
        self._send_timeout = send_timeout
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task[None] | None = None
        self._closer: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, state={self.state.value})"

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN

    def enqueue(self, raw: str) -> None:
        if not self.is_open:
            raise DeliveryError(f"connection {self.id} is {self.state.value}")
        try:
            self._queue.put_nowait(raw)
        except asyncio.QueueFull as exc:
            self._abort()
            raise DeliveryError(f"outbound queue full for {self.id}") from exc

    async def send_now(self, raw: str) -> None:
        """Send bypassing the queue. Only valid before ``start``."""
        if not self.is_open:
            raise DeliveryError(f"connection {self.id} is {self.state.value}")
        try:
            await asyncio.wait_for(self._ws.send_text(raw), timeout=self._send_timeout)
        except Exception as exc:
            self.mark_closing()
            raise DeliveryError(f"send to {self.id} failed: {exc!r}") from exc

    def start(self) -> None:
        if self._writer is None:
            self._writer = asyncio.create_task(self._write_loop(), name=f"ws-writer-{self.id}")

    def mark_closing(self) -> None:
        if self.state == ConnectionState.OPEN:
            self.state = ConnectionState.CLOSING

    async def close(self, code: int | None = None) -> None:
        """Stop the writer and drop pending payloads; optionally close the socket."""
        if self.state == ConnectionState.CLOSED:
            return
        self.state = ConnectionState.CLOSED
        for task in (self._writer, self._closer):
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        while not self._queue.empty():
            self._queue.get_nowait()
        if code is not None:
            await self._close_socket(code)

    def _abort(self) -> None:
        self.mark_closing()
        if self._closer is None:
            self._closer = asyncio.create_task(
                self._close_socket(status.WS_1013_TRY_AGAIN_LATER), name=f"ws-closer-{self.id}",
            )

    async def _write_loop(self) -> None:
        while True:
            raw = await self._queue.get()
            try:
                await asyncio.wait_for(self._ws.send_text(raw), timeout=self._send_timeout)
            except TimeoutError:
                logger.warning("WS %s send timed out after %.1fs, dropping", self.id, self._send_timeout)
                break
            except Exception:
                logger.info("WS %s send failed, dropping", self.id, exc_info=True)
                break
        self.mark_closing()
        await self._close_socket(status.WS_1013_TRY_AGAIN_LATER)

    async def _close_socket(self, code: int) -> None:
        try:
            await self._ws.close(code=code)
        except Exception:
            logger.debug("WS %s close failed", self.id, exc_info=True)

from __future__ import annotations

from fastapi import APIRouter, WebSocket

from chat_relay.services.session import ChatSession

router = APIRouter(tags=["websocket"])


@router.websocket("/")
@router.websocket("/ws")
async def ws_chat(websocket: WebSocket) -> None:
    state = websocket.app.state
    session = ChatSession(
        websocket,
        state.store,
        state.registry,
        state.event_router,
        queue_size=state.settings.WS_SEND_QUEUE_SIZE,
        send_timeout=state.settings.WS_SEND_TIMEOUT_SECONDS,
    )
    await session.run()

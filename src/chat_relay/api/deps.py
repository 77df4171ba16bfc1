"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from chat_relay.application.ports.store import ChatStore
from chat_relay.infrastructure.ws.registry import ConnectionRegistry


def get_store(request: Request) -> ChatStore:
    return request.app.state.store


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


StoreDep = Annotated[ChatStore, Depends(get_store)]
RegistryDep = Annotated[ConnectionRegistry, Depends(get_registry)]

"""Read-only HTTP views of the persisted chat state."""
from __future__ import annotations

from fastapi import APIRouter

from chat_relay.api.deps import StoreDep
from chat_relay.api.v1.schemas.message import MessageResponse
from chat_relay.api.v1.schemas.profile import ProfileResponse

router = APIRouter(prefix="/api/v1", tags=["history"])


@router.get("/messages", response_model=list[MessageResponse])
async def list_messages(store: StoreDep) -> list[MessageResponse]:
    messages = await store.list_messages()
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.get("/profiles", response_model=dict[str, ProfileResponse])
async def list_profiles(store: StoreDep) -> dict[str, ProfileResponse]:
    profiles = await store.list_profiles()
    return {
        pid: ProfileResponse.model_validate(p, from_attributes=True)
        for pid, p in profiles.items()
    }

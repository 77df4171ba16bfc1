from __future__ import annotations

from pydantic import BaseModel


class MessageResponse(BaseModel):
    id: int
    sender: str | None
    message: str | None
    timestamp: str | None

    model_config = {"from_attributes": True}

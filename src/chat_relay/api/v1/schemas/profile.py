from __future__ import annotations

from pydantic import BaseModel


class ProfileResponse(BaseModel):
    id: str
    name: str | None
    avatar: str | None
    pseudo: str | None

    model_config = {"from_attributes": True}

from __future__ import annotations

from dataclasses import dataclass

from chat_relay.domain.value_objects.ids import ProfileId


@dataclass(frozen=True, slots=True)
class Profile:
    id: ProfileId
    name: str | None = None
    avatar: str | None = None
    pseudo: str | None = None

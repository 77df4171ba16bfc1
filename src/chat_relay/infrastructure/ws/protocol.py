"""WebSocket event models and the inbound decode step."""
from __future__ import annotations

from typing import Literal

import pydantic
from pydantic import BaseModel, ConfigDict

from chat_relay.application.exceptions import DecodeError, ValidationError
from chat_relay.domain.entities.message import ChatMessage
from chat_relay.domain.entities.profile import Profile
from chat_relay.domain.value_objects.enums import EventType


class _Relayed(BaseModel):
    # Unknown keys survive decoding so relayed events go out as they came in.
    model_config = ConfigDict(extra="allow")


class WsEnvelope(_Relayed):
    type: str


# Client → Server


class ChatEvent(_Relayed):
    type: Literal["chat"]
    sender: str
    message: str
    timestamp: str


class TypingEvent(_Relayed):
    type: Literal["typing", "stop_typing"]


class ProfileEvent(_Relayed):
    type: Literal["profile"]
    id: str
    name: str | None = None
    avatar: str | None = None
    pseudo: str | None = None

    def to_entity(self) -> Profile:
        return Profile(id=self.id, name=self.name, avatar=self.avatar, pseudo=self.pseudo)


class UnknownEvent(BaseModel):
    """Any tag this server does not handle; routed as a no-op."""

    type: str


InboundEvent = ChatEvent | TypingEvent | ProfileEvent | UnknownEvent

_INBOUND: dict[str, type[BaseModel]] = {
    EventType.CHAT: ChatEvent,
    EventType.TYPING: TypingEvent,
    EventType.STOP_TYPING: TypingEvent,
    EventType.PROFILE: ProfileEvent,
}


def decode_event(raw: str | bytes) -> InboundEvent:
    """Parse one inbound frame into a member of the closed event union."""
    try:
        envelope = WsEnvelope.model_validate_json(raw)
    except pydantic.ValidationError as exc:
        raise DecodeError(f"not an event envelope: {exc.error_count()} error(s)") from exc

    model = _INBOUND.get(envelope.type)
    if model is None:
        return UnknownEvent(type=envelope.type)
    try:
        return model.model_validate(envelope.model_dump())
    except pydantic.ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise ValidationError(f"invalid {envelope.type} event: {fields}") from exc


# Server → Client


class ProfileOut(BaseModel):
    id: str
    name: str | None = None
    avatar: str | None = None
    pseudo: str | None = None

    @classmethod
    def from_entity(cls, profile: Profile) -> ProfileOut:
        return cls(id=profile.id, name=profile.name, avatar=profile.avatar, pseudo=profile.pseudo)


class HistoryEntry(BaseModel):
    sender: str | None
    message: str | None
    timestamp: str | None


class HistoryEvent(BaseModel):
    type: Literal["history"] = "history"
    messages: list[HistoryEntry]

    @classmethod
    def from_messages(cls, messages: list[ChatMessage]) -> HistoryEvent:
        return cls(
            messages=[
                HistoryEntry(sender=m.sender, message=m.message, timestamp=m.timestamp)
                for m in messages
            ]
        )


class ProfilesEvent(BaseModel):
    type: Literal["profiles"] = "profiles"
    profiles: dict[str, ProfileOut]

    @classmethod
    def from_profiles(cls, profiles: dict[str, Profile]) -> ProfilesEvent:
        return cls(profiles={pid: ProfileOut.from_entity(p) for pid, p in profiles.items()})


class ProfileUpdateEvent(BaseModel):
    type: Literal["profile_update"] = "profile_update"
    profile: ProfileOut


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    code: str
    event: str
    detail: str = ""

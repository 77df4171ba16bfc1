from __future__ import annotations

from enum import StrEnum


class EventType(StrEnum):
    CHAT = "chat"
    TYPING = "typing"
    STOP_TYPING = "stop_typing"
    PROFILE = "profile"
    HISTORY = "history"
    PROFILES = "profiles"
    PROFILE_UPDATE = "profile_update"
    ERROR = "error"


class ConnectionState(StrEnum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class SessionState(StrEnum):
    CONNECTING = "connecting"
    ONBOARDING = "onboarding"
    ACTIVE = "active"
    CLOSED = "closed"

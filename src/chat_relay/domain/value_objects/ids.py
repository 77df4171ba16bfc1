from __future__ import annotations

from typing import NewType

MessageId = NewType("MessageId", int)
ProfileId = NewType("ProfileId", str)
ConnectionId = NewType("ConnectionId", str)

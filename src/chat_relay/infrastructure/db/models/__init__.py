"""Import all models so Base.metadata.create_all sees every table."""
from chat_relay.infrastructure.db.models.message import MessageModel
from chat_relay.infrastructure.db.models.profile import ProfileModel

__all__ = [
    "MessageModel",
    "ProfileModel",
]

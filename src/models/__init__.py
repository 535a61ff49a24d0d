"""SQLAlchemy models."""

from src.models.chat import Chat, ChatMember
from src.models.message import Message
from src.models.user import User

__all__ = [
    "User",
    "Chat",
    "ChatMember",
    "Message",
]

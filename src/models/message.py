"""Message model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from src.database import Base
from src.models.mixins import TimestampMixin


class Message(Base, TimestampMixin):
    """A message sent by a user in a chat. Holds text, an image URL, or both."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("chats.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    text = Column(Text, nullable=True)
    image = Column(String(1024), nullable=True)

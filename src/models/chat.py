"""Chat and chat membership models."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Chat(Base, TimestampMixin):
    """A conversation: direct (2 members, unnamed) or group (3+ members, named)."""

    __tablename__ = "chats"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, default="", server_default="")
    is_group = Column(Boolean, nullable=False, default=False, index=True)

    # Ordered by row id so members keep the order they were added in
    memberships = relationship(
        "ChatMember",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="ChatMember.id",
    )

    @property
    def member_ids(self) -> list[int]:
        return [membership.user_id for membership in self.memberships]

    def has_member(self, user_id: int) -> bool:
        return user_id in self.member_ids


class ChatMember(Base, TimestampMixin):
    """Membership of a user in a chat.

    Only the user id is held; users are loaded separately when a chat is
    returned to a client.
    """

    __tablename__ = "chat_members"
    __table_args__ = (UniqueConstraint("chat_id", "user_id", name="uq_chat_members_chat_user"),)

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("chats.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    chat = relationship("Chat", back_populates="memberships")

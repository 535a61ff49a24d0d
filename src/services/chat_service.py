"""Chat service for conversations and their membership rules."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.exceptions import ForbiddenError, NotFoundError, ValidationError
from src.models.chat import Chat, ChatMember
from src.models.user import User

logger = logging.getLogger(__name__)

MIN_GROUP_MEMBERS = 3
DIRECT_CHAT_MEMBERS = 2


@dataclass
class ExpandedChat:
    """A chat together with its members loaded as users, in membership order."""

    chat: Chat
    members: list[User]

    @property
    def id(self) -> int:
        return self.chat.id

    @property
    def name(self) -> str:
        return self.chat.name

    @property
    def is_group(self) -> bool:
        return self.chat.is_group

    @property
    def created_at(self):
        return self.chat.created_at

    @property
    def updated_at(self):
        return self.chat.updated_at


def unique_ids(ids: list[int]) -> list[int]:
    """Drop duplicate IDs, keeping first-seen order."""
    return list(dict.fromkeys(ids))


class ChatService:
    """Service for creating, reading and changing chats.

    Every operation takes the requesting user explicitly and checks
    membership itself before touching the chat.
    """

    def __init__(self, db: Session):
        self.db = db

    # Lookups

    def _get_chat_or_404(self, chat_id: int) -> Chat:
        chat = self.db.query(Chat).filter(Chat.id == chat_id).first()
        if not chat:
            raise NotFoundError("Chat not found")
        return chat

    @staticmethod
    def _require_member(chat: Chat, user: User) -> None:
        if not chat.has_member(user.id):
            raise ForbiddenError("You are not a member of this chat")

    def _require_existing_users(self, user_ids: list[int]) -> None:
        if not user_ids:
            return
        found = self.db.query(User.id).filter(User.id.in_(user_ids)).count()
        if found != len(set(user_ids)):
            raise ValidationError("One or more members do not exist")

    def expand(self, chats: list[Chat]) -> list[ExpandedChat]:
        """Load the members of several chats with a single user query."""
        all_ids = {user_id for chat in chats for user_id in chat.member_ids}
        users_by_id: dict[int, User] = {}
        if all_ids:
            users = self.db.query(User).filter(User.id.in_(all_ids)).all()
            users_by_id = {user.id: user for user in users}

        return [
            ExpandedChat(
                chat=chat,
                members=[users_by_id[uid] for uid in chat.member_ids if uid in users_by_id],
            )
            for chat in chats
        ]

    def expand_one(self, chat: Chat) -> ExpandedChat:
        return self.expand([chat])[0]

    # Operations

    def create_chat(
        self,
        requester: User,
        member_ids: list[int],
        is_group: bool,
        name: str | None = None,
    ) -> ExpandedChat:
        """Create a direct or group chat that includes the requester."""
        all_members = unique_ids([*member_ids, requester.id])
        clean_name = (name or "").strip()

        if is_group:
            if not clean_name:
                raise ValidationError("Group chats must have a name.")
            if len(all_members) < MIN_GROUP_MEMBERS:
                raise ValidationError(
                    f"Group chats must have at least {MIN_GROUP_MEMBERS} members."
                )
        else:
            if len(all_members) != DIRECT_CHAT_MEMBERS:
                raise ValidationError(
                    f"Direct messages must have exactly {DIRECT_CHAT_MEMBERS} members."
                )
            if clean_name:
                raise ValidationError("Direct messages cannot have a name.")

        self._require_existing_users(all_members)

        chat = Chat(name=clean_name if is_group else "", is_group=is_group)
        chat.memberships = [ChatMember(user_id=user_id) for user_id in all_members]
        self.db.add(chat)
        self.db.commit()
        self.db.refresh(chat)

        logger.info(
            f"User {requester.id} created {'group' if is_group else 'direct'} chat {chat.id} "
            f"with {len(all_members)} members"
        )
        return self.expand_one(chat)

    def get_chat(self, requester: User, chat_id: int) -> ExpandedChat:
        """Get a chat the requester belongs to."""
        chat = self._get_chat_or_404(chat_id)
        self._require_member(chat, requester)
        return self.expand_one(chat)

    def list_chats(self, requester: User) -> list[ExpandedChat]:
        """Get all chats the requester belongs to, most recently updated first."""
        chats = (
            self.db.query(Chat)
            .join(ChatMember, ChatMember.chat_id == Chat.id)
            .filter(ChatMember.user_id == requester.id)
            .order_by(Chat.updated_at.desc(), Chat.id.desc())
            .all()
        )
        return self.expand(chats)

    def add_members(self, requester: User, chat_id: int, member_ids: list[int]) -> ExpandedChat:
        """Add users to a group chat. Existing members are ignored."""
        if not member_ids:
            raise ValidationError("No members provided")

        chat = self._get_chat_or_404(chat_id)
        if not chat.is_group:
            raise ValidationError("Members can only be added to group chats")
        self._require_member(chat, requester)

        new_ids = unique_ids(member_ids)
        self._require_existing_users(new_ids)

        current = set(chat.member_ids)
        added = [user_id for user_id in new_ids if user_id not in current]
        for user_id in added:
            chat.memberships.append(ChatMember(user_id=user_id))
        chat.touch()
        self.db.commit()
        self.db.refresh(chat)

        if added:
            logger.info(f"User {requester.id} added {added} to chat {chat.id}")
        return self.expand_one(chat)

    def leave_chat(self, requester: User, chat_id: int) -> None:
        """Remove the requester from a group chat.

        The chat is kept even if it falls below the group minimum or empties.
        """
        chat = self._get_chat_or_404(chat_id)
        if not chat.is_group:
            raise ValidationError("You cannot leave a direct message")
        self._require_member(chat, requester)

        membership = next(m for m in chat.memberships if m.user_id == requester.id)
        chat.memberships.remove(membership)
        chat.touch()
        self.db.commit()

        logger.info(f"User {requester.id} left chat {chat.id}")

    def rename_chat(self, requester: User, chat_id: int, name: str | None) -> ExpandedChat:
        """Rename a group chat."""
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Chat name cannot be empty")

        chat = self._get_chat_or_404(chat_id)
        if not chat.is_group:
            raise ValidationError("Only group chats can be renamed")
        self._require_member(chat, requester)

        chat.name = clean_name
        chat.touch()
        self.db.commit()
        self.db.refresh(chat)

        return self.expand_one(chat)

    def is_member(self, user: User, chat_id: int) -> bool:
        """Check membership without loading the chat."""
        return (
            self.db.query(ChatMember)
            .filter(ChatMember.chat_id == chat_id, ChatMember.user_id == user.id)
            .first()
            is not None
        )

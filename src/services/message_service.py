"""Message service for sending, listing, editing and deleting messages."""

import logging

from sqlalchemy.orm import Session

from src.config import get_settings
from src.exceptions import ForbiddenError, NotFoundError, ValidationError
from src.models.chat import Chat
from src.models.message import Message
from src.models.user import User
from src.services.assets import AssetService
from src.services.chat_service import ChatService

logger = logging.getLogger(__name__)

EMPTY_MESSAGE_ERROR = "Message must contain text or an image"


class MessageService:
    """Service for message operations.

    Only the sender of a message may edit or delete it. Chat membership is
    checked on send and list only when ``enforce_message_membership`` is on.
    """

    def __init__(
        self,
        db: Session,
        assets: AssetService | None = None,
        enforce_membership: bool | None = None,
    ):
        self.db = db
        self.assets = assets or AssetService()
        if enforce_membership is None:
            enforce_membership = get_settings().enforce_message_membership
        self.enforce_membership = enforce_membership

    def _get_message_or_404(self, message_id: int) -> Message:
        message = self.db.query(Message).filter(Message.id == message_id).first()
        if not message:
            raise NotFoundError("Message not found")
        return message

    def _check_chat_access(self, user: User, chat_id: int, must_exist: bool) -> None:
        if must_exist or self.enforce_membership:
            exists = self.db.query(Chat.id).filter(Chat.id == chat_id).first()
            if not exists:
                raise NotFoundError("Chat not found")
        if self.enforce_membership and not ChatService(self.db).is_member(user, chat_id):
            raise ForbiddenError("You are not a member of this chat")

    async def send_message(
        self,
        sender: User,
        chat_id: int,
        text: str | None = None,
        image: str | None = None,
    ) -> Message:
        """Send a message with text, an image, or both.

        The image is uploaded before the message is stored; if the upload
        fails nothing is written.
        """
        clean_text = (text or "").strip()
        clean_image = (image or "").strip()
        if not clean_text and not clean_image:
            raise ValidationError(EMPTY_MESSAGE_ERROR)

        self._check_chat_access(sender, chat_id, must_exist=True)

        image_url = await self.assets.upload_image(clean_image) if clean_image else None

        message = Message(
            chat_id=chat_id,
            sender_id=sender.id,
            text=clean_text or None,
            image=image_url,
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)

        logger.debug(f"User {sender.id} sent message {message.id} to chat {chat_id}")
        return message

    def list_messages(self, requester: User, chat_id: int) -> list[Message]:
        """Get all messages in a chat in the order they were stored."""
        self._check_chat_access(requester, chat_id, must_exist=False)
        return self.db.query(Message).filter(Message.chat_id == chat_id).order_by(Message.id).all()

    def edit_message(self, requester: User, message_id: int, text: str | None) -> Message:
        """Replace a message's text. An empty string is allowed only if it has an image."""
        message = self._get_message_or_404(message_id)
        if message.sender_id != requester.id:
            raise ForbiddenError("You can only edit your own messages")
        if text is None:
            raise ValidationError("Text is required")

        clean_text = text.strip()
        if not clean_text and not message.image:
            raise ValidationError(EMPTY_MESSAGE_ERROR)

        message.text = clean_text
        self.db.commit()
        self.db.refresh(message)
        return message

    def delete_message(self, requester: User, message_id: int) -> None:
        """Delete a message sent by the requester."""
        message = self._get_message_or_404(message_id)
        if message.sender_id != requester.id:
            raise ForbiddenError("You can only delete your own messages")

        self.db.delete(message)
        self.db.commit()
        logger.info(f"User {requester.id} deleted message {message_id}")

"""Message schemas."""

from datetime import datetime

from pydantic import ConfigDict

from src.schemas.base import CamelModel


class MessageCreate(CamelModel):
    """Send a message. At least one of text or image is required."""

    text: str | None = None
    # Image as a data URI or a remote URL, uploaded to the asset host
    image: str | None = None


class MessageUpdate(CamelModel):
    """Edit a message's text. An empty string clears it."""

    text: str | None = None


class MessageResponse(CamelModel):
    """Message response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_id: int
    sender_id: int
    text: str | None
    image: str | None
    created_at: datetime
    updated_at: datetime

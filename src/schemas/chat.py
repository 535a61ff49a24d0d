"""Chat schemas."""

from datetime import datetime

from pydantic import ConfigDict, Field

from src.schemas.auth import UserResponse
from src.schemas.base import CamelModel


class ChatCreate(CamelModel):
    """Create a direct or group chat. The requester is always added as a member."""

    member_ids: list[int] = Field(default_factory=list)
    is_group: bool = False
    name: str | None = Field(None, max_length=255)


class ChatMembersAdd(CamelModel):
    """Add members to a group chat."""

    member_ids: list[int] = Field(default_factory=list)


class ChatRename(CamelModel):
    """Rename a group chat."""

    name: str | None = Field(None, max_length=255)


class ChatResponse(CamelModel):
    """Chat with its members expanded to user views."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_group: bool
    members: list[UserResponse]
    created_at: datetime
    updated_at: datetime

"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import ProfileUpdate, UserLogin, UserResponse, UserSignup
from src.schemas.chat import ChatCreate, ChatMembersAdd, ChatRename, ChatResponse
from src.schemas.message import MessageCreate, MessageResponse, MessageUpdate

__all__ = [
    "UserSignup",
    "UserLogin",
    "UserResponse",
    "ProfileUpdate",
    "ChatCreate",
    "ChatMembersAdd",
    "ChatRename",
    "ChatResponse",
    "MessageCreate",
    "MessageUpdate",
    "MessageResponse",
]

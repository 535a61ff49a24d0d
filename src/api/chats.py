"""Chat API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_chat_service, get_current_user
from src.models.user import User
from src.schemas.base import StatusMessage
from src.schemas.chat import ChatCreate, ChatMembersAdd, ChatRename, ChatResponse
from src.services.chat_service import ChatService

router = APIRouter(prefix="/api/chat", tags=["chats"])


@router.post("", response_model=ChatResponse, status_code=status.HTTP_201_CREATED)
async def create_chat(
    chat_data: ChatCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ChatService, Depends(get_chat_service)],
):
    """Create a direct or group chat including the current user."""
    chat = service.create_chat(
        current_user, chat_data.member_ids, chat_data.is_group, chat_data.name
    )
    return ChatResponse.model_validate(chat)


# Declared before /{chat_id} so "chats" is not parsed as an ID
@router.get("/chats", response_model=list[ChatResponse])
async def get_chats(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ChatService, Depends(get_chat_service)],
):
    """Get all chats of the current user, most recently updated first."""
    return [ChatResponse.model_validate(chat) for chat in service.list_chats(current_user)]


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ChatService, Depends(get_chat_service)],
):
    """Get a chat the current user is a member of."""
    return ChatResponse.model_validate(service.get_chat(current_user, chat_id))


@router.put("/{chat_id}/members", response_model=ChatResponse)
async def add_chat_members(
    chat_id: int,
    members_data: ChatMembersAdd,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ChatService, Depends(get_chat_service)],
):
    """Add members to a group chat."""
    chat = service.add_members(current_user, chat_id, members_data.member_ids)
    return ChatResponse.model_validate(chat)


@router.delete("/{chat_id}/members/me", response_model=StatusMessage)
async def leave_chat(
    chat_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ChatService, Depends(get_chat_service)],
):
    """Leave a group chat."""
    service.leave_chat(current_user, chat_id)
    return StatusMessage(message="Left chat successfully")


@router.put("/{chat_id}/name", response_model=ChatResponse)
async def rename_chat(
    chat_id: int,
    rename_data: ChatRename,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ChatService, Depends(get_chat_service)],
):
    """Rename a group chat."""
    chat = service.rename_chat(current_user, chat_id, rename_data.name)
    return ChatResponse.model_validate(chat)

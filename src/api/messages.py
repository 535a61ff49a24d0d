"""Message API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_current_user, get_message_service
from src.models.user import User
from src.schemas.base import StatusMessage
from src.schemas.message import MessageCreate, MessageResponse, MessageUpdate
from src.services.message_service import MessageService

router = APIRouter(prefix="/api/message", tags=["messages"])


@router.get("/chat/{chat_id}", response_model=list[MessageResponse])
async def get_chat_messages(
    chat_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Get all messages in a chat."""
    return service.list_messages(current_user, chat_id)


@router.post(
    "/chat/{chat_id}", response_model=MessageResponse, status_code=status.HTTP_201_CREATED
)
async def send_message(
    chat_id: int,
    message_data: MessageCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Send a message with text, an image, or both."""
    return await service.send_message(
        current_user, chat_id, message_data.text, message_data.image
    )


@router.put("/{message_id}", response_model=MessageResponse)
async def edit_message(
    message_id: int,
    message_data: MessageUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Edit the text of one of your messages."""
    return service.edit_message(current_user, message_id, message_data.text)


@router.delete("/{message_id}", response_model=StatusMessage)
async def delete_message(
    message_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Delete one of your messages."""
    service.delete_message(current_user, message_id)
    return StatusMessage(message="Message deleted successfully")

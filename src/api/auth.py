"""Authentication API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from src.api.dependencies import (
    clear_session_cookie,
    get_asset_service,
    get_current_user,
    set_session_cookie,
)
from src.database import get_db
from src.models.user import User
from src.schemas.auth import ProfileUpdate, UserLogin, UserResponse, UserSignup
from src.schemas.base import StatusMessage
from src.services.assets import AssetService
from src.services.auth import ProfilePatch, authenticate_user, register_user, update_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserSignup,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user and start a session."""
    user = register_user(db, user_data.name, user_data.email, user_data.password)
    set_session_cookie(response, user.id)
    return user


@router.post("/login", response_model=UserResponse)
async def login(
    credentials: UserLogin,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password."""
    user = authenticate_user(db, credentials.email, credentials.password)
    set_session_cookie(response, user.id)
    logger.info(f"User {user.id} logged in")
    return user


@router.post("/logout", response_model=StatusMessage)
async def logout(response: Response):
    """Logout by expiring the session cookie. The token itself stays valid until it expires."""
    clear_session_cookie(response)
    return StatusMessage(message="Logged out successfully")


@router.put("/update-profile", response_model=UserResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[AssetService, Depends(get_asset_service)],
):
    """Update the current user's name, bio or profile picture."""
    patch = ProfilePatch.from_fields(profile_data.model_dump(exclude_unset=True))
    return await update_profile(db, current_user, patch, assets)


@router.get("/check", response_model=UserResponse)
async def check_auth(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get the user behind the current session."""
    return current_user

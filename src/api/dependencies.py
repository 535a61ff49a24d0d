"""FastAPI dependencies for authentication, sessions and services."""

from typing import Annotated

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import get_db
from src.exceptions import AuthError, NotFoundError
from src.models.user import User
from src.services.assets import AssetService
from src.services.auth import create_access_token, decode_access_token, get_user_by_id
from src.services.chat_service import ChatService
from src.services.message_service import MessageService

settings = get_settings()

security = HTTPBearer(auto_error=False)


def set_session_cookie(response: Response, user_id: int) -> str:
    """Issue a session token for the user and store it in an HTTP-only cookie."""
    token = create_access_token(user_id)
    response.set_cookie(
        key=settings.jwt_cookie_name,
        value=token,
        max_age=settings.jwt_expiration_seconds,
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
    )
    return token


def clear_session_cookie(response: Response) -> None:
    """Replace the session cookie with an empty one that has already expired."""
    response.set_cookie(
        key=settings.jwt_cookie_name,
        value="",
        max_age=0,
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
    )


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from the session token.

    The token is read from a bearer Authorization header if present,
    otherwise from the session cookie.
    """
    token = credentials.credentials if credentials else None
    if not token:
        token = request.cookies.get(settings.jwt_cookie_name)
    if not token:
        raise AuthError("Unauthorized - No Token Provided")

    payload = decode_access_token(token)
    if payload is None:
        raise AuthError("Unauthorized - Invalid Token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthError("Unauthorized - Invalid Token") from None

    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    return user


def get_asset_service() -> AssetService:
    """Get asset service instance."""
    return AssetService()


def get_chat_service(
    db: Annotated[Session, Depends(get_db)],
) -> ChatService:
    """Get chat service with dependencies."""
    return ChatService(db)


def get_message_service(
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[AssetService, Depends(get_asset_service)],
) -> MessageService:
    """Get message service with dependencies."""
    return MessageService(db, assets)

"""Authentication and profile schemas."""

from datetime import datetime

from pydantic import ConfigDict, EmailStr, Field

from src.schemas.base import CamelModel


class UserSignup(CamelModel):
    """User signup request.

    Fields are optional here so that missing values are reported by the
    signup rules rather than as a schema error.
    """

    name: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(None, max_length=128)


class UserLogin(CamelModel):
    """User login request."""

    email: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=128)


class ProfileUpdate(CamelModel):
    """Profile update request. Only the fields present in the body are applied."""

    name: str | None = Field(None, max_length=255)
    about_me: str | None = Field(None, max_length=1000)
    # Image as a data URI or a remote URL, uploaded to the asset host
    profile_pic: str | None = None


class UserResponse(CamelModel):
    """Public user view. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    profile_pic: str
    about_me: str
    created_at: datetime

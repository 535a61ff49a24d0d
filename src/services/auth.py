"""Authentication service for JWT, password handling and profiles."""

import enum
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from email_validator import EmailNotValidError, validate_email
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.exceptions import ConflictError, CredentialsError, ValidationError
from src.models.user import User
from src.services.assets import AssetService

logger = logging.getLogger(__name__)
settings = get_settings()

MIN_PASSWORD_LENGTH = 6

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


class _Unset(enum.Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET


@dataclass(frozen=True)
class ProfilePatch:
    """Partial profile update.

    Each field is either ``UNSET`` (leave unchanged), ``None``/``""`` (clear)
    or a new value.
    """

    name: str | None | _Unset = UNSET
    about_me: str | None | _Unset = UNSET
    profile_pic: str | None | _Unset = UNSET

    @classmethod
    def from_fields(cls, fields: dict) -> "ProfilePatch":
        """Build a patch from the fields explicitly present in a request."""
        return cls(**{key: value for key, value in fields.items() if key in _PATCH_FIELDS})

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, field) is UNSET for field in _PATCH_FIELDS)


_PATCH_FIELDS = ("name", "about_me", "profile_pic")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_id: int) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "sub": str(user_id),
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def normalize_email(email: str) -> str:
    """Return the canonical form of an email address.

    Uses the same normalization as ``EmailStr`` (Unicode normalization,
    lowercased domain). Strings that are not valid addresses are returned
    stripped, so they can never match a stored address.
    """
    email = email.strip()
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def register_user(db: Session, name: str | None, email: str | None, password: str | None) -> User:
    """Create a new user after checking the signup rules."""
    if not name or not name.strip() or not email or not password:
        raise ValidationError("All fields are required")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise ConflictError("Email already exists")

    user = User(name=name.strip(), email=email, password_hash=get_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same email
        db.rollback()
        raise ConflictError("Email already exists") from e
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


def authenticate_user(db: Session, email: str | None, password: str | None) -> User:
    """Authenticate a user by email and password.

    Unknown emails and wrong passwords raise the same error and take the
    same bcrypt time.
    """
    user = get_user_by_email(db, normalize_email(email)) if email else None
    if user is None:
        pwd_context.dummy_verify()
    if not user or not password or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login attempt for {email!r}")
        raise CredentialsError("Invalid credentials")
    return user


async def update_profile(
    db: Session, user: User, patch: ProfilePatch, assets: AssetService
) -> User:
    """Apply a partial profile update.

    A new profile picture is uploaded before anything is written, so a failed
    upload leaves the profile untouched.
    """
    if patch.is_empty:
        raise ValidationError("No profile fields provided")

    if patch.name is not UNSET and (patch.name is None or not patch.name.strip()):
        raise ValidationError("Name cannot be empty")

    profile_pic_url: str | _Unset = UNSET
    if patch.profile_pic is not UNSET:
        if patch.profile_pic and patch.profile_pic.strip():
            profile_pic_url = await assets.upload_image(patch.profile_pic.strip())
        else:
            profile_pic_url = ""

    if patch.name is not UNSET:
        user.name = patch.name.strip()
    if patch.about_me is not UNSET:
        user.about_me = (patch.about_me or "").strip()
    if profile_pic_url is not UNSET:
        user.profile_pic = profile_pic_url

    db.commit()
    db.refresh(user)

    logger.info(f"Updated profile for user {user.id}")
    return user

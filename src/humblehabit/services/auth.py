"""Authentication provider: resolves an owner from credentials."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlmodel import select

from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.user import User

logger = get_logger(__name__)

_hasher = PasswordHasher()
USERNAME_MAX_LENGTH = 64


def get_user_by_username(username: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by username."""
    username = username.strip()
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            session.expunge(user)
        return user


def create_user(*, username: str, password: str, session_factory: SessionFactory) -> User:
    """Create a new user with an argon2 password hash."""

    username = username.strip()
    if not username:
        raise ValueError("Username cannot be empty")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValueError(f"Username too long (max {USERNAME_MAX_LENGTH} characters)")
    if not password:
        raise ValueError("Password cannot be empty")
    password_hash = _hasher.hash(password)
    with session_factory() as session:
        existing = session.exec(select(User).where(User.username == username)).first()
        if existing:
            raise ValueError("Username already exists")
        user = User(username=username, password_hash=password_hash)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("User created", extra={"user_id": user.id})
    return user


def authenticate(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    username = username.strip()
    if not username:
        return None
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user is None:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            logger.warning("Rejected login", extra={"username": username})
            return None

        if _hasher.check_needs_rehash(user.password_hash):
            user.password_hash = _hasher.hash(password)
        user.last_login = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def resolve_owner_id(user: Optional[User]) -> Optional[int]:
    """Opaque owner identifier for an authenticated user, or None."""

    if user is None:
        return None
    return user.id

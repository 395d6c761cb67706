"""
User service layer: registration and credential checks.
"""

from typing import Optional, Dict
import logging

import bcrypt
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.models import User
from fightpicks.services.errors import ValidationError, ConflictError
from fightpicks.utils.datetime_utils import format_date

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False


async def register_user(
    session: AsyncSession, username: Optional[str], email: Optional[str], password: Optional[str]
) -> Dict:
    """
    Create a new user account.

    Args:
        session: Database session
        username: Unique username
        email: Unique email address
        password: Plain-text password, stored as a bcrypt hash

    Returns:
        Dict with the new user's id and username

    Raises:
        ValidationError: If any field is missing
        ConflictError: If the username or email is already registered
    """
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email or not password:
        raise ValidationError("Username, email, and password are required")

    result = await session.execute(
        select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
    )
    if result.scalar_one_or_none():
        raise ConflictError("Username or email already exists")

    user = User(username=username, email=email, password_hash=hash_password(password))
    session.add(user)
    try:
        await session.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration
        await session.rollback()
        raise ConflictError("Username or email already exists")
    await session.commit()

    logger.info(f"User registered: {username} (ID: {user.id})")
    return {"id": user.id, "username": user.username}


async def authenticate_user(
    session: AsyncSession, username: Optional[str], password: Optional[str]
) -> Optional[Dict]:
    """
    Check a username/password pair.

    Returns:
        User dict (id, username, email) on success, None when the user is
        unknown or the password does not match

    Raises:
        ValidationError: If username or password is missing
    """
    if not username or not password:
        raise ValidationError("Username and password are required")

    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.password_hash):
        return None

    logger.info(f"User logged in: {username} (ID: {user.id})")
    return {"id": user.id, "username": user.username, "email": user.email}


async def get_user(session: AsyncSession, user_id: str) -> Optional[Dict]:
    """Get a user by id."""
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "registration_date": format_date(user.registration_date),
    }

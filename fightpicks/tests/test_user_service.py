"""
Unit tests for user registration and login.
"""

import pytest

from fightpicks.services import user_service
from fightpicks.services.errors import ConflictError, ValidationError


@pytest.mark.asyncio
async def test_register_and_authenticate(db_session):
    user = await user_service.register_user(db_session, "alice", "alice@example.com", "s3cret")
    assert user["username"] == "alice"
    assert len(user["id"]) == 32

    authed = await user_service.authenticate_user(db_session, "alice", "s3cret")
    assert authed == {"id": user["id"], "username": "alice", "email": "alice@example.com"}


@pytest.mark.asyncio
async def test_wrong_password_returns_none(db_session):
    await user_service.register_user(db_session, "bob", "bob@example.com", "right")
    assert await user_service.authenticate_user(db_session, "bob", "wrong") is None
    assert await user_service.authenticate_user(db_session, "nobody", "right") is None


@pytest.mark.asyncio
async def test_duplicate_username_or_email(db_session):
    await user_service.register_user(db_session, "carol", "carol@example.com", "pw")

    with pytest.raises(ConflictError):
        await user_service.register_user(db_session, "carol", "other@example.com", "pw")
    with pytest.raises(ConflictError):
        await user_service.register_user(db_session, "carol2", "carol@example.com", "pw")


@pytest.mark.asyncio
async def test_register_requires_all_fields(db_session):
    with pytest.raises(ValidationError):
        await user_service.register_user(db_session, "dave", "", "pw")


@pytest.mark.asyncio
async def test_get_user(db_session):
    user = await user_service.register_user(db_session, "erin", "erin@example.com", "pw")
    fetched = await user_service.get_user(db_session, user["id"])
    assert fetched["email"] == "erin@example.com"
    assert fetched["registration_date"] is not None
    assert await user_service.get_user(db_session, "missing") is None


def test_password_hash_round_trip():
    hashed = user_service.hash_password("pw")
    assert hashed != "pw"
    assert user_service.verify_password("pw", hashed)
    assert not user_service.verify_password("pw", "not-a-bcrypt-hash")

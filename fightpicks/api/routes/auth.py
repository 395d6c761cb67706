"""Registration and login route handlers."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.api.routes import limiter
from fightpicks.database.db import get_db_session
from fightpicks.services import user_service
from fightpicks.services.errors import AuthenticationError
from fightpicks.models.schemas import RegisterRequest, RegisterResponse, LoginRequest, LoginResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/register", response_model=RegisterResponse)
@limiter.limit("10/minute")
async def register(
    request: Request, payload: RegisterRequest, session: AsyncSession = Depends(get_db_session)
):
    """Register a new user."""
    user = await user_service.register_user(
        session, payload.username, payload.email, payload.password
    )
    return RegisterResponse(
        message="User registered successfully",
        user_id=user["id"],
        username=user["username"],
    )


@router.post("/api/login", response_model=LoginResponse)
@limiter.limit("10/minute")
async def login(
    request: Request, payload: LoginRequest, session: AsyncSession = Depends(get_db_session)
):
    """Check credentials and return the user's identity."""
    user = await user_service.authenticate_user(session, payload.username, payload.password)
    if not user:
        raise AuthenticationError("Invalid username or password")
    return LoginResponse(
        message="Login successful",
        user_id=user["id"],
        username=user["username"],
        email=user["email"],
    )

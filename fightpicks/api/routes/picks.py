"""Pick submission and pick listing route handlers."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.api.routes import limiter
from fightpicks.database.db import get_db_session
from fightpicks.services import pick_service
from fightpicks.models.schemas import (
    SavePicksRequest,
    SavePicksResponse,
    UserPickEntry,
    UserPicksResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/save-picks", response_model=SavePicksResponse)
@limiter.limit("30/minute")
async def save_picks(
    request: Request, payload: SavePicksRequest, session: AsyncSession = Depends(get_db_session)
):
    """
    Save a user's picks for an event in a league, replacing any picks
    previously saved for that event.
    """
    logger.info("Received save picks request")
    counts = await pick_service.submit_picks(
        session,
        payload.user_id,
        payload.league_id,
        payload.event_id,
        pick_service.selections_from_payload(payload.picks or []),
    )
    message = f"Saved {counts['saved']} picks"
    if counts["failed"]:
        message += f" ({counts['failed']} failed)"
    return SavePicksResponse(message=message, picks_count=counts["saved"])


@router.get("/api/user-picks/{user_id}/{league_id}", response_model=UserPicksResponse)
async def get_user_picks(user_id: str, league_id: str, session: AsyncSession = Depends(get_db_session)):
    """All of a user's picks in a league, with event and fighter names."""
    picks = await pick_service.get_user_picks(session, user_id, league_id)
    return UserPicksResponse(data=[UserPickEntry(**pick) for pick in picks])

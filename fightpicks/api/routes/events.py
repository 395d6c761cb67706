"""Event, fight card and fighter history route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.db import get_db_session
from fightpicks.services import fight_service, history_service
from fightpicks.models.schemas import (
    EventSummary,
    EventsResponse,
    FightCardEntry,
    FightCardResponse,
    FighterHistoryEntry,
    FighterHistoryResponse,
    FighterMatch,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/events", response_model=EventsResponse)
async def list_events(session: AsyncSession = Depends(get_db_session)):
    """List events, most recent first."""
    events = await fight_service.list_events(session)
    return EventsResponse(data=[EventSummary(**event) for event in events])


@router.get("/api/event/{event_id}/fights", response_model=FightCardResponse)
async def get_event_fights(event_id: str, session: AsyncSession = Depends(get_db_session)):
    """Fight card for an event. An event without fights returns an empty list."""
    fights = await fight_service.get_fights_for_event(session, event_id.strip())
    return FightCardResponse(data=[FightCardEntry.from_card(fight) for fight in fights])


@router.get("/api/fighter/history", response_model=FighterHistoryResponse)
async def get_fighter_history(name: Optional[str] = None, session: AsyncSession = Depends(get_db_session)):
    """
    Fight history for every fighter whose name contains `name`.
    Results are Win/Loss/Draw/No Contest/Pending from each fighter's side.
    """
    history = await history_service.get_fighter_history(session, name)
    return FighterHistoryResponse(
        data=[FighterHistoryEntry(**fight) for fight in history["fights"]],
        fighters=[FighterMatch(**fighter) for fighter in history["fighters"]],
        message=history.get("message"),
    )

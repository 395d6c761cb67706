"""
Fight cards: events and the denormalized fights on them.
"""

from typing import List, Dict, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.models import Event, Fight, Fighter
from fightpicks.services.errors import NotFoundError
from fightpicks.utils.constants import (
    DEFAULT_WEIGHT_CLASS,
    EVENTS_PAGE_SIZE,
    MISSING_VALUE,
    NON_DECISION_METHODS,
    RESULT_DRAW_OR_NO_CONTEST,
    RESULT_PENDING,
    UNKNOWN_EVENT_NAME,
    UNKNOWN_FIGHTER_NAME,
)
from fightpicks.utils.datetime_utils import format_date

logger = logging.getLogger(__name__)


def card_result(fight: Fight, red_name: str, blue_name: str) -> str:
    """
    Describe a fight's outcome from the card's point of view.

    "<name> Win" for a corner winner, "Draw/No Contest" for a recorded
    draw/no contest or a winner id that matches neither corner, otherwise
    "Pending".
    """
    if fight.winner_id:
        if fight.winner_id == fight.red_fighter_id:
            return f"{red_name} Win"
        if fight.winner_id == fight.blue_fighter_id:
            return f"{blue_name} Win"
        # Winner recorded but not one of the corners
        return RESULT_DRAW_OR_NO_CONTEST
    if fight.method in NON_DECISION_METHODS:
        return RESULT_DRAW_OR_NO_CONTEST
    return RESULT_PENDING


async def list_events(session: AsyncSession, limit: Optional[int] = EVENTS_PAGE_SIZE) -> List[Dict]:
    """List events, most recent first (undated events last)."""
    query = select(Event).order_by(Event.date.is_(None), Event.date.desc(), Event.name.asc())
    if limit:
        query = query.limit(limit)
    result = await session.execute(query)
    return [
        {
            "id": event.id,
            "name": event.name or UNKNOWN_EVENT_NAME,
            "date": format_date(event.date),
            "location": event.location,
        }
        for event in result.scalars().all()
    ]


async def get_fights_for_event(session: AsyncSession, event_id: str) -> List[Dict]:
    """
    Get the fight card for an event.

    Loads the event's fights and the fighters they reference in one query
    each, then fills in both corners from an id lookup. Fighters missing from
    the database show up as "Unknown" rather than failing the card.

    Returns:
        List of fight dicts (empty when the event has no fights)

    Raises:
        NotFoundError: If the event does not exist
    """
    result = await session.execute(select(Event.id).where(Event.id == event_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Event not found")

    result = await session.execute(
        select(Fight).where(Fight.event_id == event_id).order_by(Fight.id)
    )
    fights = result.scalars().all()
    if not fights:
        return []

    fighter_ids = {fid for fight in fights for fid in fight.corner_ids}
    result = await session.execute(select(Fighter).where(Fighter.id.in_(fighter_ids)))
    fighter_map = {
        fighter.id: {"name": fighter.name, "record": fighter.record}
        for fighter in result.scalars().all()
    }
    unknown = {"name": UNKNOWN_FIGHTER_NAME, "record": ""}

    card = []
    for fight in fights:
        red = fighter_map.get(fight.red_fighter_id, unknown)
        blue = fighter_map.get(fight.blue_fighter_id, unknown)
        card.append({
            "fight_id": fight.id,
            "fighter_a": {"id": fight.red_fighter_id, **red},
            "fighter_b": {"id": fight.blue_fighter_id, **blue},
            "weight_class": fight.division or DEFAULT_WEIGHT_CLASS,
            "result": card_result(fight, red["name"], blue["name"]),
            "method": fight.method or MISSING_VALUE,
            "round": fight.finish_round if fight.finish_round is not None else MISSING_VALUE,
        })
    return card

"""
Fighter history lookup.

Fights store their result from the fixed red/blue corner perspective, so the
outcome for a searched fighter depends on which corner they had in each
particular fight.
"""

from typing import Dict
import logging

from sqlalchemy import select, or_, func
from sqlalchemy.orm import aliased
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.models import Event, Fight, Fighter
from fightpicks.services.errors import ValidationError
from fightpicks.utils.constants import (
    NON_DECISION_METHODS,
    RESULT_DRAW_OR_NO_CONTEST,
    RESULT_LOSS,
    RESULT_PENDING,
    RESULT_WIN,
)
from fightpicks.utils.datetime_utils import format_date

logger = logging.getLogger(__name__)

NO_FIGHTERS_MESSAGE = "No fighters found"
NO_FIGHTS_MESSAGE = "Fighter found but no fights recorded"


def result_for(fighter_id: str, opponent_id: str, winner_id, method) -> str:
    """
    Outcome of a fight for one of its fighters.

    Win/Loss when a winner is recorded, the method itself for a draw or no
    contest, otherwise Pending. A winner id matching neither corner reads as
    Draw/No Contest.
    """
    if winner_id:
        if winner_id == fighter_id:
            return RESULT_WIN
        if winner_id == opponent_id:
            return RESULT_LOSS
        return RESULT_DRAW_OR_NO_CONTEST
    if method in NON_DECISION_METHODS:
        return method
    return RESULT_PENDING


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def get_fighter_history(session: AsyncSession, name_query: str) -> Dict:
    """
    Find fighters whose name contains the query and list their fights.

    Matching is case-insensitive and may hit several fighters; their fights
    are pooled, newest event first. A fight between two matched fighters
    appears once per fighter, each from that fighter's side.

    Returns:
        {"fights": [...], "fighters": [...], "message": optional str}

    Raises:
        ValidationError: If the query is blank
    """
    name_query = (name_query or "").strip()
    if not name_query:
        raise ValidationError("Fighter name is required")

    pattern = f"%{_escape_like(name_query.lower())}%"
    result = await session.execute(
        select(Fighter.id, Fighter.name)
        .where(func.lower(Fighter.name).like(pattern, escape="\\"))
        .order_by(Fighter.name)
    )
    fighters = [{"id": row.id, "name": row.name} for row in result.all()]
    if not fighters:
        return {"fights": [], "fighters": [], "message": NO_FIGHTERS_MESSAGE}

    matched = {f["id"]: f["name"] for f in fighters}
    matched_ids = list(matched)
    red = aliased(Fighter)
    blue = aliased(Fighter)
    result = await session.execute(
        select(
            Fight.id.label("fight_id"),
            Fight.red_fighter_id,
            Fight.blue_fighter_id,
            Fight.winner_id,
            Fight.method,
            Fight.finish_round,
            Event.name.label("event_name"),
            Event.date.label("event_date"),
            Event.location,
            red.name.label("red_name"),
            blue.name.label("blue_name"),
        )
        .join(Event, Fight.event_id == Event.id)
        .join(red, Fight.red_fighter_id == red.id)
        .join(blue, Fight.blue_fighter_id == blue.id)
        .where(or_(Fight.red_fighter_id.in_(matched_ids), Fight.blue_fighter_id.in_(matched_ids)))
    )

    history = []
    for row in result.all():
        corners = (
            (row.red_fighter_id, row.blue_fighter_id, row.blue_name),
            (row.blue_fighter_id, row.red_fighter_id, row.red_name),
        )
        for fighter_id, opponent_id, opponent in corners:
            if fighter_id not in matched:
                continue
            history.append(({
                "fighter": matched[fighter_id],
                "event_name": row.event_name,
                "event_date": format_date(row.event_date),
                "location": row.location,
                "opponent": opponent,
                "result": result_for(fighter_id, opponent_id, row.winner_id, row.method),
                "method": row.method,
                "round": row.finish_round,
            }, row.fight_id))

    # Newest first; undated events sink to the bottom
    history.sort(key=lambda item: (item[0]["event_date"] or "", item[1]), reverse=True)
    history = [entry for entry, _ in history]

    response = {"fights": history, "fighters": fighters}
    if not history:
        response["message"] = NO_FIGHTS_MESSAGE
    logger.info(f"Fighter history for '{name_query}': {len(fighters)} fighters, {len(history)} fights")
    return response

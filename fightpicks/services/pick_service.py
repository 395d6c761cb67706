"""
Pick ledger.

A submission replaces a user's picks for one event within one league: every
existing pick in that (user, league, event) scope is deleted, then each new
selection is inserted. Resubmitting therefore always leaves exactly the latest
selection set, and a partial resubmission still clears the event's earlier
picks.

Replacement runs as a single transaction and is serialised per
(user, league, event) key, so two concurrent submissions for the same key
never interleave their delete and insert phases. Writers in other processes
are held off by the unique (user, league, fight) constraint.
"""

import asyncio
import logging
import weakref
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select, delete, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.models import Event, Fight, Fighter, League, Membership, Pick, User
from fightpicks.services.errors import (
    ValidationError,
    NotFoundError,
    NoPicksProvided,
    AllPicksFailed,
)
from fightpicks.utils.constants import UNKNOWN_EVENT_NAME
from fightpicks.utils.datetime_utils import format_date
from fightpicks.utils.identifiers import canonical_id, optional_id

logger = logging.getLogger(__name__)

Selection = Tuple[Optional[str], Optional[str]]  # (fight_id, fighter_id)

_submission_locks: "weakref.WeakValueDictionary[Tuple[str, str, str], asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


def _submission_lock(key: Tuple[str, str, str]) -> asyncio.Lock:
    lock = _submission_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _submission_locks[key] = lock
    return lock


def _resolve_selection(
    selection: Selection, fights: Dict[str, Fight], taken: set
) -> Tuple[str, str]:
    """
    Check one selection against the event's fights.

    The chosen fighter must be a corner of the named fight. Without a fight
    id, the fight is inferred from the fighter's bout on the card.

    Returns:
        (fight_id, fighter_id)

    Raises:
        ValidationError: If the selection does not match a fight on the card
    """
    fight_id, fighter_id = selection
    fighter_id = optional_id(fighter_id)
    fight_id = optional_id(fight_id)
    if fighter_id is None:
        raise ValidationError("Missing fighter id")

    if fight_id is not None:
        fight = fights.get(fight_id)
        if fight is None:
            raise ValidationError(f"Fight {fight_id} is not part of this event")
        if fighter_id not in fight.corner_ids:
            raise ValidationError(f"Fighter {fighter_id} is not in fight {fight_id}")
    else:
        matches = [f for f in fights.values() if fighter_id in f.corner_ids]
        if not matches:
            raise ValidationError(f"Fighter {fighter_id} has no fight in this event")
        fight = matches[0]

    if fight.id in taken:
        raise ValidationError(f"Duplicate pick for fight {fight.id}")
    return fight.id, fighter_id


async def _require(session: AsyncSession, model, entity_id: str, label: str) -> None:
    result = await session.execute(select(model.id).where(model.id == entity_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError(f"{label} not found")


async def submit_picks(
    session: AsyncSession,
    user_id,
    league_id,
    event_id,
    selections: Optional[Sequence[Selection]],
) -> Dict[str, int]:
    """
    Replace a user's picks for an event within a league.

    Each selection is attempted independently; a bad selection is logged and
    counted without affecting the others.

    Args:
        session: Database session
        user_id: User making the picks
        league_id: League the picks count towards
        event_id: Event the picks are for
        selections: Sequence of (fight_id, fighter_id) pairs

    Returns:
        {"saved": int, "failed": int}

    Raises:
        ValidationError: If user, league or event id is missing
        NoPicksProvided: If there are no selections (nothing is deleted)
        NotFoundError: If the user, league or event does not exist, or the
            user is not a member of the league
        AllPicksFailed: If every selection failed; prior picks are still cleared
    """
    user_id = canonical_id(user_id, "userId")
    league_id = canonical_id(league_id, "leagueId")
    event_id = canonical_id(event_id, "eventId")
    selections = list(selections or [])
    if not selections:
        raise NoPicksProvided("No picks provided")

    key = (user_id, league_id, event_id)
    async with _submission_lock(key):
        # All reads stay inside the lock so no read transaction is open while
        # the holder commits.
        await _require(session, User, user_id, "User")
        await _require(session, League, league_id, "League")
        await _require(session, Event, event_id, "Event")

        result = await session.execute(
            select(Membership.user_id).where(
                and_(Membership.user_id == user_id, Membership.league_id == league_id)
            )
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("User is not a member of this league")

        result = await session.execute(select(Fight).where(Fight.event_id == event_id))
        fights = {fight.id: fight for fight in result.scalars().all()}

        logger.info(f"Deleting old picks for User {user_id}, League {league_id}, Event {event_id}")
        await session.execute(
            delete(Pick).where(
                and_(
                    Pick.user_id == user_id,
                    Pick.league_id == league_id,
                    Pick.event_id == event_id,
                )
            )
        )

        saved = 0
        failed = 0
        taken = set()
        for selection in selections:
            try:
                fight_id, fighter_id = _resolve_selection(selection, fights, taken)
            except ValidationError as e:
                logger.warning(f"Failed to save pick {selection!r}: {e.message}")
                failed += 1
                continue

            try:
                async with session.begin_nested():
                    session.add(Pick(
                        user_id=user_id,
                        league_id=league_id,
                        event_id=event_id,
                        fight_id=fight_id,
                        fighter_id=fighter_id,
                        points_earned=0,
                    ))
            except SQLAlchemyError as e:
                logger.warning(f"Failed to save pick for fighter {fighter_id}: {e}")
                failed += 1
                continue

            taken.add(fight_id)
            saved += 1

        await session.commit()

    logger.info(f"Picks for User {user_id}, Event {event_id}: {saved} saved, {failed} failed")

    if saved == 0 and failed > 0:
        raise AllPicksFailed("All picks failed to save. Check server logs.", failed=failed)

    return {"saved": saved, "failed": failed}


def selections_from_payload(picks: Iterable) -> List[Selection]:
    """Turn [{fightId, fighterId}] style items (dicts or models) into selections."""
    selections = []
    for pick in picks:
        if isinstance(pick, dict):
            selections.append((pick.get("fightId"), pick.get("fighterId")))
        else:
            selections.append((getattr(pick, "fight_id", None), getattr(pick, "fighter_id", None)))
    return selections


async def get_user_picks(session: AsyncSession, user_id: str, league_id: str) -> List[Dict]:
    """
    Get a user's picks in a league with event and fighter details resolved.

    Picks whose event or fighter rows are missing are still returned, with
    placeholder names.
    """
    user_id = canonical_id(user_id, "userId")
    league_id = canonical_id(league_id, "leagueId")
    result = await session.execute(
        select(Pick)
        .where(and_(Pick.user_id == user_id, Pick.league_id == league_id))
        .order_by(Pick.event_id, Pick.fight_id)
    )
    picks = result.scalars().all()
    if not picks:
        return []

    fighter_ids = {p.fighter_id for p in picks}
    event_ids = {p.event_id for p in picks}
    fighters = {
        f.id: f
        for f in (await session.execute(select(Fighter).where(Fighter.id.in_(fighter_ids)))).scalars()
    }
    events = {
        e.id: e
        for e in (await session.execute(select(Event).where(Event.id.in_(event_ids)))).scalars()
    }

    rows = []
    for pick in picks:
        fighter = fighters.get(pick.fighter_id)
        event = events.get(pick.event_id)
        rows.append({
            "pick_id": pick.id,
            "event_id": pick.event_id,
            "event_name": (event.name or UNKNOWN_EVENT_NAME) if event else f"Unknown Event (ID: {pick.event_id})",
            "event_date": format_date(event.date) if event else None,
            "fight_id": pick.fight_id,
            "fighter_id": pick.fighter_id,
            "fighter_name": fighter.name if fighter else f"Unknown (ID: {pick.fighter_id})",
            "fighter_record": fighter.record if fighter else "0-0-0",
            "weight_class": (fighter.weight_class or "N/A") if fighter else "N/A",
            "points_earned": pick.points_earned or 0,
        })

    # Most recent events first
    rows.sort(key=lambda r: r["event_date"] or "", reverse=True)
    return rows

"""
League and membership operations.

Leagues are joined only through their league code. The creator is enrolled
as Owner; everyone else joins as Member. A league can only be deleted once
no memberships or picks reference it.
"""

import secrets
import string
import logging
from typing import List, Dict, Optional

from sqlalchemy import select, delete, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.models import League, Membership, MembershipRole, Pick, User
from fightpicks.services.errors import ValidationError, NotFoundError, ConflictError
from fightpicks.services.leaderboard_service import member_points_query, sort_standings
from fightpicks.utils.constants import LEAGUE_CODE_LENGTH
from fightpicks.utils.datetime_utils import format_date
from fightpicks.utils.identifiers import canonical_id

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_league_code(length: int = LEAGUE_CODE_LENGTH) -> str:
    """Random upper-case alphanumeric join code."""
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


def _league_to_dict(league: League) -> Dict:
    return {
        "id": league.id,
        "name": league.name,
        "league_code": league.league_code,
        "scoring_rules": league.scoring_rules,
        "creation_date": format_date(league.creation_date),
        "owner_id": league.owner_id,
    }


async def create_league(
    session: AsyncSession,
    name: Optional[str],
    owner_id,
    scoring_rules: Optional[str] = None,
    league_code: Optional[str] = None,
) -> Dict:
    """
    Create a new league and enroll its owner.

    Raises:
        ValidationError: If name or owner is missing
        NotFoundError: If the owner is not a registered user
        ConflictError: If the league code is already taken
    """
    name = (name or "").strip()
    if not name or owner_id is None or not str(owner_id).strip():
        raise ValidationError("League name and OwnerID are required")
    owner_id = canonical_id(owner_id, "ownerID")

    result = await session.execute(select(User.id).where(User.id == owner_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("OwnerID does not exist")

    code = (league_code or "").strip() or generate_league_code()
    result = await session.execute(select(League.id).where(League.league_code == code))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("League code already exists")

    league = League(
        name=name,
        owner_id=owner_id,
        scoring_rules=scoring_rules or None,
        league_code=code,
    )
    session.add(league)
    try:
        await session.flush()  # Get the league ID
    except IntegrityError:
        await session.rollback()
        raise ConflictError("League code already exists")

    # Add owner as member with 'Owner' role
    session.add(Membership(user_id=owner_id, league_id=league.id, role=MembershipRole.OWNER.value))
    await session.commit()
    await session.refresh(league)

    logger.info(f"League created: {name} (ID: {league.id}, Code: {code})")
    return _league_to_dict(league)


async def get_league(session: AsyncSession, league_id: str) -> Dict:
    """Get a league by ID."""
    result = await session.execute(select(League).where(League.id == league_id))
    league = result.scalar_one_or_none()
    if not league:
        raise NotFoundError("League not found")
    return _league_to_dict(league)


async def join_league(session: AsyncSession, league_code: Optional[str], user_id) -> Dict:
    """
    Join a league by its code.

    Raises:
        ValidationError: If code or user is missing
        NotFoundError: If no league has the code, or the user does not exist
        ConflictError: If the user is already a member
    """
    league_code = (league_code or "").strip()
    if not league_code or user_id is None or not str(user_id).strip():
        raise ValidationError("League code and user ID are required")
    user_id = canonical_id(user_id, "userId")

    result = await session.execute(select(League).where(League.league_code == league_code))
    league = result.scalar_one_or_none()
    if not league:
        raise NotFoundError("Invalid league code")

    result = await session.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("User not found")

    result = await session.execute(
        select(Membership).where(
            and_(Membership.user_id == user_id, Membership.league_id == league.id)
        )
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError("You are already a member of this league")

    session.add(Membership(user_id=user_id, league_id=league.id, role=MembershipRole.MEMBER.value))
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("You are already a member of this league")

    logger.info(f"User {user_id} joined league: {league.name} (ID: {league.id})")
    return {"league_id": league.id, "league_name": league.name}


async def leave_league(session: AsyncSession, league_id: str, user_id: str) -> None:
    """
    Remove a user's membership and their picks in the league.

    Raises:
        NotFoundError: If the user is not a member
    """
    result = await session.execute(
        delete(Membership).where(
            and_(Membership.user_id == user_id, Membership.league_id == league_id)
        )
    )
    if result.rowcount == 0:
        await session.rollback()
        raise NotFoundError("Membership not found")

    await session.execute(
        delete(Pick).where(and_(Pick.user_id == user_id, Pick.league_id == league_id))
    )
    await session.commit()
    logger.info(f"User {user_id} left league {league_id}")


async def delete_league(session: AsyncSession, league_id: str) -> None:
    """
    Delete a league that has no members and no picks.

    Raises:
        ConflictError: If memberships or picks still reference the league
        NotFoundError: If the league does not exist
    """
    member_count = await session.scalar(
        select(func.count()).select_from(Membership).where(Membership.league_id == league_id)
    )
    if member_count:
        raise ConflictError(
            "Cannot delete league because it has members. Please remove all members first."
        )

    pick_count = await session.scalar(
        select(func.count()).select_from(Pick).where(Pick.league_id == league_id)
    )
    if pick_count:
        raise ConflictError(
            "Cannot delete league because it has picks. Please remove all picks first."
        )

    try:
        result = await session.execute(delete(League).where(League.id == league_id))
    except IntegrityError:
        # A membership or pick was added between the checks and the delete
        await session.rollback()
        raise ConflictError(
            "Cannot delete league because it has associated records (members or picks). "
            "Please remove all associated data first."
        )
    if result.rowcount == 0:
        await session.rollback()
        raise NotFoundError("League not found")

    await session.commit()
    logger.info(f"League deleted: ID {league_id}")


async def get_user_leagues(session: AsyncSession, user_id: str) -> List[Dict]:
    """Get all leagues a user is a member of, newest first."""
    result = await session.execute(
        select(League, Membership.role, Membership.join_date)
        .join(Membership, Membership.league_id == League.id)
        .where(Membership.user_id == user_id)
        .order_by(League.creation_date.desc(), League.name.asc())
    )
    return [
        {
            **_league_to_dict(league),
            "role": role,
            "join_date": format_date(join_date),
        }
        for league, role, join_date in result.all()
    ]


async def list_league_members(session: AsyncSession, league_id: str) -> List[Dict]:
    """List league members with role, join date and total points, in leaderboard order."""
    result = await session.execute(
        member_points_query(league_id, User.email, Membership.role, Membership.join_date)
    )
    return sort_standings([
        {
            "user_id": row.user_id,
            "username": row.username,
            "email": row.email,
            "role": row.role,
            "join_date": format_date(row.join_date),
            "total_points": int(row.total_points or 0),
        }
        for row in result.all()
    ])

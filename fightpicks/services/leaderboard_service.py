"""
Per-league leaderboards.

Points for a member are the sum of points_earned over their picks in that
league. Members without picks still rank, with 0.
"""

from typing import List, Dict
import logging

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.models import League, Membership, Pick, User
from fightpicks.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def member_points_query(league_id: str, *extra_columns):
    """
    Select one row per member of a league with their summed pick points.

    Memberships are inner-joined to users and left-joined to picks restricted
    to the same league, so picks made outside the league (or by non-members)
    never count. Extra columns must be functionally dependent on the member.
    """
    total_points = func.coalesce(func.sum(Pick.points_earned), 0).label("total_points")
    return (
        select(User.id.label("user_id"), User.username, *extra_columns, total_points)
        .select_from(Membership)
        .join(User, User.id == Membership.user_id)
        .outerjoin(Pick, and_(Pick.user_id == User.id, Pick.league_id == league_id))
        .where(Membership.league_id == league_id)
        .group_by(User.id, User.username, *extra_columns)
    )


def sort_standings(rows: List[Dict]) -> List[Dict]:
    """
    Order by total points descending, then username ascending.

    Sorting happens here rather than in SQL so username ties break
    case-sensitively regardless of the database collation.
    """
    return sorted(rows, key=lambda r: (-r["total_points"], r["username"]))


async def ensure_league_exists(session: AsyncSession, league_id: str) -> None:
    result = await session.execute(select(League.id).where(League.id == league_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("League not found")


async def get_leaderboard(session: AsyncSession, league_id: str) -> List[Dict]:
    """
    Get the ranked leaderboard for a league.

    Args:
        session: Database session
        league_id: League id

    Returns:
        List of {rank, user_id, username, total_points}, rank 1-based

    Raises:
        NotFoundError: If the league does not exist
    """
    await ensure_league_exists(session, league_id)

    result = await session.execute(member_points_query(league_id))
    standings = sort_standings([
        {
            "user_id": row.user_id,
            "username": row.username,
            "total_points": int(row.total_points or 0),
        }
        for row in result.all()
    ])

    for rank, row in enumerate(standings, start=1):
        row["rank"] = rank

    logger.info(f"Leaderboard retrieved for League ID: {league_id} ({len(standings)} members)")
    return standings

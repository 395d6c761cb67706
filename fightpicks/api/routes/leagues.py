"""League, membership and leaderboard route handlers."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.db import get_db_session
from fightpicks.services import league_service, leaderboard_service
from fightpicks.models.schemas import (
    LeagueCreate,
    LeagueCreateResponse,
    LeagueDetail,
    LeagueDetailResponse,
    JoinLeagueRequest,
    JoinLeagueResponse,
    UserLeague,
    UserLeaguesResponse,
    LeagueMemberEntry,
    LeagueMembersResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    SuccessResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/league/create", response_model=LeagueCreateResponse)
async def create_league(payload: LeagueCreate, session: AsyncSession = Depends(get_db_session)):
    """
    Create a new league. The owner is enrolled as its first member.
    A league code is generated when none is supplied.
    """
    league = await league_service.create_league(
        session=session,
        name=payload.name,
        owner_id=payload.owner_id,
        scoring_rules=payload.scoring_rules,
        league_code=payload.league_code,
    )
    return LeagueCreateResponse(
        message="League created successfully",
        league_id=league["id"],
        league_code=league["league_code"],
    )


@router.get("/api/league/{league_id}", response_model=LeagueDetailResponse)
async def get_league(league_id: str, session: AsyncSession = Depends(get_db_session)):
    """Get league details including the join code."""
    league = await league_service.get_league(session, league_id.strip())
    return LeagueDetailResponse(data=LeagueDetail(**league))


@router.delete("/api/league/{league_id}", response_model=SuccessResponse)
async def delete_league(league_id: str, session: AsyncSession = Depends(get_db_session)):
    """
    Delete a league. Refused while members or picks still reference it.
    """
    await league_service.delete_league(session, league_id.strip())
    return SuccessResponse(message="League deleted successfully")


@router.post("/api/join-league", response_model=JoinLeagueResponse)
async def join_league(payload: JoinLeagueRequest, session: AsyncSession = Depends(get_db_session)):
    """Join a league by its code."""
    joined = await league_service.join_league(session, payload.league_code, payload.user_id)
    return JoinLeagueResponse(
        message=f"Successfully joined league: {joined['league_name']}",
        league_id=joined["league_id"],
        league_name=joined["league_name"],
    )


@router.delete("/api/league/{league_id}/members/{user_id}", response_model=SuccessResponse)
async def leave_league(league_id: str, user_id: str, session: AsyncSession = Depends(get_db_session)):
    """Remove a member (and their picks) from a league."""
    await league_service.leave_league(session, league_id.strip(), user_id.strip())
    return SuccessResponse(message="Member removed from league")


@router.get("/api/user-leagues/{user_id}", response_model=UserLeaguesResponse)
async def get_user_leagues(user_id: str, session: AsyncSession = Depends(get_db_session)):
    """List the leagues a user belongs to."""
    leagues = await league_service.get_user_leagues(session, user_id.strip())
    return UserLeaguesResponse(data=[UserLeague(**league) for league in leagues])


@router.get("/api/league-members/{league_id}", response_model=LeagueMembersResponse)
async def get_league_members(league_id: str, session: AsyncSession = Depends(get_db_session)):
    """List league members with their points."""
    members = await league_service.list_league_members(session, league_id.strip())
    return LeagueMembersResponse(data=[LeagueMemberEntry(**member) for member in members])


@router.get("/api/leaderboard/{league_id}", response_model=LeaderboardResponse)
async def get_leaderboard(league_id: str, session: AsyncSession = Depends(get_db_session)):
    """
    Ranked leaderboard for a league: total points descending, username
    ascending on ties. Members without picks appear with 0 points.
    """
    standings = await leaderboard_service.get_leaderboard(session, league_id.strip())
    return LeaderboardResponse(data=[LeaderboardEntry(**row) for row in standings])

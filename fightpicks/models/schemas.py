"""
Pydantic models for API request/response validation.

Response fields are exposed under the PascalCase names the web client reads
(UserID, TotalPoints, ...). Identifiers are always strings; numeric ids sent
by older clients are accepted and converted, never the other way round.
"""

from typing import Optional, List, Union
from pydantic import BaseModel, Field, ConfigDict


class ApiModel(BaseModel):
    """Base for request bodies: accept field names or aliases, numbers as id strings."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SuccessResponse(ResponseModel):
    success: bool = True
    message: Optional[str] = None


class ErrorResponse(ResponseModel):
    success: bool = False
    error: str


class HealthResponse(ResponseModel):
    """Health check response."""

    status: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class RegisterRequest(ApiModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterResponse(SuccessResponse):
    user_id: str = Field(alias="userId")
    username: str


class LoginRequest(ApiModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(SuccessResponse):
    user_id: str = Field(alias="userId")
    username: str
    email: str


# ---------------------------------------------------------------------------
# Leagues
# ---------------------------------------------------------------------------


class LeagueCreate(ApiModel):
    name: Optional[str] = None
    owner_id: Optional[str] = Field(default=None, alias="ownerID")
    scoring_rules: Optional[str] = Field(default=None, alias="scoringRules")
    league_code: Optional[str] = Field(default=None, alias="leagueCode")


class LeagueCreateResponse(SuccessResponse):
    league_id: str = Field(alias="leagueId")
    league_code: str = Field(alias="leagueCode")


class LeagueDetail(ResponseModel):
    id: str = Field(alias="LeagueID")
    name: str = Field(alias="Name")
    league_code: str = Field(alias="LeagueCode")
    scoring_rules: Optional[str] = Field(default=None, alias="ScoringRules")
    creation_date: Optional[str] = Field(default=None, alias="CreationDate")
    owner_id: str = Field(alias="OwnerID")


class LeagueDetailResponse(ResponseModel):
    success: bool = True
    data: LeagueDetail


class JoinLeagueRequest(ApiModel):
    league_code: Optional[str] = Field(default=None, alias="leagueCode")
    user_id: Optional[str] = Field(default=None, alias="userId")


class JoinLeagueResponse(SuccessResponse):
    league_id: str = Field(alias="leagueId")
    league_name: str = Field(alias="leagueName")


class UserLeague(ResponseModel):
    id: str = Field(alias="LeagueID")
    name: str = Field(alias="Name")
    league_code: str = Field(alias="LeagueCode")
    creation_date: Optional[str] = Field(default=None, alias="CreationDate")
    role: str = Field(alias="Role")
    join_date: Optional[str] = Field(default=None, alias="JoinDate")


class UserLeaguesResponse(ResponseModel):
    success: bool = True
    data: List[UserLeague]


class LeagueMemberEntry(ResponseModel):
    user_id: str = Field(alias="UserID")
    username: str = Field(alias="Username")
    email: str = Field(alias="Email")
    role: str = Field(alias="Role")
    join_date: Optional[str] = Field(default=None, alias="JoinDate")
    total_points: int = Field(alias="TotalPoints")


class LeagueMembersResponse(ResponseModel):
    success: bool = True
    data: List[LeagueMemberEntry]


class LeaderboardEntry(ResponseModel):
    """One ranked row of a league leaderboard."""

    rank: int = Field(alias="Rank")
    user_id: str = Field(alias="UserID")
    username: str = Field(alias="Username")
    total_points: int = Field(alias="TotalPoints")


class LeaderboardResponse(ResponseModel):
    success: bool = True
    data: List[LeaderboardEntry]


# ---------------------------------------------------------------------------
# Events, fights and fighters
# ---------------------------------------------------------------------------


class EventSummary(ResponseModel):
    id: str = Field(alias="EventID")
    name: str = Field(alias="Name")
    date: Optional[str] = Field(default=None, alias="Date")
    location: Optional[str] = Field(default=None, alias="Location")


class EventsResponse(ResponseModel):
    success: bool = True
    data: List[EventSummary]


class FightCardEntry(ResponseModel):
    """A fight on an event card with both corners filled in."""

    fight_id: str = Field(alias="FightID")
    fighter_a_id: str = Field(alias="FighterA_ID")
    fighter_b_id: str = Field(alias="FighterB_ID")
    fighter_a_name: str = Field(alias="FighterAName")
    fighter_a_record: str = Field(alias="FighterARecord")
    fighter_b_name: str = Field(alias="FighterBName")
    fighter_b_record: str = Field(alias="FighterBRecord")
    weight_class: str = Field(alias="WeightClass")
    result: str = Field(alias="Result")
    method: str = Field(alias="Method")
    round: Union[int, str] = Field(alias="Round")

    @classmethod
    def from_card(cls, fight: dict) -> "FightCardEntry":
        return cls(
            fight_id=fight["fight_id"],
            fighter_a_id=fight["fighter_a"]["id"],
            fighter_b_id=fight["fighter_b"]["id"],
            fighter_a_name=fight["fighter_a"]["name"],
            fighter_a_record=fight["fighter_a"]["record"],
            fighter_b_name=fight["fighter_b"]["name"],
            fighter_b_record=fight["fighter_b"]["record"],
            weight_class=fight["weight_class"],
            result=fight["result"],
            method=fight["method"],
            round=fight["round"],
        )


class FightCardResponse(ResponseModel):
    success: bool = True
    data: List[FightCardEntry]


class FighterHistoryEntry(ResponseModel):
    fighter: str = Field(alias="Fighter")
    event_name: Optional[str] = Field(default=None, alias="EventName")
    event_date: Optional[str] = Field(default=None, alias="EventDate")
    location: Optional[str] = Field(default=None, alias="Location")
    opponent: str = Field(alias="Opponent")
    result: str = Field(alias="Result")
    method: Optional[str] = Field(default=None, alias="Method")
    round: Optional[int] = Field(default=None, alias="Round")


class FighterMatch(ResponseModel):
    id: str = Field(alias="FighterID")
    name: str = Field(alias="Name")


class FighterHistoryResponse(ResponseModel):
    success: bool = True
    data: List[FighterHistoryEntry]
    fighters: List[FighterMatch]
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Picks
# ---------------------------------------------------------------------------


class PickSelection(ApiModel):
    fight_id: Optional[str] = Field(default=None, alias="fightId")
    fighter_id: Optional[str] = Field(default=None, alias="fighterId")


class SavePicksRequest(ApiModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    league_id: Optional[str] = Field(default=None, alias="leagueId")
    event_id: Optional[str] = Field(default=None, alias="eventId")
    picks: Optional[List[PickSelection]] = None


class SavePicksResponse(SuccessResponse):
    picks_count: int = Field(alias="picksCount")


class UserPickEntry(ResponseModel):
    pick_id: str = Field(alias="PickID")
    event_id: str = Field(alias="EventID")
    event_name: str = Field(alias="EventName")
    event_date: Optional[str] = Field(default=None, alias="EventDate")
    fight_id: str = Field(alias="FightID")
    fighter_id: str = Field(alias="FighterID")
    fighter_name: str = Field(alias="FighterName")
    fighter_record: str = Field(alias="FighterRecord")
    weight_class: str = Field(alias="WeightClass")
    points_earned: int = Field(alias="PointsEarned")


class UserPicksResponse(ResponseModel):
    success: bool = True
    data: List[UserPickEntry]

"""
SQLAlchemy ORM models for the fight picks league system.

Every identifier column is a string. Rows created here (users, leagues, picks)
get random hex ids; events, fighters and fights keep the ids they were
imported with.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from fightpicks.database.db import Base
from fightpicks.utils.identifiers import new_id
from fightpicks.utils.datetime_utils import today


class MembershipRole(str, enum.Enum):
    """League membership role."""

    OWNER = "Owner"
    MEMBER = "Member"


class User(Base):
    """Registered users."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=new_id)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    registration_date = Column(Date, nullable=False, default=today)

    # Relationships
    memberships = relationship("Membership", back_populates="user")
    owned_leagues = relationship("League", back_populates="owner")


class League(Base):
    """Pick'em leagues, joined by league code."""

    __tablename__ = "leagues"

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    owner_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    scoring_rules = Column(Text, nullable=True)
    league_code = Column(String(32), nullable=False, unique=True)
    creation_date = Column(Date, nullable=False, default=today)

    # Relationships
    owner = relationship("User", back_populates="owned_leagues")
    members = relationship("Membership", back_populates="league")

    __table_args__ = (Index("idx_leagues_owner", "owner_id"),)


class Membership(Base):
    """Join table (User ↔ League). One row per (user, league) pair."""

    __tablename__ = "memberships"

    user_id = Column(String(64), ForeignKey("users.id"), primary_key=True)
    league_id = Column(String(64), ForeignKey("leagues.id"), primary_key=True)
    role = Column(String, nullable=False, default=MembershipRole.MEMBER.value)
    join_date = Column(Date, nullable=False, default=today)

    # Relationships
    user = relationship("User", back_populates="memberships")
    league = relationship("League", back_populates="members")

    __table_args__ = (
        CheckConstraint("role IN ('Owner', 'Member')", name="ck_memberships_role"),
        Index("idx_memberships_league", "league_id"),
    )


class Event(Base):
    """Fight cards. Imported from an external source."""

    __tablename__ = "events"

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    date = Column(Date, nullable=True)
    location = Column(String, nullable=True)

    # Relationships
    fights = relationship("Fight", back_populates="event")

    __table_args__ = (Index("idx_events_date", "date"),)


class Fighter(Base):
    """Fighter profiles. Imported from an external source."""

    __tablename__ = "fighters"

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    weight_class = Column(String, nullable=True)
    wins = Column(Integer, nullable=True)
    losses = Column(Integer, nullable=True)
    draws = Column(Integer, nullable=True)

    @property
    def record(self) -> str:
        """Record as wins-losses-draws, or N/A when no record was imported."""
        if self.wins is None:
            return "N/A"
        return f"{self.wins}-{self.losses or 0}-{self.draws or 0}"

    __table_args__ = (Index("idx_fighters_name", "name"),)


class Fight(Base):
    """
    Bouts on an event card.

    The red and blue corners are fixed per fight; the winner (when decided)
    is one of the two corner fighter ids.
    """

    __tablename__ = "fights"

    id = Column(String(64), primary_key=True)
    event_id = Column(String(64), ForeignKey("events.id"), nullable=False)
    red_fighter_id = Column(String(64), ForeignKey("fighters.id"), nullable=False)
    blue_fighter_id = Column(String(64), ForeignKey("fighters.id"), nullable=False)
    winner_id = Column(String(64), nullable=True)  # None while pending, or on draw / no contest
    method = Column(String, nullable=True)  # e.g. "KO/TKO", "Decision", "Draw", "No Contest"
    finish_round = Column(Integer, nullable=True)
    division = Column(String, nullable=True)

    # Relationships
    event = relationship("Event", back_populates="fights")
    red_fighter = relationship("Fighter", foreign_keys=[red_fighter_id], lazy="select")
    blue_fighter = relationship("Fighter", foreign_keys=[blue_fighter_id], lazy="select")

    @property
    def corner_ids(self) -> tuple:
        return (self.red_fighter_id, self.blue_fighter_id)

    __table_args__ = (
        Index("idx_fights_event", "event_id"),
        Index("idx_fights_red", "red_fighter_id"),
        Index("idx_fights_blue", "blue_fighter_id"),
    )


class Pick(Base):
    """A user's predicted winner for one fight, scoped to a league and event."""

    __tablename__ = "picks"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    league_id = Column(String(64), ForeignKey("leagues.id"), nullable=False)
    event_id = Column(String(64), ForeignKey("events.id"), nullable=False)
    fight_id = Column(String(64), ForeignKey("fights.id"), nullable=False)
    fighter_id = Column(String(64), ForeignKey("fighters.id"), nullable=False)
    points_earned = Column(Integer, nullable=False, default=0)  # Set by external grading only

    __table_args__ = (
        UniqueConstraint("user_id", "league_id", "fight_id", name="uq_picks_user_league_fight"),
        Index("idx_picks_scope", "user_id", "league_id", "event_id"),
        Index("idx_picks_league", "league_id"),
    )

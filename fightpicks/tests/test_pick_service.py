"""
Tests for the pick ledger.

Covers replacement semantics (resubmission leaves exactly the latest
selections), empty submissions, partial and total failure, fight inference,
and concurrent submissions for the same user/league/event.
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import select, func

from fightpicks.database.models import Event, Fight, Fighter, League, Membership, Pick, User
from fightpicks.services import pick_service
from fightpicks.services.errors import (
    AllPicksFailed,
    NoPicksProvided,
    NotFoundError,
    ValidationError,
)


async def _count_picks(session, **filters):
    query = select(func.count()).select_from(Pick)
    for column, value in filters.items():
        query = query.where(getattr(Pick, column) == value)
    return await session.scalar(query)


async def _picked_fighters(session, user_id, league_id, event_id):
    result = await session.execute(
        select(Pick.fighter_id).where(
            Pick.user_id == user_id, Pick.league_id == league_id, Pick.event_id == event_id
        )
    )
    return sorted(result.scalars().all())


@pytest_asyncio.fixture
async def card(db_session):
    """
    One user in one league, and two events:
    E1 with fights F1 (A vs B) and F2 (C vs D), E2 with fight F3 (A vs C).
    """
    user = User(id="u1", username="alice", email="alice@example.com", password_hash="hash")
    db_session.add(user)
    await db_session.flush()
    league = League(id="L1", name="Main Card", owner_id="u1", league_code="CODE1")
    db_session.add(league)
    await db_session.flush()
    db_session.add(Membership(user_id="u1", league_id="L1", role="Owner"))

    for fighter_id, name in [("A", "Anderson"), ("B", "Barboza"), ("C", "Cejudo"), ("D", "Diaz")]:
        db_session.add(Fighter(id=fighter_id, name=name, wins=10, losses=2, draws=0))
    db_session.add(Event(id="E1", name="Fight Night 1"))
    db_session.add(Event(id="E2", name="Fight Night 2"))
    await db_session.flush()
    db_session.add(Fight(id="F1", event_id="E1", red_fighter_id="A", blue_fighter_id="B"))
    db_session.add(Fight(id="F2", event_id="E1", red_fighter_id="C", blue_fighter_id="D"))
    db_session.add(Fight(id="F3", event_id="E2", red_fighter_id="A", blue_fighter_id="C"))
    await db_session.commit()
    return {"user_id": "u1", "league_id": "L1"}


# ──────────────────────────────────────────────────────────────
# Replacement
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_submit_picks_saves_selections(db_session, card):
    counts = await pick_service.submit_picks(
        db_session, "u1", "L1", "E1", [("F1", "A"), ("F2", "D")]
    )
    assert counts == {"saved": 2, "failed": 0}
    assert await _picked_fighters(db_session, "u1", "L1", "E1") == ["A", "D"]


@pytest.mark.asyncio
async def test_resubmission_replaces_previous_picks(db_session, card):
    """Submitting the same set twice leaves exactly one copy."""
    selections = [("F1", "A"), ("F2", "C")]
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", selections)
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", selections)

    assert await _count_picks(db_session, user_id="u1", league_id="L1", event_id="E1") == 2


@pytest.mark.asyncio
async def test_partial_resubmission_clears_older_picks(db_session, card):
    """A smaller resubmission removes picks for fights not picked again."""
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "A"), ("F2", "C")])
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "B")])

    assert await _picked_fighters(db_session, "u1", "L1", "E1") == ["B"]


@pytest.mark.asyncio
async def test_resubmission_leaves_other_events_alone(db_session, card):
    await pick_service.submit_picks(db_session, "u1", "L1", "E2", [("F3", "C")])
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "A")])
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "B")])

    assert await _picked_fighters(db_session, "u1", "L1", "E2") == ["C"]


@pytest.mark.asyncio
async def test_numeric_ids_are_accepted_as_strings(db_session, card):
    db_session.add(Fighter(id="7", name="Seven"))
    db_session.add(Fighter(id="8", name="Eight"))
    await db_session.flush()
    db_session.add(Fight(id="9", event_id="E1", red_fighter_id="7", blue_fighter_id="8"))
    await db_session.commit()

    counts = await pick_service.submit_picks(db_session, "u1", "L1", "E1", [(9, 7)])
    assert counts["saved"] == 1
    assert await _picked_fighters(db_session, "u1", "L1", "E1") == ["7"]


# ──────────────────────────────────────────────────────────────
# Empty submissions and failures
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_no_picks_provided_writes_nothing(db_session, card):
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "A")])

    with pytest.raises(NoPicksProvided):
        await pick_service.submit_picks(db_session, "u1", "L1", "E1", [])
    with pytest.raises(NoPicksProvided):
        await pick_service.submit_picks(db_session, "u1", "L1", "E1", None)

    # Previous picks survive an empty submission
    assert await _picked_fighters(db_session, "u1", "L1", "E1") == ["A"]


@pytest.mark.asyncio
async def test_partial_failure_counts_bad_selections(db_session, card):
    counts = await pick_service.submit_picks(
        db_session,
        "u1",
        "L1",
        "E1",
        [("F1", "A"), ("F2", "A"), ("F3", "C"), (None, "")],
    )
    assert counts == {"saved": 1, "failed": 3}
    assert await _picked_fighters(db_session, "u1", "L1", "E1") == ["A"]


@pytest.mark.asyncio
async def test_duplicate_fight_in_one_submission_fails_second(db_session, card):
    counts = await pick_service.submit_picks(
        db_session, "u1", "L1", "E1", [("F1", "A"), ("F1", "B")]
    )
    assert counts == {"saved": 1, "failed": 1}
    assert await _picked_fighters(db_session, "u1", "L1", "E1") == ["A"]


@pytest.mark.asyncio
async def test_all_picks_failed_still_clears_previous(db_session, card):
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "A")])

    with pytest.raises(AllPicksFailed) as exc_info:
        await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "Z"), ("F9", "A")])
    assert exc_info.value.failed == 2

    assert await _count_picks(db_session, user_id="u1", league_id="L1", event_id="E1") == 0


@pytest.mark.asyncio
async def test_missing_scope_ids_raise_validation_error(db_session, card):
    with pytest.raises(ValidationError, match="userId"):
        await pick_service.submit_picks(db_session, None, "L1", "E1", [("F1", "A")])
    with pytest.raises(ValidationError, match="eventId"):
        await pick_service.submit_picks(db_session, "u1", "L1", "  ", [("F1", "A")])


@pytest.mark.asyncio
async def test_unknown_event_raises_not_found(db_session, card):
    with pytest.raises(NotFoundError, match="Event not found"):
        await pick_service.submit_picks(db_session, "u1", "L1", "E404", [("F1", "A")])


@pytest.mark.asyncio
async def test_non_member_cannot_submit_picks(db_session, card):
    """Picks are only recorded for members, so leaving a league clears them all."""
    db_session.add(User(id="u2", username="stranger", email="stranger@example.com", password_hash="hash"))
    await db_session.commit()

    with pytest.raises(NotFoundError, match="not a member"):
        await pick_service.submit_picks(db_session, "u2", "L1", "E1", [("F1", "A")])

    await db_session.rollback()
    assert await _count_picks(db_session, league_id="L1") == 0


# ──────────────────────────────────────────────────────────────
# Fight inference
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fight_inferred_from_fighter(db_session, card):
    counts = await pick_service.submit_picks(db_session, "u1", "L1", "E1", [(None, "D")])
    assert counts["saved"] == 1

    result = await db_session.execute(select(Pick.fight_id).where(Pick.fighter_id == "D"))
    assert result.scalar_one() == "F2"


@pytest.mark.asyncio
async def test_fighter_not_on_card_fails(db_session, card):
    """Fighter A is on E1 and E2; inference stays within the submitted event."""
    db_session.add(Fighter(id="X", name="Nobody"))
    await db_session.commit()

    with pytest.raises(AllPicksFailed):
        await pick_service.submit_picks(db_session, "u1", "L1", "E2", [(None, "B"), (None, "X")])


def test_selections_from_payload_accepts_dicts_and_models():
    class Item:
        fight_id = "F2"
        fighter_id = "C"

    selections = pick_service.selections_from_payload(
        [{"fightId": "F1", "fighterId": "A"}, {"fighterId": "B"}, Item()]
    )
    assert selections == [("F1", "A"), (None, "B"), ("F2", "C")]


# ──────────────────────────────────────────────────────────────
# Concurrency
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_concurrent_submissions_leave_one_set(db_session, session_factory, card):
    """Two overlapping submissions for the same key never merge their picks."""

    async def submit(selections):
        async with session_factory() as session:
            return await pick_service.submit_picks(session, "u1", "L1", "E1", selections)

    results = await asyncio.gather(
        submit([("F1", "A"), ("F2", "C")]),
        submit([("F1", "B"), ("F2", "D")]),
    )
    assert all(r["saved"] == 2 for r in results)

    picked = await _picked_fighters(db_session, "u1", "L1", "E1")
    assert picked in (["A", "C"], ["B", "D"])


# ──────────────────────────────────────────────────────────────
# Listing
# ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_user_picks_resolves_names(db_session, card):
    await pick_service.submit_picks(db_session, "u1", "L1", "E1", [("F1", "A")])

    picks = await pick_service.get_user_picks(db_session, "u1", "L1")
    assert len(picks) == 1
    pick = picks[0]
    assert pick["event_name"] == "Fight Night 1"
    assert pick["fighter_name"] == "Anderson"
    assert pick["fighter_record"] == "10-2-0"
    assert pick["weight_class"] == "N/A"
    assert pick["points_earned"] == 0


@pytest.mark.asyncio
async def test_get_user_picks_scoped_to_league(db_session, card):
    db_session.add(League(id="L2", name="Side League", owner_id="u1", league_code="CODE2"))
    await db_session.flush()
    db_session.add(Membership(user_id="u1", league_id="L2", role="Owner"))
    await db_session.commit()
    await pick_service.submit_picks(db_session, "u1", "L2", "E1", [("F1", "A")])

    assert await pick_service.get_user_picks(db_session, "u1", "L1") == []
    assert len(await pick_service.get_user_picks(db_session, "u1", "L2")) == 1


@pytest.mark.asyncio
async def test_get_user_picks_requires_ids(db_session, card):
    with pytest.raises(ValidationError, match="userId"):
        await pick_service.get_user_picks(db_session, "  ", "L1")
    with pytest.raises(ValidationError, match="leagueId"):
        await pick_service.get_user_picks(db_session, "u1", None)

"""
Import of externally sourced reference data (events, fighters, fights).

Source dumps name their columns inconsistently; every row passes through a
FieldResolver here so the stored rows always have the canonical shape.
Rows are upserted by id; a row the database rejects (for example a fight
referencing a fighter that was never imported) is skipped without losing the
rest of the batch.
"""

from typing import Any, Dict, Iterable, Mapping, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fightpicks.database.models import Event, Fight, Fighter
from fightpicks.services.field_resolver import EVENT_FIELDS, FIGHTER_FIELDS, FIGHT_FIELDS
from fightpicks.utils.constants import UNKNOWN_EVENT_NAME, UNKNOWN_FIGHTER_NAME
from fightpicks.utils.datetime_utils import parse_event_date
from fightpicks.utils.identifiers import optional_id

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def event_from_row(row: Mapping[str, Any]) -> Optional[Event]:
    fields = EVENT_FIELDS.resolve(row)
    event_id = optional_id(fields["id"])
    if event_id is None:
        return None
    return Event(
        id=event_id,
        name=_to_text(fields["name"]) or UNKNOWN_EVENT_NAME,
        date=parse_event_date(fields["date"]),
        location=_to_text(fields["location"]),
    )


def fighter_from_row(row: Mapping[str, Any]) -> Optional[Fighter]:
    fields = FIGHTER_FIELDS.resolve(row)
    fighter_id = optional_id(fields["id"])
    if fighter_id is None:
        return None
    return Fighter(
        id=fighter_id,
        name=_to_text(fields["name"]) or UNKNOWN_FIGHTER_NAME,
        weight_class=_to_text(fields["weight_class"]),
        wins=_to_int(fields["wins"]),
        losses=_to_int(fields["losses"]),
        draws=_to_int(fields["draws"]),
    )


def fight_from_row(row: Mapping[str, Any]) -> Optional[Fight]:
    fields = FIGHT_FIELDS.resolve(row)
    fight_id = optional_id(fields["id"])
    event_id = optional_id(fields["event_id"])
    red_id = optional_id(fields["red_fighter_id"])
    blue_id = optional_id(fields["blue_fighter_id"])
    if None in (fight_id, event_id, red_id, blue_id):
        return None
    return Fight(
        id=fight_id,
        event_id=event_id,
        red_fighter_id=red_id,
        blue_fighter_id=blue_id,
        winner_id=optional_id(fields["winner_id"]),
        method=_to_text(fields["method"]),
        finish_round=_to_int(fields["finish_round"]),
        division=_to_text(fields["division"]),
    )


async def _import_rows(session: AsyncSession, rows: Iterable[Mapping[str, Any]], build, label: str) -> Dict[str, int]:
    imported = 0
    skipped = 0
    for index, row in enumerate(rows):
        try:
            entity = build(row)
        except ValueError as e:
            logger.warning(f"Skipping {label} row {index}: {e}")
            skipped += 1
            continue
        if entity is None:
            logger.warning(f"Skipping {label} row {index}: missing id fields")
            skipped += 1
            continue
        try:
            async with session.begin_nested():
                await session.merge(entity)
                await session.flush()  # Duplicate ids later in the same dump merge into this row
        except SQLAlchemyError as e:
            logger.warning(f"Skipping {label} row {index}: {e}")
            skipped += 1
            continue
        imported += 1

    await session.commit()
    logger.info(f"Imported {imported} {label} rows ({skipped} skipped)")
    return {"imported": imported, "skipped": skipped}


async def import_events(session: AsyncSession, rows: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """Upsert events from raw rows."""
    return await _import_rows(session, rows, event_from_row, "event")


async def import_fighters(session: AsyncSession, rows: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """Upsert fighters from raw rows."""
    return await _import_rows(session, rows, fighter_from_row, "fighter")


async def import_fights(session: AsyncSession, rows: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """
    Upsert fights from raw rows.

    Import events and fighters first; fights reference both.
    """
    return await _import_rows(session, rows, fight_from_row, "fight")

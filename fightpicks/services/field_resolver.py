"""
Alias-based field resolution for externally sourced rows.

Event, fighter and fight dumps arrive with drifting column names
("event_id", "EventID", "id", ...). A FieldResolver maps each canonical
field to the names it may appear under, so rows are normalised once when
they enter the database and nothing downstream has to guess.
"""

from typing import Any, Dict, Mapping, Optional, Sequence


class FieldResolver:
    """
    Resolve canonical fields from a raw row by alias.

    Lookup order per field: each alias matched case-insensitively against the
    row's keys, in the order given; then, for fields listed in
    ``substring_fallback``, the first key containing the given fragment.
    Empty strings count as missing.
    """

    def __init__(
        self,
        aliases: Mapping[str, Sequence[str]],
        substring_fallback: Optional[Mapping[str, str]] = None,
    ):
        self.aliases = {field: tuple(names) for field, names in aliases.items()}
        self.substring_fallback = dict(substring_fallback or {})

    @property
    def fields(self) -> Sequence[str]:
        return tuple(self.aliases)

    def get(self, row: Mapping[str, Any], field: str, default: Any = None) -> Any:
        """Resolve a single canonical field from a row."""
        lowered = {str(key).lower(): key for key in row.keys()}

        for alias in self.aliases.get(field, ()):
            key = lowered.get(alias.lower())
            if key is not None and not _is_blank(row[key]):
                return row[key]

        fragment = self.substring_fallback.get(field)
        if fragment:
            fragment = fragment.lower()
            for lower_key, key in lowered.items():
                if fragment in lower_key and not _is_blank(row[key]):
                    return row[key]

        return default

    def resolve(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Resolve every canonical field; unresolved fields map to None."""
        return {field: self.get(row, field) for field in self.aliases}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


EVENT_FIELDS = FieldResolver(
    {
        "id": ["event_id", "EventID", "id"],
        "name": ["event_name", "name", "EventName", "title"],
        "date": ["date", "event_date", "EventDate"],
        "location": ["location", "event_location", "venue"],
    },
    substring_fallback={"id": "id", "name": "name", "date": "date", "location": "location"},
)

FIGHTER_FIELDS = FieldResolver(
    {
        "id": ["fighter_id", "FighterID", "id"],
        "name": ["name", "fighter_name", "FighterName", "full_name"],
        "weight_class": ["weight_class", "weight", "WeightClass", "division"],
        "wins": ["wins", "w"],
        "losses": ["losses", "l"],
        "draws": ["draws", "d"],
    },
)

FIGHT_FIELDS = FieldResolver(
    {
        "id": ["fight_id", "FightID", "id"],
        "event_id": ["event_id", "EventID"],
        "red_fighter_id": ["red_fighter_id", "fighter_a_id", "FighterA_ID", "fighter1_id"],
        "blue_fighter_id": ["blue_fighter_id", "fighter_b_id", "FighterB_ID", "fighter2_id"],
        "winner_id": ["winner_id", "WinnerID", "winner"],
        "method": ["method", "Method", "win_method"],
        "finish_round": ["finish_round", "round", "Round"],
        "division": ["division", "weight_class", "WeightClass"],
    },
)

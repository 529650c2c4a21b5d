import math
import re
from typing import Any, Mapping, Optional, Tuple

from contracts.match import Match


# Ordered candidates: the first usable source field wins.
HOME_TEAM_FIELDS: Tuple[str, ...] = ("homeTeam", "home", "h", "equipe1")
AWAY_TEAM_FIELDS: Tuple[str, ...] = ("awayTeam", "away", "a", "equipe2")
HOME_SCORE_FIELDS: Tuple[str, ...] = ("homeScore", "hs", "scoreHome")
AWAY_SCORE_FIELDS: Tuple[str, ...] = ("awayScore", "as", "scoreAway")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _first_name(record: Mapping[str, Any], fields: Tuple[str, ...]) -> str:
    # Team names: first non-empty value.
    for name in fields:
        value = record.get(name)
        if value:
            return str(value)
    return ""


def _first_present(record: Mapping[str, Any], fields: Tuple[str, ...]) -> Any:
    # Scores: first field present in the record, even when it holds 0.
    for name in fields:
        if name in record:
            return record[name]
    return None


def normalize_match(record: Any) -> Match:
    """
    Canonicalize one raw match record.
    Never raises: a record without usable scores comes back unplayed.
    """
    if not isinstance(record, Mapping):
        return Match()
    return Match(
        home_team=_first_name(record, HOME_TEAM_FIELDS),
        away_team=_first_name(record, AWAY_TEAM_FIELDS),
        home_score=_first_present(record, HOME_SCORE_FIELDS),
        away_score=_first_present(record, AWAY_SCORE_FIELDS),
    )


def parse_score(value: Any) -> Optional[int]:
    """
    Integer value of a score, or None when it cannot be read.
    Strings are read up to the first non-digit ('3' -> 3, '2 buts' -> 2).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def parse_scores(match: Match) -> Optional[Tuple[int, int]]:
    """Both scores as ints, or None when the game counts as unplayed."""
    home = parse_score(match.home_score)
    away = parse_score(match.away_score)
    if home is None or away is None:
        return None
    return home, away

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from contracts.championship import championship_id, parse_season_key
from contracts.match import MatchBlock
from contracts.standings import SeasonEntry


PenaltyLookup = Callable[[str], int]


@dataclass(frozen=True)
class Manager:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass
class Snapshot:
    """
    Authoritative data handed to the engine for one computation.
    The engine reads it and never keeps a reference after returning.
    """
    managers: Dict[str, Manager] = field(default_factory=dict)
    seasons: Dict[str, SeasonEntry] = field(default_factory=dict)
    matches: List[MatchBlock] = field(default_factory=list)

    @property
    def team_names(self) -> List[str]:
        return [m.name for m in self.managers.values() if m.name and m.name != "?"]

    def is_empty(self) -> bool:
        return not self.managers and not self.seasons and not self.matches

    def to_dict(self) -> dict:
        return {
            "managers": {mid: m.to_dict() for mid, m in self.managers.items()},
            "seasons": {key: entry.to_dict() for key, entry in self.seasons.items()},
            "matches": [block.to_dict() for block in self.matches],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Snapshot":
        """
        Accepts the bare `{managers, seasons, matches}` shape as well as the
        v2.0 export envelope that nests it under `entities`.
        Malformed entries are dropped.
        """
        if not isinstance(payload, Mapping):
            return cls()
        entities = payload.get("entities") if isinstance(payload.get("entities"), Mapping) else payload

        managers: Dict[str, Manager] = {}
        raw_managers = entities.get("managers") or {}
        if isinstance(raw_managers, Mapping):
            for mid, raw in raw_managers.items():
                if not isinstance(raw, Mapping):
                    continue
                name = str(raw.get("name") or "?")
                managers[str(raw.get("id") or mid)] = Manager(id=str(raw.get("id") or mid), name=name)

        seasons: Dict[str, SeasonEntry] = {}
        raw_seasons = entities.get("seasons") or {}
        if isinstance(raw_seasons, Mapping):
            for key, raw in raw_seasons.items():
                parsed = parse_season_key(key)
                if parsed is None:
                    continue
                champ_key, season = parsed
                seasons[key] = SeasonEntry.from_dict(champ_key, season, raw)

        matches: List[MatchBlock] = []
        raw_matches = entities.get("matches") or []
        if isinstance(raw_matches, list):
            for raw in raw_matches:
                if not isinstance(raw, Mapping):
                    continue
                block = MatchBlock.from_dict(raw)
                if block is not None:
                    matches.append(block)

        return cls(managers=managers, seasons=seasons, matches=matches)


def penalty_key(championship: str, season: Any, team_name: str) -> str:
    return f"{championship_id(championship)}_{season}_{team_name}"


def penalty_lookup(
    penalties: Optional[Mapping[str, Any]],
    championship: str,
    season: Any,
) -> PenaltyLookup:
    """
    Build a `(team_name) -> points` function for one championship/season.
    Non-integer or negative values count as no penalty.
    """
    penalties = penalties or {}

    def get_penalty(team_name: str) -> int:
        value = penalties.get(penalty_key(championship, season, team_name), 0)
        try:
            points = int(value)
        except (TypeError, ValueError):
            return 0
        return points if points > 0 else 0

    return get_penalty

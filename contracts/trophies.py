from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ChampionEntry:
    """One line of a championship's roll of honour."""
    season: int
    team: str
    points: int

    def to_dict(self) -> dict:
        return {"season": self.season, "team": self.team, "points": self.points}


@dataclass(frozen=True)
class ChampionRecord:
    """A derived title, as handed to persistence."""
    championship: str
    season: int
    champion: str
    runner_up: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "championship": self.championship,
            "season": self.season,
            "champion": self.champion,
            "runnerUp": self.runner_up,
        }


@dataclass(frozen=True)
class SeasonResolution:
    championship: str
    season: int
    champions: Tuple[str, ...]
    label: str
    points: int
    runner_up: Optional[str] = None

    def to_record(self) -> ChampionRecord:
        return ChampionRecord(
            championship=self.championship,
            season=self.season,
            champion=self.label,
            runner_up=self.runner_up,
        )


@dataclass
class TrophyRecord:
    name: str
    trophies: int = 0
    france: int = 0
    spain: int = 0
    italy: int = 0
    england: int = 0
    total: int = 0
    rank: int = 0

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "name": self.name,
            "trophies": self.trophies,
            "france": self.france,
            "spain": self.spain,
            "italy": self.italy,
            "england": self.england,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "TrophyRecord":
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValueError("Trophy record without a team name")
        counts = {
            key: int(payload.get(key) or 0)
            for key in ("trophies", "france", "spain", "italy", "england", "total", "rank")
        }
        return cls(name=name, **counts)


@dataclass
class PantheonResult:
    teams: List[TrophyRecord] = field(default_factory=list)
    champions: List[ChampionRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "teams": [t.to_dict() for t in self.teams],
            "champions": [c.to_dict() for c in self.champions],
        }


class ChampionSinkContract(ABC):
    """
    Destination for derived titles (remote datastore, archive file...).
    Writes are fire-and-forget from the engine's point of view.
    """

    @abstractmethod
    def save_champion(self, record: ChampionRecord) -> None:
        pass

    @abstractmethod
    def save_pantheon_entry(self, record: TrophyRecord) -> None:
        pass

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Match:
    """
    Canonical shape of one game.
    Scores stay as received; parsing happens when the game is aggregated.
    """
    home_team: str = ""
    away_team: str = ""
    home_score: Any = None
    away_score: Any = None

    def to_dict(self) -> dict:
        return {
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
        }


@dataclass
class MatchBlock:
    """
    One scheduled round of games for a championship/season/matchday.
    `games` holds raw match records; they are normalized on read.
    """
    championship: str
    season: int
    matchday: int
    games: List[Dict[str, Any]] = field(default_factory=list)
    exempt: str = ""

    @property
    def identity(self) -> Tuple[str, int, int]:
        return (str(self.championship or "").lower(), self.season, self.matchday)

    def to_dict(self) -> dict:
        return {
            "championship": self.championship,
            "season": self.season,
            "matchday": self.matchday,
            "exempt": self.exempt,
            "games": [dict(g) for g in self.games],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> Optional["MatchBlock"]:
        """Returns None when season or matchday is not an integer."""
        try:
            season = int(payload.get("season"))
            matchday = int(payload.get("matchday"))
        except (TypeError, ValueError):
            return None
        games = payload.get("games")
        if not isinstance(games, list):
            games = []
        return cls(
            championship=str(payload.get("championship") or ""),
            season=season,
            matchday=matchday,
            games=[g for g in games if isinstance(g, dict)],
            exempt=str(payload.get("exempt") or payload.get("exemptTeam") or ""),
        )


@dataclass(frozen=True)
class FlatMatch:
    """A fully scored game tagged with where it was played."""
    championship: str
    season: int
    matchday: int
    home_team: str
    away_team: str
    home_score: int
    away_score: int

    @property
    def total_goals(self) -> int:
        return self.home_score + self.away_score

    @property
    def goal_margin(self) -> int:
        return abs(self.home_score - self.away_score)

    @property
    def winner(self) -> Optional[str]:
        if self.home_score > self.away_score:
            return self.home_team
        if self.away_score > self.home_score:
            return self.away_team
        return None

    def to_dict(self) -> dict:
        return {
            "championship": self.championship,
            "season": self.season,
            "matchday": self.matchday,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
        }

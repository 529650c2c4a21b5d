from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def parse_signed_int(value: Any, default: int = 0) -> int:
    """
    Accepts ints and signed strings ('+3', '-2', '0').
    Anything else falls back to `default`.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else default
    text = str(value if value is not None else "").strip().replace("+", "", 1)
    try:
        return int(text)
    except ValueError:
        try:
            return int(float(text))
        except ValueError:
            return default


@dataclass
class TeamStat:
    """Running totals for one team over a set of match blocks."""
    name: str
    pts: int = 0
    j: int = 0
    g: int = 0
    n: int = 0
    p: int = 0
    bp: int = 0
    bc: int = 0
    diff: int = 0
    details: Optional[Dict[str, int]] = None

    def add_result(self, goals_for: int, goals_against: int) -> None:
        self.j += 1
        self.bp += goals_for
        self.bc += goals_against
        if goals_for > goals_against:
            self.pts += 3
            self.g += 1
        elif goals_for < goals_against:
            self.p += 1
        else:
            self.pts += 1
            self.n += 1
        self.diff = self.bp - self.bc

    def merge(self, other: "TeamStat") -> None:
        self.pts += other.pts
        self.j += other.j
        self.g += other.g
        self.n += other.n
        self.p += other.p
        self.bp += other.bp
        self.bc += other.bc
        self.diff = self.bp - self.bc

    def to_dict(self) -> dict:
        payload = {
            "name": self.name,
            "pts": self.pts,
            "j": self.j,
            "g": self.g,
            "n": self.n,
            "p": self.p,
            "bp": self.bp,
            "bc": self.bc,
            "diff": self.diff,
        }
        if self.details is not None:
            payload["details"] = dict(self.details)
        return payload


@dataclass
class StandingsRow:
    pos: int
    name: str
    pts: int = 0
    j: int = 0
    g: int = 0
    n: int = 0
    p: int = 0
    bp: int = 0
    bc: int = 0
    diff: int = 0
    penalty: int = 0
    effective_pts: int = 0
    details: Optional[Dict[str, int]] = None

    def to_dict(self) -> dict:
        payload = {
            "pos": self.pos,
            "mgr": self.name,
            "pts": self.pts,
            "j": self.j,
            "g": self.g,
            "n": self.n,
            "p": self.p,
            "bp": self.bp,
            "bc": self.bc,
            "diff": self.diff,
            "penalty": self.penalty,
            "effectivePts": self.effective_pts,
        }
        if self.details is not None:
            payload["details"] = dict(self.details)
        return payload

    @classmethod
    def from_dict(cls, payload: dict, index: int = 0) -> "StandingsRow":
        """
        Reads persisted rows, which come in several historical shapes
        (mgr/name/team, pts/points, w-d-l, gf-ga, signed diff strings).
        """
        def pick(*keys, default=0):
            for key in keys:
                if payload.get(key) is not None:
                    return parse_signed_int(payload[key], default)
            return default

        name = payload.get("mgr") or payload.get("name") or payload.get("team") or "?"
        pts = pick("pts", "points")
        bp = pick("bp", "gf")
        bc = pick("bc", "ga")
        diff = pick("diff", default=bp - bc)
        penalty = pick("penalty")
        return cls(
            pos=pick("pos", "rank", default=index + 1),
            name=str(name),
            pts=pts,
            j=pick("j", "played"),
            g=pick("g", "w"),
            n=pick("n", "d"),
            p=pick("p", "l"),
            bp=bp,
            bc=bc,
            diff=diff,
            penalty=penalty,
            effective_pts=pick("effectivePts", default=pts - penalty),
            details=payload.get("details") if isinstance(payload.get("details"), dict) else None,
        )


@dataclass
class SeasonEntry:
    championship_key: str
    season: int
    standings: List[StandingsRow] = field(default_factory=list)
    played_matchdays: int = 0
    exempt_team: str = ""

    def to_dict(self) -> dict:
        return {
            "championship": self.championship_key,
            "season": self.season,
            "standings": [row.to_dict() for row in self.standings],
            "playedMatchdays": self.played_matchdays,
            "exemptTeam": self.exempt_team,
        }

    @classmethod
    def from_dict(cls, championship_key: str, season: int, payload: dict) -> "SeasonEntry":
        if not isinstance(payload, dict):
            payload = {}
        rows = payload.get("standings")
        rows = rows if isinstance(rows, list) else []
        try:
            played = int(payload.get("playedMatchdays") or 0)
        except (TypeError, ValueError):
            played = 0
        return cls(
            championship_key=championship_key,
            season=season,
            standings=[StandingsRow.from_dict(r, i) for i, r in enumerate(rows) if isinstance(r, dict)],
            played_matchdays=played,
            exempt_team=str(payload.get("exemptTeam") or ""),
        )


@dataclass(frozen=True)
class SeasonProgress:
    current_matchday: int
    total_matchdays: int
    percentage: int
    complete: bool

    def to_dict(self) -> dict:
        return {
            "currentMatchday": self.current_matchday,
            "totalMatchdays": self.total_matchdays,
            "percentage": self.percentage,
            "complete": self.complete,
        }

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from builders.season_builder import build_season_entries
from contracts.match import FlatMatch
from metrics.metric_spec import MetricSpec, StatsContext
from trophies.champions import derive_pantheon


TOP_RECORDS = 3

WIN = "W"
DRAW = "D"
LOSS = "L"

STREAK_KINDS: Dict[str, Tuple[str, ...]] = {
    "win": (WIN,),
    "unbeaten": (WIN, DRAW),
    "losing": (LOSS,),
}


@dataclass(frozen=True)
class Streak:
    team: str
    kind: str
    length: int
    championship: str
    season: int
    start_matchday: int
    end_matchday: int

    def to_dict(self) -> dict:
        return {
            "team": self.team,
            "length": self.length,
            "championship": self.championship,
            "season": self.season,
            "startMatchday": self.start_matchday,
            "endMatchday": self.end_matchday,
        }


def _match_record(match: FlatMatch) -> dict:
    payload = match.to_dict()
    payload["margin"] = match.goal_margin
    payload["totalGoals"] = match.total_goals
    return payload


def biggest_wins(matches: List[FlatMatch], limit: int = TOP_RECORDS) -> List[dict]:
    decided = [m for m in matches if m.home_score != m.away_score]
    decided = sorted(decided, key=lambda m: (-m.goal_margin, -m.total_goals))
    return [_match_record(m) for m in decided[:limit]]


def highest_scoring(matches: List[FlatMatch], limit: int = TOP_RECORDS) -> List[dict]:
    ordered = sorted(matches, key=lambda m: -m.total_goals)
    return [_match_record(m) for m in ordered[:limit]]


def _results_by_scope(matches: List[FlatMatch]) -> Dict[Tuple[str, str, int], List[Tuple[int, str]]]:
    """(team, championship, season) -> [(matchday, result)] in matchday order."""
    results: Dict[Tuple[str, str, int], List[Tuple[int, str]]] = defaultdict(list)
    for m in matches:
        if m.home_score > m.away_score:
            home_result, away_result = WIN, LOSS
        elif m.home_score < m.away_score:
            home_result, away_result = LOSS, WIN
        else:
            home_result = away_result = DRAW
        results[(m.home_team, m.championship, m.season)].append((m.matchday, home_result))
        results[(m.away_team, m.championship, m.season)].append((m.matchday, away_result))
    for games in results.values():
        games.sort(key=lambda g: g[0])
    return results


def _longest_run(
    games: List[Tuple[int, str]], accepted: Tuple[str, ...]
) -> Optional[Tuple[int, int, int]]:
    """(length, start matchday, end matchday) of the longest run, None if empty."""
    best: Optional[Tuple[int, int, int]] = None
    length = 0
    start = 0
    for matchday, result in games:
        if result in accepted:
            if length == 0:
                start = matchday
            length += 1
            if best is None or length > best[0]:
                best = (length, start, matchday)
        else:
            length = 0
    return best


def longest_streaks(matches: List[FlatMatch]) -> Dict[str, List[Streak]]:
    """
    Best streak of each kind per team.
    Runs never cross a championship or a season: matchday numbers restart
    in each of them.
    """
    best: Dict[str, Dict[str, Streak]] = {kind: {} for kind in STREAK_KINDS}
    scopes = _results_by_scope(matches)
    for (team, championship, season) in sorted(scopes, key=lambda s: (s[0], s[2], s[1])):
        games = scopes[(team, championship, season)]
        for kind, accepted in STREAK_KINDS.items():
            run = _longest_run(games, accepted)
            if run is None:
                continue
            current = best[kind].get(team)
            if current is None or run[0] > current.length:
                best[kind][team] = Streak(
                    team=team,
                    kind=kind,
                    length=run[0],
                    championship=championship,
                    season=season,
                    start_matchday=run[1],
                    end_matchday=run[2],
                )
    return {
        kind: sorted(per_team.values(), key=lambda s: (-s.length, s.team))
        for kind, per_team in best.items()
    }


@dataclass(frozen=True)
class RecordsMetric(MetricSpec):
    """
    Biggest wins, highest scoring games, streaks and the trophy board.
    The trophy board is rebuilt from match data only so that stale persisted
    standings can not leak into it.
    """

    def compute(self, context: StatsContext) -> dict:
        streaks = longest_streaks(context.flat_matches)
        entries = build_season_entries(context.snapshot, context.penalties, include_persisted=False)
        pantheon = derive_pantheon(entries, context.snapshot.team_names, context.penalties)
        return {
            "biggestWins": biggest_wins(context.flat_matches),
            "highestScoring": highest_scoring(context.flat_matches),
            "winStreaks": [s.to_dict() for s in streaks["win"]],
            "unbeatenStreaks": [s.to_dict() for s in streaks["unbeaten"]],
            "losingStreaks": [s.to_dict() for s in streaks["losing"]],
            "trophies": [t.to_dict() for t in pantheon.teams if t.total > 0],
        }

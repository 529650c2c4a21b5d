from dataclasses import dataclass
from typing import Dict, List

from metrics.metric_spec import MetricSpec, StatsContext


def _empty_record() -> Dict[str, int]:
    return {"w": 0, "d": 0, "l": 0, "gf": 0, "ga": 0, "played": 0}


def pair_key(team_a: str, team_b: str) -> str:
    """Order-independent key for the match list of a pair."""
    first, second = sorted((team_a, team_b))
    return f"{first}|{second}"


@dataclass(frozen=True)
class HeadToHeadMetric(MetricSpec):
    """
    Pairwise records: matrix[team][opponent] seen from `team`, plus the
    games of every pair for drill-down.
    """

    def compute(self, context: StatsContext) -> dict:
        matrix: Dict[str, Dict[str, Dict[str, int]]] = {}
        details: Dict[str, List[dict]] = {}

        def _record(team: str, opponent: str) -> Dict[str, int]:
            return matrix.setdefault(team, {}).setdefault(opponent, _empty_record())

        for m in context.flat_matches:
            home = _record(m.home_team, m.away_team)
            away = _record(m.away_team, m.home_team)
            for record, scored, conceded in (
                (home, m.home_score, m.away_score),
                (away, m.away_score, m.home_score),
            ):
                record["played"] += 1
                record["gf"] += scored
                record["ga"] += conceded
                if scored > conceded:
                    record["w"] += 1
                elif scored < conceded:
                    record["l"] += 1
                else:
                    record["d"] += 1
            details.setdefault(pair_key(m.home_team, m.away_team), []).append(m.to_dict())

        return {
            "teams": sorted(matrix),
            "matrix": matrix,
            "matches": details,
        }

from dataclasses import dataclass
from typing import Dict, List

import pandas as pd

from contracts.match import FlatMatch
from metrics.metric_spec import MetricSpec, StatsContext, rate


MIN_GAMES_SCORING = 3
HIGH_SCORING_GOALS = 4
TOP_SCORES = 10


def score_label(match: FlatMatch) -> str:
    """'3-1' for both 3-1 and 1-3: the higher score always comes first."""
    high = max(match.home_score, match.away_score)
    low = min(match.home_score, match.away_score)
    return f"{high}-{low}"


def score_frequencies(matches: List[FlatMatch], limit: int = TOP_SCORES) -> List[dict]:
    if not matches:
        return []
    counts = (
        pd.Series([score_label(m) for m in matches])
        .value_counts()
        .rename_axis("score")
        .reset_index(name="count")
        .sort_values(by=["count", "score"], ascending=[False, True])
        .head(limit)
    )
    return [
        {"score": str(score), "count": int(count)}
        for score, count in zip(counts["score"], counts["count"])
    ]


@dataclass(frozen=True)
class ScoringMetric(MetricSpec):
    """Goal totals, clean sheets / blanks per team and the most common scores."""
    min_games: int = MIN_GAMES_SCORING

    def compute(self, context: StatsContext) -> dict:
        matches = context.flat_matches
        total_goals = sum(m.total_goals for m in matches)
        total_games = len(matches)
        matchdays = {(m.championship, m.season, m.matchday) for m in matches}
        high_scoring = sum(1 for m in matches if m.total_goals >= HIGH_SCORING_GOALS)

        clean_sheets: Dict[str, int] = {}
        failed_to_score: Dict[str, int] = {}
        for m in matches:
            for team, conceded, scored in (
                (m.home_team, m.away_score, m.home_score),
                (m.away_team, m.home_score, m.away_score),
            ):
                clean_sheets[team] = clean_sheets.get(team, 0) + (1 if conceded == 0 else 0)
                failed_to_score[team] = failed_to_score.get(team, 0) + (1 if scored == 0 else 0)

        eligible = sorted(
            name for name, stat in context.team_stats.items() if stat.j >= self.min_games
        )
        per_team = [
            {
                "team": name,
                "played": context.team_stats[name].j,
                "cleanSheets": clean_sheets.get(name, 0),
                "failedToScore": failed_to_score.get(name, 0),
            }
            for name in eligible
        ]

        return {
            "totalGoals": total_goals,
            "totalGames": total_games,
            "totalMatchdays": len(matchdays),
            "averageGoals": rate(total_goals, total_games),
            "highScoringPercentage": rate(high_scoring, total_games, scale=100, digits=1),
            "cleanSheets": sorted(per_team, key=lambda t: (-t["cleanSheets"], t["team"])),
            "failedToScore": sorted(per_team, key=lambda t: (-t["failedToScore"], t["team"])),
            "scoreFrequency": score_frequencies(matches),
        }

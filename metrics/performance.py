from dataclasses import dataclass
from typing import List

import pandas as pd

from metrics.metric_spec import MetricSpec, StatsContext


MIN_GAMES_PERFORMANCE = 3


def _leaderboard(table: pd.DataFrame, column: str, ascending: bool) -> List[dict]:
    ordered = table.sort_values(by=[column, "name"], ascending=[ascending, True])
    return [
        {"team": row.name, "played": int(row.j), "value": float(getattr(row, column))}
        for row in ordered.itertuples(index=False)
    ]


@dataclass(frozen=True)
class PerformanceMetric(MetricSpec):
    """
    Per-game ratings for teams with enough games:
        - points per game      (higher is better)
        - win rate in %        (higher is better)
        - attack: goals for    (higher is better)
        - defense: goals against per game (lower is better)
    """
    min_games: int = MIN_GAMES_PERFORMANCE

    def compute(self, context: StatsContext) -> dict:
        rows = [
            {"name": s.name, "pts": s.pts, "j": s.j, "g": s.g, "bp": s.bp, "bc": s.bc}
            for s in context.team_stats.values()
            if s.j >= self.min_games
        ]
        if not rows:
            return {"pointsPerGame": [], "winRate": [], "attack": [], "defense": []}

        table = pd.DataFrame(rows)
        table["ppg"] = (table["pts"] / table["j"]).round(2)
        table["win_rate"] = (table["g"] * 100 / table["j"]).round(1)
        table["attack"] = (table["bp"] / table["j"]).round(2)
        table["defense"] = (table["bc"] / table["j"]).round(2)

        return {
            "pointsPerGame": _leaderboard(table, "ppg", ascending=False),
            "winRate": _leaderboard(table, "win_rate", ascending=False),
            "attack": _leaderboard(table, "attack", ascending=False),
            "defense": _leaderboard(table, "defense", ascending=True),
        }

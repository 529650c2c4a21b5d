from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd

from metrics.metric_spec import MetricSpec, StatsContext, rate


MIN_GAMES_COMPARISON = 3
MIN_GAMES_VENUE_BOARD = 2

VENUES = ("home", "away")


def _empty_split() -> Dict[str, float]:
    return {"j": 0, "w": 0, "d": 0, "l": 0, "gf": 0, "ga": 0, "pts": 0, "winRate": 0.0, "ppg": 0.0}


def _venue_table(context: StatsContext) -> pd.DataFrame:
    rows = []
    for m in context.flat_matches:
        rows.append({"team": m.home_team, "venue": "home", "gf": m.home_score, "ga": m.away_score})
        rows.append({"team": m.away_team, "venue": "away", "gf": m.away_score, "ga": m.home_score})
    long = pd.DataFrame(rows, columns=["team", "venue", "gf", "ga"])
    long["w"] = (long["gf"] > long["ga"]).astype(int)
    long["d"] = (long["gf"] == long["ga"]).astype(int)
    long["l"] = (long["gf"] < long["ga"]).astype(int)
    long["pts"] = np.select([long["gf"] > long["ga"], long["gf"] == long["ga"]], [3, 1], default=0)
    return (
        long.groupby(["team", "venue"])
        .agg(
            j=("gf", "size"),
            w=("w", "sum"),
            d=("d", "sum"),
            l=("l", "sum"),
            gf=("gf", "sum"),
            ga=("ga", "sum"),
            pts=("pts", "sum"),
        )
        .reset_index()
    )


@dataclass(frozen=True)
class HomeAwayMetric(MetricSpec):
    """
    Home and away splits per team, a home-vs-away comparison for teams with
    enough games, and the best home / best away win rates.
    """
    min_games: int = MIN_GAMES_COMPARISON
    min_venue_games: int = MIN_GAMES_VENUE_BOARD

    def compute(self, context: StatsContext) -> dict:
        splits: Dict[str, Dict[str, dict]] = {}
        if context.flat_matches:
            for row in _venue_table(context).itertuples(index=False):
                split = splits.setdefault(row.team, {v: _empty_split() for v in VENUES})
                split[row.venue] = {
                    "j": int(row.j),
                    "w": int(row.w),
                    "d": int(row.d),
                    "l": int(row.l),
                    "gf": int(row.gf),
                    "ga": int(row.ga),
                    "pts": int(row.pts),
                    "winRate": rate(row.w, row.j, scale=100, digits=1),
                    "ppg": rate(row.pts, row.j),
                }

        comparison = []
        for team, split in splits.items():
            home, away = split["home"], split["away"]
            if home["j"] + away["j"] < self.min_games:
                continue
            comparison.append(
                {
                    "team": team,
                    "homePpg": home["ppg"],
                    "awayPpg": away["ppg"],
                    "homeWinRate": home["winRate"],
                    "awayWinRate": away["winRate"],
                    "difference": round(home["ppg"] - away["ppg"], 2),
                }
            )
        comparison.sort(key=lambda c: (-c["difference"], c["team"]))

        def _board(venue: str) -> list:
            eligible = [
                {"team": team, "played": split[venue]["j"], "winRate": split[venue]["winRate"],
                 "ppg": split[venue]["ppg"]}
                for team, split in splits.items()
                if split[venue]["j"] >= self.min_venue_games
            ]
            return sorted(eligible, key=lambda b: (-b["winRate"], -b["ppg"], b["team"]))

        return {
            "teams": {team: splits[team] for team in sorted(splits)},
            "comparison": comparison,
            "bestHome": _board("home"),
            "bestAway": _board("away"),
        }

from dataclasses import dataclass
from typing import Dict, List, Optional

from builders.standings_builder import is_paired_scope, rank_standings
from builders.team_aggregator import calculate_team_stats
from contracts.snapshot import penalty_lookup
from filters.match_filters import ALL
from metrics.metric_spec import MetricSpec, StatsContext


@dataclass(frozen=True)
class TrendsMetric(MetricSpec):
    """
    Points and rank of every team after each matchday of one season.
    Not computed across seasons: cumulative tables over mixed seasons mean
    nothing.
    """

    def compute(self, context: StatsContext) -> Optional[dict]:
        if context.season is None or not context.blocks:
            return None

        champ = str(context.champ_filter or ALL).lower()
        get_penalty = None if champ == ALL else penalty_lookup(context.penalties, champ, context.season)
        paired = champ != ALL and is_paired_scope(champ, context.season)

        max_matchday = max(block.matchday for block in context.blocks)
        teams = context.teams
        points: Dict[str, List[Optional[int]]] = {team: [] for team in teams}
        ranks: Dict[str, List[Optional[int]]] = {team: [] for team in teams}
        matchdays: List[int] = []

        for matchday in range(1, max_matchday + 1):
            scoped = [block for block in context.blocks if block.matchday <= matchday]
            standings = rank_standings(
                calculate_team_stats(scoped, teams), get_penalty, paired=paired
            )
            by_team = {row.name: row for row in standings}
            matchdays.append(matchday)
            for team in teams:
                row = by_team.get(team)
                points[team].append(row.effective_pts if row else None)
                ranks[team].append(row.pos if row else None)

        return {
            "matchdays": matchdays,
            "points": points,
            "ranks": ranks,
        }

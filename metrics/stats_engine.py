from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from builders.team_aggregator import calculate_team_stats
from contracts.snapshot import Snapshot
from filters.match_filters import ALL, flatten_matches, get_filtered_matches, parse_season_filter
from metrics.head_to_head import HeadToHeadMetric
from metrics.home_away import HomeAwayMetric
from metrics.metric_spec import MetricSpec, StatsContext
from metrics.performance import PerformanceMetric
from metrics.records import RecordsMetric
from metrics.scoring import ScoringMetric
from metrics.trends import TrendsMetric


STAT_METRICS: List[MetricSpec] = [
    RecordsMetric(key="records", name="Records"),
    PerformanceMetric(key="performance", name="Performance"),
    HeadToHeadMetric(key="head_to_head", name="Head to head"),
    TrendsMetric(key="trends", name="Trends"),
    HomeAwayMetric(key="home_away", name="Home / Away"),
    ScoringMetric(key="scoring", name="Scoring"),
]


@dataclass(frozen=True)
class StatsResult:
    championship: str
    season: Any
    total_matches: int
    records: dict
    performance: dict
    head_to_head: dict
    trends: Optional[dict]
    home_away: dict
    scoring: dict

    def to_dict(self) -> dict:
        return {
            "championship": self.championship,
            "season": self.season,
            "totalMatches": self.total_matches,
            "records": self.records,
            "performance": self.performance,
            "headToHead": self.head_to_head,
            "trends": self.trends,
            "homeAway": self.home_away,
            "scoring": self.scoring,
        }


def build_stats_context(
    snapshot: Snapshot,
    champ_filter: Any = ALL,
    season_filter: Any = ALL,
    penalties: Optional[Mapping[str, Any]] = None,
) -> StatsContext:
    blocks = get_filtered_matches(snapshot, champ_filter, season_filter)
    return StatsContext(
        snapshot=snapshot,
        champ_filter=str(champ_filter or ALL),
        season_filter=season_filter,
        season=parse_season_filter(season_filter),
        blocks=blocks,
        flat_matches=flatten_matches(blocks),
        team_stats=calculate_team_stats(blocks, snapshot.team_names),
        penalties=penalties or {},
    )


def compute_all_stats(
    snapshot: Snapshot,
    champ_filter: Any = ALL,
    season_filter: Any = ALL,
    penalties: Optional[Mapping[str, Any]] = None,
) -> Optional[StatsResult]:
    """
    Every statistics view for one scope.
    Returns None when the scope holds no scored game.
    """
    context = build_stats_context(snapshot, champ_filter, season_filter, penalties)
    if not context.flat_matches:
        return None

    views = {metric.key: metric.compute(context) for metric in STAT_METRICS}
    return StatsResult(
        championship=context.champ_filter,
        season=season_filter if context.season is None else context.season,
        total_matches=len(context.flat_matches),
        records=views["records"],
        performance=views["performance"],
        head_to_head=views["head_to_head"],
        trends=views["trends"],
        home_away=views["home_away"],
        scoring=views["scoring"],
    )

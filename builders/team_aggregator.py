import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Set, Tuple

from builders.match_normalizer import normalize_match, parse_scores
from contracts.match import MatchBlock
from contracts.standings import TeamStat

logger = logging.getLogger(__name__)


def iter_scored_games(block: MatchBlock) -> Iterator[Tuple[str, str, int, int]]:
    """
    Yield (home, away, home_score, away_score) for every played game of a block.
    A team pair appearing twice in the same block is only yielded once.
    """
    games = block.games if isinstance(block.games, list) else []
    seen: Set[Tuple[str, str]] = set()
    for raw in games:
        match = normalize_match(raw)
        scores = parse_scores(match)
        if scores is None or not match.home_team or not match.away_team:
            continue
        pair = (match.home_team, match.away_team)
        if pair in seen:
            logger.debug(
                "Duplicate game %s vs %s ignored in %s", pair[0], pair[1], block.identity
            )
            continue
        seen.add(pair)
        yield match.home_team, match.away_team, scores[0], scores[1]


def calculate_team_stats(
    match_blocks: Iterable[MatchBlock],
    team_list: Iterable[str],
) -> Dict[str, TeamStat]:
    """
    Fold match blocks into per-team totals.

    Every known team starts at zero; teams found only in match data are
    added when first seen. Unplayed or unparsable games are skipped.
    """
    team_stats: Dict[str, TeamStat] = {name: TeamStat(name=name) for name in team_list}

    def _ensure(team: str) -> TeamStat:
        if team not in team_stats:
            team_stats[team] = TeamStat(name=team)
        return team_stats[team]

    for block in match_blocks:
        for home, away, home_score, away_score in iter_scored_games(block):
            _ensure(home).add_result(home_score, away_score)
            _ensure(away).add_result(away_score, home_score)

    return team_stats


def sum_team_stats(
    stats_by_league: Mapping[str, Mapping[str, TeamStat]],
    team_list: Iterable[str],
) -> Dict[str, TeamStat]:
    """
    Add up per-league totals into one table (the super league).
    Each row keeps the points earned in every league under `details`.
    """
    leagues: List[str] = list(stats_by_league.keys())
    totals: Dict[str, TeamStat] = {}

    def _ensure(team: str) -> TeamStat:
        if team not in totals:
            totals[team] = TeamStat(name=team, details={league: 0 for league in leagues})
        return totals[team]

    for name in team_list:
        _ensure(name)

    for league, stats in stats_by_league.items():
        for name, stat in stats.items():
            row = _ensure(name)
            row.merge(stat)
            row.details[league] = stat.pts

    return totals

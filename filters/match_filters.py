import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from builders.match_normalizer import normalize_match
from builders.team_aggregator import iter_scored_games
from contracts.championship import (
    DOMESTIC_KEYS,
    MATCHES_PER_MATCHDAY,
    SUPER_LEAGUE_ID,
    SUPER_LEAGUE_KEY,
    championship_key,
)
from contracts.match import FlatMatch, Match, MatchBlock
from contracts.snapshot import Snapshot

logger = logging.getLogger(__name__)

ALL = "all"


def parse_season_filter(season_filter: Any) -> Optional[int]:
    """None means every season; -1 means a filter that matches nothing."""
    if season_filter is None:
        return None
    if isinstance(season_filter, str) and season_filter.strip().lower() in ("", ALL):
        return None
    try:
        return int(season_filter)
    except (TypeError, ValueError):
        return -1


def is_super_league(champ_filter: Any) -> bool:
    text = str(champ_filter or "").strip().lower()
    return text in (SUPER_LEAGUE_ID, SUPER_LEAGUE_KEY)


def merge_match_blocks(blocks: Iterable[MatchBlock]) -> List[MatchBlock]:
    """One block per (championship, season, matchday); the last one wins."""
    merged: Dict[Tuple[str, int, int], MatchBlock] = {}
    for block in blocks:
        key = block.identity
        if key in merged:
            logger.warning("Duplicate match block %s, keeping the latest", key)
        merged[key] = block
    return list(merged.values())


def _championship_matches(block: MatchBlock, champ_filter: Any) -> bool:
    block_key = str(block.championship or "").lower()
    text = str(champ_filter or ALL).strip().lower()
    if text == ALL:
        return block_key != SUPER_LEAGUE_KEY
    if is_super_league(text):
        return block_key in DOMESTIC_KEYS
    return block_key == championship_key(text)


def filter_blocks(
    blocks: Iterable[MatchBlock],
    champ_filter: Any = ALL,
    season_filter: Any = ALL,
) -> List[MatchBlock]:
    season = parse_season_filter(season_filter)
    selected = [
        block
        for block in blocks
        if _championship_matches(block, champ_filter)
        and (season is None or block.season == season)
    ]
    return merge_match_blocks(selected)


def get_filtered_matches(
    snapshot: Snapshot,
    champ_filter: Any = ALL,
    season_filter: Any = ALL,
) -> List[MatchBlock]:
    """
    Match blocks for a championship/season scope.

    champ_filter:
        - "all"    → every block outside the super league
        - "hyenes" → blocks of the four domestic leagues
        - a league → that league only (id or key, any case)
    season_filter: "all" or a season number.
    """
    return filter_blocks(snapshot.matches, champ_filter, season_filter)


def flatten_matches(blocks: Iterable[MatchBlock]) -> List[FlatMatch]:
    """Every fully scored game of the blocks, tagged with its block context."""
    flat: List[FlatMatch] = []
    for block in blocks:
        champ = str(block.championship or "").lower()
        for home, away, home_score, away_score in iter_scored_games(block):
            flat.append(
                FlatMatch(
                    championship=champ,
                    season=block.season,
                    matchday=block.matchday,
                    home_team=home,
                    away_team=away,
                    home_score=home_score,
                    away_score=away_score,
                )
            )
    return flat


def count_played_matchdays(blocks: Iterable[MatchBlock]) -> int:
    """Distinct matchday numbers having at least one recorded block."""
    return len({block.matchday for block in blocks})


def matchday_games(
    blocks: Iterable[MatchBlock],
    championship: Any,
    season: Any,
    matchday: Any,
    limit: int = MATCHES_PER_MATCHDAY,
) -> List[Match]:
    """
    Games of one matchday as shown in the fixture view, played or not.
    Unnamed games are skipped and a team pair is only listed once.
    """
    try:
        matchday = int(matchday)
    except (TypeError, ValueError):
        return []
    games: List[Match] = []
    seen: Set[Tuple[str, str]] = set()
    for block in filter_blocks(blocks, championship, season):
        if block.matchday != matchday:
            continue
        for raw in block.games:
            match = normalize_match(raw)
            pair = (match.home_team, match.away_team)
            if not match.home_team or not match.away_team or pair in seen:
                continue
            seen.add(pair)
            games.append(match)
    return games[:limit]

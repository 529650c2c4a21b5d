from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from builders.standings_builder import is_paired_scope, rank_standings
from builders.team_aggregator import calculate_team_stats, sum_team_stats
from contracts.championship import (
    DOMESTIC_KEYS,
    SUPER_LEAGUE_KEY,
    championship_key,
    season_key,
)
from contracts.match import MatchBlock
from contracts.snapshot import Snapshot, penalty_lookup
from contracts.standings import SeasonEntry
from filters.match_filters import count_played_matchdays, filter_blocks


def build_championship_entry(
    blocks: Iterable[MatchBlock],
    champ_key: str,
    season: int,
    team_list: Iterable[str],
    penalties: Optional[Mapping[str, Any]] = None,
) -> Optional[SeasonEntry]:
    """Standings of one domestic league season, or None without matches."""
    scoped = filter_blocks(blocks, champ_key, season)
    if not scoped:
        return None
    stats = calculate_team_stats(scoped, team_list)
    standings = rank_standings(
        stats,
        penalty_lookup(penalties, champ_key, season),
        paired=is_paired_scope(champ_key, season),
    )
    return SeasonEntry(
        championship_key=champ_key,
        season=season,
        standings=standings,
        played_matchdays=count_played_matchdays(scoped),
    )


def build_super_league_entry(
    blocks: Iterable[MatchBlock],
    season: int,
    team_list: Iterable[str],
    penalties: Optional[Mapping[str, Any]] = None,
) -> Optional[SeasonEntry]:
    """
    Super league standings: the sum of each team's four domestic tables.
    Played matchdays add up across the leagues, matching the 72-day schedule.
    """
    blocks = list(blocks)
    team_list = list(team_list)
    stats_by_league = {}
    played_matchdays = 0
    for champ_key in DOMESTIC_KEYS:
        scoped = filter_blocks(blocks, champ_key, season)
        stats_by_league[champ_key] = calculate_team_stats(scoped, team_list)
        played_matchdays += count_played_matchdays(scoped)

    totals = sum_team_stats(stats_by_league, team_list)
    standings = rank_standings(totals, penalty_lookup(penalties, SUPER_LEAGUE_KEY, season))
    if not standings:
        return None
    return SeasonEntry(
        championship_key=SUPER_LEAGUE_KEY,
        season=season,
        standings=standings,
        played_matchdays=played_matchdays,
    )


def resolve_exempt_team(
    seasons: Mapping[str, SeasonEntry],
    blocks: Iterable[MatchBlock],
    champ_key: str,
    season: int,
) -> str:
    """
    Exempt team of a season: the entry's own value, else any entry of the
    same season number, else the latest block of that scope that names one.
    """
    own = seasons.get(season_key(champ_key, season))
    if own is not None and own.exempt_team:
        return own.exempt_team
    for entry in seasons.values():
        if entry.season == season and entry.exempt_team:
            return entry.exempt_team
    exempt = ""
    for block in filter_blocks(blocks, champ_key, season):
        if block.exempt:
            exempt = block.exempt
    return exempt


def build_season_entries(
    snapshot: Snapshot,
    penalties: Optional[Mapping[str, Any]] = None,
    include_persisted: bool = True,
) -> Dict[str, SeasonEntry]:
    """
    Season entries for every championship/season found in the snapshot.

    Scopes with matches are always recomputed from them. With
    `include_persisted`, scopes that only exist as persisted standings are
    carried over as they are.
    """
    entries: Dict[str, SeasonEntry] = {}
    if include_persisted:
        for key, entry in snapshot.seasons.items():
            entries[key] = replace(entry, standings=list(entry.standings))

    team_list = snapshot.team_names
    seasons_by_league: Dict[str, Set[int]] = {}
    for block in snapshot.matches:
        champ = str(block.championship or "").lower()
        if champ in DOMESTIC_KEYS:
            seasons_by_league.setdefault(champ, set()).add(block.season)

    all_seasons: Set[int] = set()
    for champ_key in DOMESTIC_KEYS:
        for season in sorted(seasons_by_league.get(champ_key, ())):
            all_seasons.add(season)
            entry = build_championship_entry(snapshot.matches, champ_key, season, team_list, penalties)
            if entry is None:
                continue
            entry.exempt_team = resolve_exempt_team(snapshot.seasons, snapshot.matches, champ_key, season)
            entries[season_key(champ_key, season)] = entry

    for season in sorted(all_seasons):
        entry = build_super_league_entry(snapshot.matches, season, team_list, penalties)
        if entry is None:
            continue
        entry.exempt_team = resolve_exempt_team(snapshot.seasons, snapshot.matches, SUPER_LEAGUE_KEY, season)
        entries[season_key(SUPER_LEAGUE_KEY, season)] = entry

    return entries


def build_scope_standings(
    snapshot: Snapshot,
    championship: str,
    season: int,
    penalties: Optional[Mapping[str, Any]] = None,
) -> Optional[SeasonEntry]:
    """
    Entry for a single championship/season as shown in the standings view:
    recomputed from matches when any exist, else the persisted entry.
    """
    champ_key = championship_key(championship)
    if champ_key == SUPER_LEAGUE_KEY:
        entry = build_super_league_entry(snapshot.matches, season, snapshot.team_names, penalties)
    else:
        entry = build_championship_entry(
            snapshot.matches, champ_key, season, snapshot.team_names, penalties
        )
    persisted = snapshot.seasons.get(season_key(champ_key, season))
    if entry is None:
        if persisted is None:
            return None
        return replace(persisted, standings=list(persisted.standings))
    entry.exempt_team = resolve_exempt_team(
        snapshot.seasons, snapshot.matches, entry.championship_key, season
    )
    return entry


def list_seasons(snapshot: Snapshot) -> List[int]:
    """Season numbers known from persisted entries or match blocks, ascending."""
    numbers: Set[int] = {entry.season for entry in snapshot.seasons.values()}
    numbers.update(block.season for block in snapshot.matches)
    return sorted(numbers)

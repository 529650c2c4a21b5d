import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from contracts.championship import (
    CHAMPIONSHIPS_BY_KEY,
    championship_key,
    get_resolution_override,
)
from contracts.snapshot import penalty_lookup
from contracts.standings import SeasonEntry, parse_signed_int
from contracts.trophies import (
    ChampionEntry,
    ChampionSinkContract,
    PantheonResult,
    SeasonResolution,
    TrophyRecord,
)
from trophies.completion import is_season_complete

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Ranked:
    name: str
    effective_pts: int
    diff: int
    bp: int


def _rank_entry(entry: SeasonEntry, penalties: Optional[Mapping[str, Any]]) -> List[_Ranked]:
    # Same order as the standings table: effective points, diff, goals for, name.
    get_penalty = penalty_lookup(penalties, entry.championship_key, entry.season)
    ranked = [
        _Ranked(
            name=row.name or "?",
            effective_pts=parse_signed_int(row.pts) - get_penalty(row.name),
            diff=parse_signed_int(row.diff),
            bp=parse_signed_int(row.bp),
        )
        for row in entry.standings
    ]
    ranked.sort(key=lambda r: (-r.effective_pts, -r.diff, -r.bp, r.name))
    return ranked


def resolve_season(
    entry: SeasonEntry,
    penalties: Optional[Mapping[str, Any]] = None,
) -> Optional[SeasonResolution]:
    """
    Champion and runner-up of a finished season.
    Returns None for unknown championships, empty tables and seasons still
    in progress.
    """
    if entry.championship_key not in CHAMPIONSHIPS_BY_KEY or not entry.standings:
        return None
    if not is_season_complete(
        entry.championship_key, entry.season, entry.played_matchdays, entry.standings
    ):
        return None

    ranked = _rank_entry(entry, penalties)
    override = get_resolution_override(entry.championship_key, entry.season)

    if override is None:
        champion = ranked[0]
        return SeasonResolution(
            championship=entry.championship_key,
            season=entry.season,
            champions=(champion.name,),
            label=champion.name,
            points=champion.effective_pts,
            runner_up=ranked[1].name if len(ranked) > 1 else None,
        )

    # Shared title: every remaining team level with the best of the rest
    # on (effective points, diff) is a runner-up.
    remaining = [r for r in ranked if r.name not in override.co_champions]
    runner_ups: List[str] = []
    if remaining:
        best = (remaining[0].effective_pts, remaining[0].diff)
        for r in remaining:
            if (r.effective_pts, r.diff) == best and r.name not in runner_ups:
                runner_ups.append(r.name)
    co_points = [r.effective_pts for r in ranked if r.name in override.co_champions]
    return SeasonResolution(
        championship=entry.championship_key,
        season=entry.season,
        champions=override.co_champions,
        label=override.label,
        points=max(co_points) if co_points else ranked[0].effective_pts,
        runner_up=override.separator.join(runner_ups) or None,
    )


def derive_champions(
    seasons: Mapping[str, SeasonEntry],
    championship: str,
    penalties: Optional[Mapping[str, Any]] = None,
) -> List[ChampionEntry]:
    """Roll of honour of one championship, newest season first."""
    key = championship_key(championship)
    champions: List[ChampionEntry] = []
    for entry in seasons.values():
        if entry.championship_key != key:
            continue
        resolution = resolve_season(entry, penalties)
        if resolution is None:
            continue
        champions.append(
            ChampionEntry(season=entry.season, team=resolution.label, points=resolution.points)
        )
    champions.sort(key=lambda c: c.season, reverse=True)
    return champions


def derive_pantheon(
    seasons: Mapping[str, SeasonEntry],
    team_names: Iterable[str],
    penalties: Optional[Mapping[str, Any]] = None,
) -> PantheonResult:
    """
    Titles per team across every championship and season.

    Ranked by super league titles, then total titles, then name.
    Co-champions of a shared title are each credited once.
    """
    trophy_count: Dict[str, TrophyRecord] = {name: TrophyRecord(name=name) for name in team_names}
    records = []

    for key in sorted(seasons, key=lambda k: (seasons[k].season, seasons[k].championship_key)):
        entry = seasons[key]
        resolution = resolve_season(entry, penalties)
        if resolution is None:
            continue
        field_name = CHAMPIONSHIPS_BY_KEY[entry.championship_key].trophy_field
        for name in resolution.champions:
            if name not in trophy_count:
                trophy_count[name] = TrophyRecord(name=name)
            record = trophy_count[name]
            setattr(record, field_name, getattr(record, field_name) + 1)
            record.total += 1
        records.append(resolution.to_record())

    teams = sorted(trophy_count.values(), key=lambda t: (-t.trophies, -t.total, t.name))
    for index, team in enumerate(teams):
        team.rank = index + 1

    return PantheonResult(teams=teams, champions=records)


def persist_pantheon(
    result: PantheonResult,
    sink: Optional[ChampionSinkContract],
    authorized: bool = False,
) -> int:
    """
    Push derived titles to the sink when the caller may write.
    Failures are logged and never raised; returns the number of writes done.
    """
    if sink is None or not authorized:
        return 0
    written = 0
    for record in result.champions:
        try:
            sink.save_champion(record)
            written += 1
        except Exception as exc:
            logger.warning(
                "Could not save champion %s s%s: %s", record.championship, record.season, exc
            )
    for team in result.teams:
        if team.total <= 0:
            continue
        try:
            sink.save_pantheon_entry(team)
            written += 1
        except Exception as exc:
            logger.warning("Could not save pantheon entry %s: %s", team.name, exc)
    return written

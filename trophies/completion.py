import math
from typing import Any, Optional, Sequence

from contracts.championship import get_championship, get_resolution_override
from contracts.standings import SeasonProgress, StandingsRow


def total_matchdays(championship: str, season: Any) -> int:
    """
    Scheduled matchdays for a championship/season.
    The shortened schedule applies only to the exact flagged season.
    Unknown championships have no schedule (0).
    """
    config = get_championship(championship)
    if config is None:
        return 0
    try:
        season = int(season)
    except (TypeError, ValueError):
        return config.standard_matchdays
    return config.total_matchdays(season)


def season_progress(
    championship: str,
    season: Any,
    played_matchdays: Optional[int],
    standings: Optional[Sequence[StandingsRow]] = None,
) -> SeasonProgress:
    """
    How far a season has gone, and whether it is over.

    `played_matchdays` comes from match data; when it is missing the first
    standings row's games played is used instead. The percentage is not
    clamped: a value above 100 means more matchdays than scheduled.
    """
    current = played_matchdays or 0
    if not current and standings:
        current = standings[0].j or 0

    total = total_matchdays(championship, season)
    percentage = int(math.floor(100 * current / total + 0.5)) if total > 0 else 0
    overridden = get_resolution_override(championship, season) is not None
    complete = overridden or (total > 0 and current >= total)

    return SeasonProgress(
        current_matchday=current,
        total_matchdays=total,
        percentage=percentage,
        complete=complete,
    )


def is_season_complete(
    championship: str,
    season: Any,
    played_matchdays: Optional[int],
    standings: Optional[Sequence[StandingsRow]] = None,
) -> bool:
    return season_progress(championship, season, played_matchdays, standings).complete

from typing import Any, Callable, Dict, List, Mapping, Optional

import pandas as pd

from contracts.championship import get_resolution_override
from contracts.standings import StandingsRow, TeamStat


STAT_COLUMNS = ["name", "pts", "j", "g", "n", "p", "bp", "bc", "diff"]
SORT_COLUMNS = ["effective_pts", "diff", "bp", "name"]
SORT_ASCENDING = [False, False, False, True]


def is_paired_scope(championship: str, season: Any) -> bool:
    """Scopes with a shared title display tied leaders on the same rank."""
    return get_resolution_override(championship, season) is not None


def rank_standings(
    team_stats: Mapping[str, TeamStat],
    get_penalty: Optional[Callable[[str], int]] = None,
    paired: bool = False,
) -> List[StandingsRow]:
    """
    Build a standings table from team totals.

    Ordering:
        - effective points (points minus penalty) → desc
        - goal difference                         → desc
        - goals scored                            → desc
        - team name                               → asc

    Teams that have not played are left out. With `paired=True` equal
    (effective points, goal difference) runs share a rank and the next
    distinct run gets the following rank.
    """
    played = [stat for stat in team_stats.values() if stat.j > 0]
    if not played:
        return []

    get_penalty = get_penalty or (lambda name: 0)
    details: Dict[str, Optional[Dict[str, int]]] = {stat.name: stat.details for stat in played}

    table = pd.DataFrame(
        [{col: getattr(stat, col) for col in STAT_COLUMNS} for stat in played],
        columns=STAT_COLUMNS,
    )
    table["penalty"] = [int(get_penalty(name) or 0) for name in table["name"]]
    table["effective_pts"] = table["pts"] - table["penalty"]
    table = table.sort_values(by=SORT_COLUMNS, ascending=SORT_ASCENDING).reset_index(drop=True)

    if paired:
        changed = (
            table["effective_pts"].ne(table["effective_pts"].shift())
            | table["diff"].ne(table["diff"].shift())
        )
        table["pos"] = changed.cumsum()
    else:
        table["pos"] = table.index + 1

    return [
        StandingsRow(
            pos=int(row.pos),
            name=str(row.name),
            pts=int(row.pts),
            j=int(row.j),
            g=int(row.g),
            n=int(row.n),
            p=int(row.p),
            bp=int(row.bp),
            bc=int(row.bc),
            diff=int(row.diff),
            penalty=int(row.penalty),
            effective_pts=int(row.effective_pts),
            details=details.get(row.name),
        )
        for row in table.itertuples(index=False)
    ]


def standings_frame(rows: List[StandingsRow]) -> pd.DataFrame:
    """Tabular view of a standings list, indexed by position (CLI/report use)."""
    frame = pd.DataFrame(
        [
            {
                "pos": r.pos,
                "team": r.name,
                "played": r.j,
                "won": r.g,
                "drawn": r.n,
                "lost": r.p,
                "goals_for": r.bp,
                "goals_against": r.bc,
                "goal_difference": r.diff,
                "penalty": r.penalty,
                "points": r.effective_pts,
            }
            for r in rows
        ]
    )
    if frame.empty:
        return frame
    return frame.set_index("pos")

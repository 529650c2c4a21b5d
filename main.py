import argparse
import os

import pandas as pd

from builders.season_builder import build_scope_standings, build_season_entries, list_seasons
from builders.standings_builder import standings_frame
from contracts.championship import CHAMPIONSHIPS, get_championship
from metrics.stats_engine import compute_all_stats
from store.league_store import LeagueStore
from store.snapshot_io import read_snapshot_file, write_snapshot_file
from trophies.champions import derive_pantheon
from trophies.completion import season_progress

DEFAULT_DATA_PATH = os.path.join(os.path.dirname(__file__), "data", "hyenes.json")


def pantheon_frame(store: LeagueStore) -> pd.DataFrame:
    """Trophy board as a table indexed by rank; teams without titles are left out."""
    snapshot = store.snapshot()
    penalties = store.penalties()
    result = derive_pantheon(build_season_entries(snapshot, penalties), snapshot.team_names, penalties)
    frame = pd.DataFrame([t.to_dict() for t in result.teams if t.total > 0])
    if frame.empty:
        return frame
    return frame.set_index("rank")


def print_banner(title: str) -> None:
    print("\n")
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(description="Hyene Scores standings & statistics report")
    parser.add_argument(
        "--data",
        type=str,
        default=os.environ.get("HYENES_DATA_PATH", DEFAULT_DATA_PATH),
        help="v2.0 JSON snapshot to read",
    )
    parser.add_argument(
        "--championship",
        type=str,
        default="hyenes",
        help="Championship id (hyenes, france, spain, italy, england)",
    )
    parser.add_argument(
        "--season",
        type=int,
        default=None,
        help="Season number (default: latest)",
    )
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        help="Write a v2.0 export with recomputed standings to this path",
    )
    args = parser.parse_args()

    config = get_championship(args.championship)
    if config is None:
        known = ", ".join(c.id for c in CHAMPIONSHIPS)
        parser.error(f"unknown championship {args.championship!r} (expected one of {known})")

    print("=" * 60)
    print("  Hyene Scores  –  League Report")
    print("=" * 60)

    print(f"\n[*] Loading snapshot {args.data}...")
    store = LeagueStore.from_dict(read_snapshot_file(args.data))
    snapshot = store.snapshot()
    seasons = list_seasons(snapshot)
    print(f"[✓] {len(snapshot.managers)} managers, {len(snapshot.matches)} match blocks, "
          f"seasons {seasons or '-'}")

    season = args.season if args.season is not None else (seasons[-1] if seasons else None)
    if season is None:
        print("[!!] No season recorded yet")
        return

    # ── 1. Standings ─────────────────────────────────────────────
    entry = build_scope_standings(snapshot, config.key, season, store.penalties())
    print_banner(f"{config.name.upper()}  –  SEASON {season}")
    if entry is None or not entry.standings:
        print("  No standings yet")
    else:
        progress = season_progress(config.key, season, entry.played_matchdays, entry.standings)
        print(f"  Matchday {progress.current_matchday}/{progress.total_matchdays} "
              f"({progress.percentage}%){'  – complete' if progress.complete else ''}")
        if entry.exempt_team:
            print(f"  Exempt: {entry.exempt_team}")
        print(standings_frame(entry.standings).to_string())

    # ── 2. Pantheon ──────────────────────────────────────────────
    print_banner("PANTHEON")
    board = pantheon_frame(store)
    print(board.to_string() if not board.empty else "  No titles yet")

    # ── 3. Statistics summary ────────────────────────────────────
    stats = compute_all_stats(snapshot, config.id, season, store.penalties())
    print_banner("STATISTICS")
    if stats is None:
        print("  No scored matches in this scope")
    else:
        scoring = stats.scoring
        print(f"  Games: {scoring['totalGames']}  Goals: {scoring['totalGoals']}  "
              f"Avg: {scoring['averageGoals']}  4+ goals: {scoring['highScoringPercentage']}%")
        for win in stats.records["biggestWins"]:
            print(f"  Biggest win: {win['homeTeam']} {win['homeScore']}-{win['awayScore']} "
                  f"{win['awayTeam']} (J{win['matchday']})")
        for streak in stats.records["winStreaks"][:3]:
            print(f"  Win streak: {streak['team']} x{streak['length']}")

    if args.export:
        path = write_snapshot_file(store.to_export_dict(), args.export)
        print(f"\n[✓] Export saved → {path}")


if __name__ == "__main__":
    main()

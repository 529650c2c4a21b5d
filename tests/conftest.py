import pytest

from contracts.match import MatchBlock
from contracts.snapshot import Manager, Snapshot
from contracts.standings import SeasonEntry, StandingsRow


def _game(home, away, home_score, away_score):
    return {"homeTeam": home, "awayTeam": away, "homeScore": home_score, "awayScore": away_score}


@pytest.fixture
def make_block():
    """make_block("france", 1, 1, [("Ann", "Bob", 3, 1), ...], exempt="Cid")"""
    def _make(championship, season, matchday, games, exempt=""):
        return MatchBlock(
            championship=championship,
            season=season,
            matchday=matchday,
            games=[_game(*g) for g in games],
            exempt=exempt,
        )
    return _make


@pytest.fixture
def make_snapshot():
    def _make(team_names=(), blocks=(), seasons=None):
        managers = {f"m{i}": Manager(id=f"m{i}", name=name) for i, name in enumerate(team_names, 1)}
        return Snapshot(managers=managers, seasons=dict(seasons or {}), matches=list(blocks))
    return _make


@pytest.fixture
def make_entry():
    """make_entry("france", 1, 18, [("Ann", pts, diff, bp), ...])"""
    def _make(championship_key, season, played_matchdays, rows):
        standings = [
            StandingsRow(pos=i, name=name, pts=pts, j=played_matchdays, diff=diff, bp=bp,
                         bc=bp - diff, effective_pts=pts)
            for i, (name, pts, diff, bp) in enumerate(rows, 1)
        ]
        return SeasonEntry(
            championship_key=championship_key,
            season=season,
            standings=standings,
            played_matchdays=played_matchdays,
        )
    return _make

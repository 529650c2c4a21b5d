"""Team aggregation and standings ranking."""

from builders.standings_builder import rank_standings, standings_frame
from builders.team_aggregator import calculate_team_stats, sum_team_stats
from contracts.match import MatchBlock
from contracts.snapshot import penalty_lookup


def test_single_win():
    blocks = [MatchBlock("france", 1, 1, games=[{"home": "Ann", "away": "Bob", "hs": 3, "as": 1}])]

    rows = rank_standings(calculate_team_stats(blocks, ["Ann", "Bob"]))

    ann, bob = rows
    assert (ann.pos, ann.name) == (1, "Ann")
    assert (ann.j, ann.g, ann.n, ann.p, ann.bp, ann.bc, ann.diff, ann.pts) == (1, 1, 0, 0, 3, 1, 2, 3)
    assert (bob.pos, bob.name, bob.j, bob.pts, bob.p, bob.diff) == (2, "Bob", 1, 0, 1, -2)


def test_penalty_lowers_effective_points_and_diff_breaks_the_tie(make_block):
    blocks = [make_block("france", 1, 1, [("Ann", "Bob", 3, 1)])]
    penalties = {"france_1_Ann": 3}

    rows = rank_standings(
        calculate_team_stats(blocks, ["Ann", "Bob"]),
        penalty_lookup(penalties, "france", 1),
    )

    ann, bob = rows
    assert ann.name == "Ann" and ann.pos == 1
    assert ann.pts == 3 and ann.penalty == 3 and ann.effective_pts == 0
    assert bob.effective_pts == 0 and bob.pos == 2


def test_penalty_lookup_uses_championship_id():
    get_penalty = penalty_lookup({"spain_2_Ann": 4, "spain_2_Bob": -2, "spain_2_Cid": "x"}, "espagne", 2)
    assert get_penalty("Ann") == 4
    assert get_penalty("Bob") == 0
    assert get_penalty("Cid") == 0
    assert get_penalty("Dan") == 0


def test_half_scored_game_is_ignored(make_block):
    blocks = [make_block("france", 1, 1, [("Ann", "Bob", "2", None)])]
    stats = calculate_team_stats(blocks, ["Ann", "Bob"])
    assert stats["Ann"].j == 0
    assert stats["Bob"].j == 0
    assert rank_standings(stats) == []


def test_teams_without_games_are_left_out(make_block):
    blocks = [make_block("france", 1, 1, [("Ann", "Bob", 1, 1)])]
    rows = rank_standings(calculate_team_stats(blocks, ["Ann", "Bob", "Cid"]))
    assert [r.name for r in rows] == ["Ann", "Bob"]


def test_unknown_team_is_created_on_demand(make_block):
    blocks = [make_block("france", 1, 1, [("Ann", "Zed", 0, 2)])]
    stats = calculate_team_stats(blocks, ["Ann"])
    assert stats["Zed"].pts == 3


def test_name_is_the_final_tie_break(make_block):
    blocks = [make_block("france", 1, 1, [("Ann", "Cid", 1, 0), ("Bob", "Dan", 1, 0)])]
    stats = calculate_team_stats(blocks, ["Dan", "Cid", "Bob", "Ann"])

    rows = rank_standings(stats)

    assert [r.name for r in rows] == ["Ann", "Bob", "Cid", "Dan"]
    assert [r.pos for r in rows] == [1, 2, 3, 4]


def test_paired_ranking_shares_positions(make_block):
    blocks = [make_block("france", 6, 1, [("Ann", "Cid", 1, 0), ("Bob", "Dan", 1, 0)])]
    rows = rank_standings(calculate_team_stats(blocks, ["Ann", "Bob", "Cid", "Dan"]), paired=True)
    assert [(r.name, r.pos) for r in rows] == [("Ann", 1), ("Bob", 1), ("Cid", 2), ("Dan", 2)]


def test_duplicate_pair_in_a_block_counts_once(make_block):
    blocks = [make_block("france", 1, 1, [("Ann", "Bob", 2, 0), ("Ann", "Bob", 2, 0)])]
    stats = calculate_team_stats(blocks, ["Ann", "Bob"])
    assert stats["Ann"].j == 1
    assert stats["Ann"].pts == 3


def test_game_with_missing_team_is_skipped(make_block):
    blocks = [make_block("france", 1, 1, [("Ann", "", 2, 0)])]
    stats = calculate_team_stats(blocks, ["Ann"])
    assert stats["Ann"].j == 0
    assert "" not in stats


def test_totals_are_consistent(make_block):
    blocks = [
        make_block("france", 1, 1, [("Ann", "Bob", 3, 1), ("Cid", "Dan", 0, 0)]),
        make_block("france", 1, 2, [("Bob", "Cid", 2, 2), ("Dan", "Ann", 4, 1)]),
    ]
    rows = rank_standings(calculate_team_stats(blocks, ["Ann", "Bob", "Cid", "Dan"]))

    assert sum(r.g for r in rows) == sum(r.p for r in rows)
    assert sum(r.bp for r in rows) == sum(r.bc for r in rows)
    for r in rows:
        assert r.pts == 3 * r.g + r.n
        assert r.j == r.g + r.n + r.p
        assert r.diff == r.bp - r.bc


def test_sum_team_stats_keeps_points_per_league(make_block):
    france = calculate_team_stats([make_block("france", 1, 1, [("Ann", "Bob", 1, 0)])], ["Ann", "Bob"])
    spain = calculate_team_stats([make_block("espagne", 1, 1, [("Ann", "Bob", 1, 1)])], ["Ann", "Bob"])

    totals = sum_team_stats({"france": france, "espagne": spain}, ["Ann", "Bob"])

    assert totals["Ann"].pts == 4
    assert totals["Ann"].j == 2
    assert totals["Ann"].details == {"france": 3, "espagne": 1}
    assert totals["Bob"].details == {"france": 0, "espagne": 1}


def test_standings_frame_is_indexed_by_position(make_block):
    rows = rank_standings(
        calculate_team_stats([make_block("france", 1, 1, [("Ann", "Bob", 3, 1)])], ["Ann", "Bob"])
    )
    frame = standings_frame(rows)
    assert list(frame.index) == [1, 2]
    assert frame.loc[1, "team"] == "Ann"
    assert frame.loc[2, "goal_difference"] == -2

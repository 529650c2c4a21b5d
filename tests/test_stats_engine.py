"""Statistics views computed by compute_all_stats."""

import pytest

from metrics.scoring import score_label
from metrics.stats_engine import compute_all_stats
from contracts.match import FlatMatch


@pytest.fixture
def venue_snapshot(make_block, make_snapshot):
    return make_snapshot(
        ["Ann", "Bob", "Cid"],
        [
            make_block("france", 1, 1, [("Ann", "Bob", 2, 0)]),
            make_block("france", 1, 2, [("Ann", "Cid", 1, 1)]),
            make_block("france", 1, 3, [("Bob", "Ann", 0, 1)]),
        ],
    )


def test_biggest_win_comes_first(make_block, make_snapshot):
    snapshot = make_snapshot(
        ["Ann", "Bob", "Cid", "Dan"],
        [make_block("france", 1, 1, [("Cid", "Dan", 3, 1), ("Ann", "Bob", 5, 0)])],
    )

    stats = compute_all_stats(snapshot, "france", 1)

    top = stats.records["biggestWins"][0]
    assert (top["homeTeam"], top["homeScore"], top["awayScore"]) == ("Ann", 5, 0)
    assert top["margin"] == 5
    assert stats.records["biggestWins"][1]["margin"] == 2
    assert stats.total_matches == 2


def test_draws_are_not_wins(make_block, make_snapshot):
    snapshot = make_snapshot(["Ann", "Bob"], [make_block("france", 1, 1, [("Ann", "Bob", 4, 4)])])
    stats = compute_all_stats(snapshot)
    assert stats.records["biggestWins"] == []
    assert stats.records["highestScoring"][0]["totalGoals"] == 8


def test_empty_scope_has_no_stats(make_block, make_snapshot):
    snapshot = make_snapshot(["Ann", "Bob"], [make_block("france", 1, 1, [("Ann", "Bob", None, 1)])])
    assert compute_all_stats(snapshot) is None
    assert compute_all_stats(make_snapshot(), "england", 3) is None


def test_streaks_do_not_cross_seasons_or_championships(make_block, make_snapshot):
    snapshot = make_snapshot(
        ["Ann", "Bob", "Cid"],
        [
            make_block("france", 1, 17, [("Ann", "Bob", 1, 0)]),
            make_block("france", 1, 18, [("Ann", "Cid", 2, 0)]),
            make_block("france", 2, 1, [("Ann", "Bob", 1, 0)]),
            make_block("espagne", 1, 1, [("Ann", "Bob", 1, 0)]),
        ],
    )

    stats = compute_all_stats(snapshot)

    best = stats.records["winStreaks"][0]
    assert best == {
        "team": "Ann",
        "length": 2,
        "championship": "france",
        "season": 1,
        "startMatchday": 17,
        "endMatchday": 18,
    }


def test_unbeaten_streak_counts_draws(venue_snapshot):
    stats = compute_all_stats(venue_snapshot, "france", 1)
    unbeaten = {s["team"]: s["length"] for s in stats.records["unbeatenStreaks"]}
    wins = {s["team"]: s["length"] for s in stats.records["winStreaks"]}
    assert unbeaten["Ann"] == 3
    assert wins["Ann"] == 1
    assert "Bob" not in wins


def test_score_labels_are_symmetric(make_block, make_snapshot):
    assert score_label(FlatMatch("france", 1, 1, "Ann", "Bob", 1, 3)) == "3-1"

    snapshot = make_snapshot(
        ["Ann", "Bob", "Cid", "Dan"],
        [make_block("france", 1, 1, [("Ann", "Bob", 3, 1), ("Cid", "Dan", 1, 3)])],
    )
    stats = compute_all_stats(snapshot)
    assert stats.scoring["scoreFrequency"] == [{"score": "3-1", "count": 2}]


def test_scoring_totals(venue_snapshot):
    scoring = compute_all_stats(venue_snapshot).scoring
    assert scoring["totalGoals"] == 5
    assert scoring["totalGames"] == 3
    assert scoring["totalMatchdays"] == 3
    assert scoring["averageGoals"] == 1.67
    assert scoring["highScoringPercentage"] == 0.0
    clean = {row["team"]: row["cleanSheets"] for row in scoring["cleanSheets"]}
    assert clean == {"Ann": 2}


def test_performance_needs_three_games(venue_snapshot):
    performance = compute_all_stats(venue_snapshot).performance
    assert performance["pointsPerGame"] == [{"team": "Ann", "played": 3, "value": 2.33}]
    assert performance["winRate"][0]["value"] == 66.7
    assert performance["attack"][0]["value"] == 1.33
    assert performance["defense"][0]["value"] == 0.33


def test_performance_boards_are_ordered(make_block, make_snapshot):
    snapshot = make_snapshot(
        ["Ann", "Bob", "Cid"],
        [
            make_block("france", 1, 1, [("Ann", "Bob", 2, 1)]),
            make_block("france", 1, 2, [("Bob", "Cid", 0, 2)]),
            make_block("france", 1, 3, [("Cid", "Ann", 1, 1)]),
            make_block("france", 1, 4, [("Bob", "Ann", 4, 1)]),
            make_block("france", 1, 5, [("Cid", "Bob", 0, 0)]),
            make_block("france", 1, 6, [("Ann", "Cid", 3, 2)]),
        ],
    )

    performance = compute_all_stats(snapshot, "france", 1).performance

    def board(name):
        return [(row["team"], row["value"]) for row in performance[name]]

    assert board("pointsPerGame") == [("Ann", 1.75), ("Cid", 1.25), ("Bob", 1.0)]
    assert board("winRate") == [("Ann", 50.0), ("Bob", 25.0), ("Cid", 25.0)]
    assert board("attack") == [("Ann", 1.75), ("Bob", 1.25), ("Cid", 1.25)]
    assert board("defense") == [("Cid", 1.0), ("Bob", 1.25), ("Ann", 2.0)]


def test_score_frequency_keeps_the_ten_most_common(make_block, make_snapshot):
    blocks = [make_block("france", 1, day, [("Ann", "Bob", day - 1, 0)]) for day in range(1, 12)]
    blocks.append(make_block("france", 1, 12, [("Bob", "Ann", 0, 3)]))

    frequencies = compute_all_stats(make_snapshot(["Ann", "Bob"], blocks)).scoring["scoreFrequency"]

    assert len(frequencies) == 10
    assert frequencies[0] == {"score": "3-0", "count": 2}
    assert "9-0" not in [row["score"] for row in frequencies]


def test_head_to_head(venue_snapshot):
    h2h = compute_all_stats(venue_snapshot).head_to_head
    assert h2h["teams"] == ["Ann", "Bob", "Cid"]
    assert h2h["matrix"]["Ann"]["Bob"] == {"w": 2, "d": 0, "l": 0, "gf": 3, "ga": 0, "played": 2}
    assert h2h["matrix"]["Bob"]["Ann"]["l"] == 2
    assert len(h2h["matches"]["Ann|Bob"]) == 2


def test_home_away_split(venue_snapshot):
    home_away = compute_all_stats(venue_snapshot).home_away

    ann = home_away["teams"]["Ann"]
    assert (ann["home"]["j"], ann["home"]["pts"], ann["home"]["winRate"], ann["home"]["ppg"]) == (2, 4, 50.0, 2.0)
    assert (ann["away"]["j"], ann["away"]["pts"], ann["away"]["ppg"]) == (1, 3, 3.0)
    assert [c["team"] for c in home_away["comparison"]] == ["Ann"]
    assert home_away["comparison"][0]["difference"] == -1.0
    assert [b["team"] for b in home_away["bestHome"]] == ["Ann"]
    assert home_away["bestAway"] == []


def test_trends_follow_each_matchday(make_block, make_snapshot):
    snapshot = make_snapshot(
        ["Ann", "Bob"],
        [
            make_block("france", 1, 1, [("Ann", "Bob", 2, 0)]),
            make_block("france", 1, 2, [("Bob", "Ann", 1, 0)]),
        ],
    )

    trends = compute_all_stats(snapshot, "france", 1).trends
    assert trends["matchdays"] == [1, 2]
    assert trends["points"] == {"Ann": [3, 3], "Bob": [0, 3]}
    assert trends["ranks"] == {"Ann": [1, 1], "Bob": [2, 2]}

    penalized = compute_all_stats(snapshot, "france", 1, {"france_1_Ann": 2}).trends
    assert penalized["points"]["Ann"] == [1, 1]
    assert penalized["ranks"] == {"Ann": [1, 2], "Bob": [2, 1]}


def test_trends_need_a_season(venue_snapshot):
    assert compute_all_stats(venue_snapshot, "france", "all").trends is None


def test_trophies_ignore_persisted_standings(make_entry, make_block, make_snapshot):
    snapshot = make_snapshot(
        ["Ann", "Bob"],
        [make_block("france", 2, 1, [("Ann", "Bob", 1, 0)])],
        {"france_s1": make_entry("france", 1, 18, [("Bob", 40, 10, 30)])},
    )
    assert compute_all_stats(snapshot).records["trophies"] == []


def test_compute_all_stats_is_idempotent(venue_snapshot):
    before = venue_snapshot.to_dict()
    first = compute_all_stats(venue_snapshot, "france", 1).to_dict()
    second = compute_all_stats(venue_snapshot, "france", 1).to_dict()
    assert first == second
    assert venue_snapshot.to_dict() == before
    assert set(first) == {
        "championship", "season", "totalMatches", "records", "performance",
        "headToHead", "trends", "homeAway", "scoring",
    }

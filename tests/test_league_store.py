"""League store: managers, penalties, matchdays, seasons and import/export."""

import pytest

from contracts.trophies import ChampionRecord, TrophyRecord
from store.errors import ManagerNameError, MatchdayError, PenaltyError
from store.league_store import LeagueStore


@pytest.fixture
def payload():
    return {
        "version": "2.0",
        "entities": {
            "managers": {
                "ann": {"id": "ann", "name": "Ann"},
                "bob": {"id": "bob", "name": "Bob"},
            },
            "seasons": {
                "france_s1": {
                    "standings": [
                        {"pos": 1, "mgr": "Ann", "pts": 40, "j": 18, "diff": "+12"},
                        {"pos": 2, "mgr": "Bob", "pts": 30, "j": 18, "diff": "-12"},
                    ],
                    "playedMatchdays": 18,
                    "exemptTeam": "Bob",
                },
            },
            "matches": [
                {
                    "championship": "france",
                    "season": 2,
                    "matchday": 1,
                    "games": [{"homeTeam": "Ann", "awayTeam": "Bob", "homeScore": 2, "awayScore": 1}],
                },
            ],
        },
        "penalties": {"france_2_Bob": 1},
    }


@pytest.fixture
def store(payload):
    return LeagueStore.from_dict(payload)


def test_load_round_trips_names(store):
    snapshot = store.snapshot()
    assert sorted(snapshot.team_names) == ["Ann", "Bob"]
    assert snapshot.matches[0].games[0]["homeTeam"] == "Ann"
    assert snapshot.seasons["france_s1"].standings[0].name == "Ann"
    assert snapshot.seasons["france_s1"].exempt_team == "Bob"
    assert store.penalties() == {"france_2_Bob": 1}


def test_rename_reaches_every_reference(store):
    store.save_champion(ChampionRecord("france", 1, "Ann", "Bob"))

    store.rename_manager("ann", "Annie")

    snapshot = store.snapshot()
    assert snapshot.matches[0].games[0]["homeTeam"] == "Annie"
    assert snapshot.seasons["france_s1"].standings[0].name == "Annie"
    assert store.champions_archive()[0].champion == "Annie"

    store.rename_manager("bob", "Bobby")
    assert store.penalties() == {"france_2_Bobby": 1}
    assert store.snapshot().seasons["france_s1"].exempt_team == "Bobby"


def test_rename_unknown_manager(store):
    with pytest.raises(KeyError):
        store.rename_manager("zed", "Zed")


def test_snapshot_is_a_copy(store):
    snapshot = store.snapshot()
    snapshot.matches[0].games[0]["homeTeam"] = "Mallory"
    snapshot.seasons["france_s1"].standings[0].name = "Mallory"
    assert store.snapshot().matches[0].games[0]["homeTeam"] == "Ann"
    assert store.snapshot().seasons["france_s1"].standings[0].name == "Ann"


@pytest.mark.parametrize("name", ["", "   ", "x" * 51, "<b>", "ann"])
def test_invalid_manager_names(store, name):
    with pytest.raises(ManagerNameError):
        store.add_manager(name)


def test_add_manager_claims_unmanaged_games():
    store = LeagueStore()
    store.record_matchday("france", 1, 1, [{"homeTeam": "Zoé", "awayTeam": "Ann", "homeScore": 1, "awayScore": 0}])

    manager = store.add_manager("  Zoé ")
    store.rename_manager(manager.id, "Zoé B.")

    assert manager.name == "Zoé"
    assert store.snapshot().matches[0].games[0]["homeTeam"] == "Zoé B."
    assert store.snapshot().matches[0].games[0]["awayTeam"] == "Ann"


def test_manager_ids_stay_unique():
    store = LeagueStore()
    first = store.add_manager("Jean Paul")
    second = store.add_manager("Jean-Paul")
    assert first.id == "jean_paul"
    assert second.id != first.id


@pytest.mark.parametrize("points", [-1, "two", 1.5, True, None])
def test_invalid_penalties(store, points):
    with pytest.raises(PenaltyError):
        store.set_penalty("france", 2, "Ann", points)


def test_penalty_set_and_remove(store):
    assert store.set_penalty("espagne", 2, "Ann", "3") == 3
    assert store.penalties()["spain_2_Ann"] == 3
    assert store.scope_penalties("spain", 2) == {"Ann": 3}
    assert store.remove_penalty("spain", 2, "Ann")
    assert not store.remove_penalty("spain", 2, "Ann")


def test_record_matchday_replaces_the_block(store):
    store.record_matchday(
        "France", 2, 1,
        [
            {"homeTeam": "Bob", "awayTeam": "Ann", "homeScore": "3", "awayScore": 0},
            {"homeTeam": "Ann", "awayTeam": "", "homeScore": 1, "awayScore": 1},
            {"homeTeam": "Cid", "awayTeam": "Dan", "homeScore": "", "awayScore": None},
        ],
        exempt="Eve",
    )

    blocks = [b for b in store.snapshot().matches if b.identity == ("france", 2, 1)]
    assert len(blocks) == 1
    assert blocks[0].exempt == "Eve"
    assert [(g["homeTeam"], g["homeScore"]) for g in blocks[0].games] == [("Bob", 3), ("Cid", None)]


@pytest.mark.parametrize(
    "championship, games",
    [
        ("hyenes", []),
        ("france", [{"homeTeam": "Ann", "awayTeam": "Bob", "homeScore": 100, "awayScore": 0}]),
        ("france", [{"homeTeam": "Ann", "awayTeam": "Bob", "homeScore": -1, "awayScore": 0}]),
        ("france", [{"homeTeam": f"T{i}", "awayTeam": f"U{i}"} for i in range(6)]),
    ],
)
def test_record_matchday_rejects(store, championship, games):
    with pytest.raises(MatchdayError):
        store.record_matchday(championship, 2, 2, games)


def test_create_season(store):
    keys = store.create_season(3)
    assert len(keys) == 5
    assert "ligue_hyenes_s3" in store.snapshot().seasons
    with pytest.raises(ValueError):
        store.create_season(3)
    with pytest.raises(ValueError):
        store.create_season(0)


def test_export_recomputes_standings(store):
    store.set_penalty("france", 2, "Ann", 1)
    exported = store.to_export_dict()

    assert exported["version"] == "2.0"
    seasons = exported["entities"]["seasons"]
    assert list(seasons) == ["france_s1", "france_s2", "ligue_hyenes_s2"]
    top = seasons["france_s2"]["standings"][0]
    assert (top["mgr"], top["pts"], top["penalty"], top["effectivePts"]) == ("Ann", 3, 1, 2)
    assert exported["penalties"] == {"france_2_Bob": 1, "france_2_Ann": 1}


def test_export_can_be_loaded_back(store):
    store.save_champion(ChampionRecord("france", 1, "Ann", "Bob"))
    store.save_pantheon_entry(TrophyRecord(name="Ann", france=1, total=1, rank=1))

    reloaded = LeagueStore.from_dict(store.to_export_dict())

    assert reloaded.penalties() == store.penalties()
    assert [c.to_dict() for c in reloaded.champions_archive()] == [
        {"championship": "france", "season": 1, "champion": "Ann", "runnerUp": "Bob"}
    ]
    assert reloaded.snapshot().seasons["france_s2"].standings[0].name == "Ann"
    assert reloaded.pantheon_archive() == store.pantheon_archive()
    assert reloaded.to_export_dict()["pantheon"] == store.to_export_dict()["pantheon"]


def test_load_skips_malformed_pantheon_rows(payload, caplog):
    payload["pantheon"] = [
        {"rank": 1, "name": "Ann", "france": 2, "total": 2},
        {"rank": 2, "name": ""},
        "Bob",
        {"rank": 3, "name": "Bob", "total": "many"},
    ]

    with caplog.at_level("WARNING"):
        store = LeagueStore.from_dict(payload)

    assert [(t.name, t.france, t.total) for t in store.pantheon_archive()] == [("Ann", 2, 2)]
    assert len([r for r in caplog.records if "pantheon" in r.getMessage()]) == 3


def test_set_exempt_team(store):
    assert store.set_exempt_team("spain", 1, "Ann") == "Ann"
    assert store.snapshot().seasons["espagne_s1"].exempt_team == "Ann"

    store.rename_manager("ann", "Annie")
    assert store.snapshot().seasons["espagne_s1"].exempt_team == "Annie"

    assert store.set_exempt_team("spain", 1, "") == ""
    assert store.snapshot().seasons["espagne_s1"].exempt_team == ""


@pytest.mark.parametrize("championship, season", [("bundesliga", 1), ("france", 0), ("france", "two")])
def test_set_exempt_team_rejects(store, championship, season):
    with pytest.raises(ValueError):
        store.set_exempt_team(championship, season, "Ann")

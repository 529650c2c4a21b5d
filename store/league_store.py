import logging
import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from builders.match_normalizer import normalize_match, parse_score
from builders.season_builder import build_season_entries
from contracts.championship import (
    CHAMPIONSHIPS,
    DOMESTIC_KEYS,
    MATCHES_PER_MATCHDAY,
    championship_id,
    championship_key,
    get_championship,
    parse_season_key,
    season_key,
)
from contracts.match import MatchBlock
from contracts.snapshot import Manager, Snapshot
from contracts.standings import SeasonEntry
from contracts.trophies import ChampionRecord, ChampionSinkContract, TrophyRecord
from store.errors import ManagerNameError, MatchdayError, PenaltyError
from store.snapshot_io import SUPPORTED_VERSION

logger = logging.getLogger(__name__)

MAX_SCORE = 99
MIN_SCORE = 0
MAX_MANAGER_NAME_LENGTH = 50
MANAGER_NAME_PATTERN = re.compile(r"(?:[^\W_]|[\s\-'.])+")

# Teams without a manager entry are referenced by name behind this prefix.
UNMANAGED_PREFIX = "~"
NAME_SEPARATOR = " / "

BlockKey = Tuple[str, int, int]
PenaltyKey = Tuple[str, int, str]


def _penalty_parts(key: str) -> Optional[Tuple[str, int, str]]:
    """'france_6_BimBam' -> ('france', 6, 'BimBam')."""
    parts = str(key).split("_", 2)
    if len(parts) != 3 or not parts[2]:
        return None
    try:
        return championship_id(parts[0]), int(parts[1]), parts[2]
    except ValueError:
        return None


class LeagueStore(ChampionSinkContract):
    """
    In-memory league state.

    Games, persisted standings, exempt teams, penalties and the champion
    archive reference teams by manager id, so renaming a manager is a single
    update. Names are resolved only when a Snapshot is materialized.
    """

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self._managers: Dict[str, str] = {}
        self._blocks: Dict[BlockKey, dict] = {}
        self._seasons: Dict[str, SeasonEntry] = {}
        self._penalties: Dict[PenaltyKey, int] = {}
        self._champions: Dict[Tuple[str, int], dict] = {}
        self._pantheon: Dict[str, TrophyRecord] = {}

    # ------------------------------------------------------------------
    # references
    # ------------------------------------------------------------------
    def _ref(self, name: Any) -> str:
        name = str(name or "").strip()
        if not name:
            return ""
        for manager_id, manager_name in self._managers.items():
            if manager_name == name:
                return manager_id
        return UNMANAGED_PREFIX + name

    def _name(self, ref: str) -> str:
        if not ref:
            return ""
        if ref.startswith(UNMANAGED_PREFIX):
            return ref[len(UNMANAGED_PREFIX):]
        return self._managers.get(ref, "?")

    def _refs(self, label: Optional[str]) -> Tuple[str, ...]:
        if not label:
            return ()
        return tuple(self._ref(part) for part in str(label).split(NAME_SEPARATOR))

    def _label(self, refs: Iterable[str]) -> str:
        return NAME_SEPARATOR.join(self._name(r) for r in refs)

    def _rebind_unmanaged(self, manager_id: str, name: str) -> None:
        """Point every '~name' reference at a freshly added manager."""
        old = UNMANAGED_PREFIX + name

        def swap(ref: str) -> str:
            return manager_id if ref == old else ref

        for block in self._blocks.values():
            block["exempt"] = swap(block["exempt"])
            for game in block["games"]:
                game["home"] = swap(game["home"])
                game["away"] = swap(game["away"])
        for entry in self._seasons.values():
            entry.exempt_team = swap(entry.exempt_team)
            entry.standings = [replace(row, name=swap(row.name)) for row in entry.standings]
        self._penalties = {
            (champ, season, swap(ref)): points
            for (champ, season, ref), points in self._penalties.items()
        }
        for record in self._champions.values():
            record["champions"] = tuple(swap(r) for r in record["champions"])
            record["runner_up"] = tuple(swap(r) for r in record["runner_up"])
        if old in self._pantheon:
            self._pantheon[manager_id] = self._pantheon.pop(old)

    # ------------------------------------------------------------------
    # managers
    # ------------------------------------------------------------------
    def managers(self) -> List[Manager]:
        return sorted(
            (Manager(id=mid, name=name) for mid, name in self._managers.items()),
            key=lambda m: m.name.lower(),
        )

    def _validate_name(self, name: Any, ignore_id: Optional[str] = None) -> str:
        trimmed = str(name or "").strip()
        if not trimmed:
            raise ManagerNameError("Manager name cannot be empty")
        if len(trimmed) > MAX_MANAGER_NAME_LENGTH:
            raise ManagerNameError(
                f"Manager name cannot exceed {MAX_MANAGER_NAME_LENGTH} characters"
            )
        if not MANAGER_NAME_PATTERN.fullmatch(trimmed):
            raise ManagerNameError("Manager name contains forbidden characters")
        for mid, existing in self._managers.items():
            if mid != ignore_id and existing.lower() == trimmed.lower():
                raise ManagerNameError(f"Manager {trimmed} already exists")
        return trimmed

    def add_manager(self, name: Any) -> Manager:
        trimmed = self._validate_name(name)
        base = re.sub(r"[^a-z0-9_]", "", re.sub(r"\s+", "_", trimmed.lower())) or "manager"
        manager_id = base
        suffix = 2
        while manager_id in self._managers or manager_id.startswith(UNMANAGED_PREFIX):
            manager_id = f"{base}_{suffix}"
            suffix += 1
        self._managers[manager_id] = trimmed
        self._rebind_unmanaged(manager_id, trimmed)
        logger.info("Added manager %s (%s)", trimmed, manager_id)
        return Manager(id=manager_id, name=trimmed)

    def rename_manager(self, manager_id: str, new_name: Any) -> Manager:
        if manager_id not in self._managers:
            raise KeyError(f"Manager {manager_id} not found")
        trimmed = self._validate_name(new_name, ignore_id=manager_id)
        old_name = self._managers[manager_id]
        self._managers[manager_id] = trimmed
        self._rebind_unmanaged(manager_id, trimmed)
        logger.info("Renamed manager %s: %s -> %s", manager_id, old_name, trimmed)
        return Manager(id=manager_id, name=trimmed)

    # ------------------------------------------------------------------
    # penalties
    # ------------------------------------------------------------------
    def set_penalty(self, championship: str, season: int, team: str, points: Any) -> int:
        if isinstance(points, bool):
            raise PenaltyError("Penalty points must be an integer")
        try:
            value = int(points)
        except (TypeError, ValueError):
            raise PenaltyError("Penalty points must be an integer")
        if isinstance(points, float) and not float(points).is_integer():
            raise PenaltyError("Penalty points must be an integer")
        if value < 0:
            raise PenaltyError("Penalty points cannot be negative")
        if get_championship(championship) is None:
            raise PenaltyError(f"Unknown championship {championship}")
        ref = self._ref(team)
        if not ref:
            raise PenaltyError("Penalty needs a team")
        self._penalties[(championship_id(championship), int(season), ref)] = value
        return value

    def remove_penalty(self, championship: str, season: int, team: str) -> bool:
        key = (championship_id(championship), int(season), self._ref(team))
        return self._penalties.pop(key, None) is not None

    def penalties(self) -> Dict[str, int]:
        """Penalties keyed '<champId>_<season>_<team>' with current names."""
        return {
            f"{champ}_{season}_{self._name(ref)}": points
            for (champ, season, ref), points in self._penalties.items()
        }

    def scope_penalties(self, championship: str, season: int) -> Dict[str, int]:
        champ = championship_id(championship)
        return {
            self._name(ref): points
            for (c, s, ref), points in self._penalties.items()
            if c == champ and s == season
        }

    # ------------------------------------------------------------------
    # seasons and matches
    # ------------------------------------------------------------------
    def create_season(self, season: Any) -> List[str]:
        """Empty entries for every championship; returns the created keys."""
        try:
            number = int(season)
        except (TypeError, ValueError):
            raise ValueError("Season must be an integer")
        if number < 1:
            raise ValueError("Season must be at least 1")
        keys = [season_key(c.key, number) for c in CHAMPIONSHIPS]
        if any(key in self._seasons for key in keys):
            raise ValueError(f"Season {number} already exists")
        for config in CHAMPIONSHIPS:
            self._seasons[season_key(config.key, number)] = SeasonEntry(
                championship_key=config.key, season=number
            )
        logger.info("Created season %s", number)
        return keys

    def _store_game(self, record: Any) -> dict:
        match = normalize_match(record)
        return {
            "home": self._ref(match.home_team),
            "away": self._ref(match.away_team),
            "homeScore": match.home_score,
            "awayScore": match.away_score,
        }

    def _put_block(self, block: MatchBlock) -> None:
        self._blocks[block.identity] = {
            "championship": str(block.championship or "").lower(),
            "season": block.season,
            "matchday": block.matchday,
            "exempt": self._ref(block.exempt),
            "games": [self._store_game(g) for g in block.games],
        }

    @staticmethod
    def _checked_score(value: Any) -> Optional[int]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        score = parse_score(value)
        if score is None or not MIN_SCORE <= score <= MAX_SCORE:
            raise MatchdayError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}")
        return score

    def record_matchday(
        self,
        championship: str,
        season: int,
        matchday: int,
        games: Iterable[Mapping[str, Any]],
        exempt: str = "",
    ) -> MatchBlock:
        """
        Replace the block of one domestic matchday.
        Games missing a team are dropped; scores must be empty or in range.
        """
        champ = championship_key(championship)
        if champ not in DOMESTIC_KEYS:
            raise MatchdayError(f"Matches are recorded per domestic league, not {championship}")
        try:
            season, matchday = int(season), int(matchday)
        except (TypeError, ValueError):
            raise MatchdayError("Season and matchday must be integers")
        if season < 1 or matchday < 1:
            raise MatchdayError("Season and matchday must be at least 1")

        kept = []
        for raw in games or []:
            if not isinstance(raw, Mapping):
                continue
            match = normalize_match(raw)
            if not match.home_team or not match.away_team:
                continue
            kept.append(
                {
                    "homeTeam": match.home_team,
                    "awayTeam": match.away_team,
                    "homeScore": self._checked_score(match.home_score),
                    "awayScore": self._checked_score(match.away_score),
                }
            )
        if len(kept) > MATCHES_PER_MATCHDAY:
            raise MatchdayError(f"A matchday holds at most {MATCHES_PER_MATCHDAY} games")

        block = MatchBlock(
            championship=champ, season=season, matchday=matchday,
            games=kept, exempt=str(exempt or "").strip(),
        )
        self._put_block(block)
        logger.info("Recorded %s s%s J%s (%d games)", champ, season, matchday, len(kept))
        return block

    def set_exempt_team(self, championship: str, season: Any, team: Any) -> str:
        """Team sitting out a season; an empty name clears it."""
        if get_championship(championship) is None:
            raise ValueError(f"Unknown championship {championship}")
        try:
            season = int(season)
        except (TypeError, ValueError):
            raise ValueError("Season must be a positive integer")
        if season < 1:
            raise ValueError("Season must be a positive integer")
        key = season_key(championship_key(championship), season)
        entry = self._seasons.get(key)
        if entry is None:
            entry = SeasonEntry(championship_key=championship_key(championship), season=int(season))
            self._seasons[key] = entry
        entry.exempt_team = self._ref(team)
        return self._name(entry.exempt_team)

    # ------------------------------------------------------------------
    # materialization
    # ------------------------------------------------------------------
    def snapshot(self) -> Snapshot:
        """A fresh, name-resolved copy of the state for one computation."""
        managers = {mid: Manager(id=mid, name=name) for mid, name in self._managers.items()}
        seasons = {
            key: replace(
                entry,
                standings=[replace(row, name=self._name(row.name),
                                   details=dict(row.details) if row.details else row.details)
                           for row in entry.standings],
                exempt_team=self._name(entry.exempt_team),
            )
            for key, entry in self._seasons.items()
        }
        matches = [
            MatchBlock(
                championship=block["championship"],
                season=block["season"],
                matchday=block["matchday"],
                exempt=self._name(block["exempt"]),
                games=[
                    {
                        "homeTeam": self._name(game["home"]),
                        "awayTeam": self._name(game["away"]),
                        "homeScore": game["homeScore"],
                        "awayScore": game["awayScore"],
                    }
                    for game in block["games"]
                ],
            )
            for block in self._blocks.values()
        ]
        return Snapshot(managers=managers, seasons=seasons, matches=matches)

    # ------------------------------------------------------------------
    # champion sink
    # ------------------------------------------------------------------
    def save_champion(self, record: ChampionRecord) -> None:
        self._champions[(record.championship, record.season)] = {
            "champions": self._refs(record.champion),
            "runner_up": self._refs(record.runner_up),
        }

    def save_pantheon_entry(self, record: TrophyRecord) -> None:
        self._pantheon[self._ref(record.name)] = replace(record)

    def champions_archive(self) -> List[ChampionRecord]:
        archive = [
            ChampionRecord(
                championship=champ,
                season=season,
                champion=self._label(data["champions"]),
                runner_up=self._label(data["runner_up"]) or None,
            )
            for (champ, season), data in self._champions.items()
        ]
        archive.sort(key=lambda r: (-r.season, r.championship))
        return archive

    def pantheon_archive(self) -> List[TrophyRecord]:
        teams = [replace(record, name=self._name(ref)) for ref, record in self._pantheon.items()]
        return sorted(teams, key=lambda t: (t.rank or len(teams) + 1, t.name))

    # ------------------------------------------------------------------
    # import / export
    # ------------------------------------------------------------------
    def load(self, payload: Mapping[str, Any]) -> None:
        """
        Replace the whole state with a validated v2.0 document (or bare
        snapshot). Malformed entries are dropped, as the engine would.
        """
        snapshot = Snapshot.from_dict(payload)
        self._reset()
        for manager in snapshot.managers.values():
            self._managers[manager.id] = manager.name

        for key, entry in snapshot.seasons.items():
            self._seasons[key] = replace(
                entry,
                standings=[replace(row, name=self._ref(row.name)) for row in entry.standings],
                exempt_team=self._ref(entry.exempt_team),
            )
        for block in snapshot.matches:
            if block.identity in self._blocks:
                logger.warning("Duplicate match block %s in import, keeping the latest", block.identity)
            self._put_block(block)

        raw_penalties = payload.get("penalties") if isinstance(payload, Mapping) else None
        for key, points in (raw_penalties or {}).items():
            parts = _penalty_parts(key)
            if parts is None:
                logger.warning("Ignoring malformed penalty key %r", key)
                continue
            try:
                self.set_penalty(parts[0], parts[1], parts[2], points)
            except PenaltyError as exc:
                logger.warning("Ignoring penalty %r: %s", key, exc)

        palmares = payload.get("palmares") if isinstance(payload, Mapping) else None
        for raw in palmares if isinstance(palmares, list) else []:
            if not isinstance(raw, Mapping):
                continue
            try:
                season = int(raw.get("season"))
            except (TypeError, ValueError):
                continue
            self.save_champion(
                ChampionRecord(
                    championship=championship_key(raw.get("championship")),
                    season=season,
                    champion=str(raw.get("champion") or ""),
                    runner_up=raw.get("runnerUp") or None,
                )
            )

        pantheon = payload.get("pantheon") if isinstance(payload, Mapping) else None
        for raw in pantheon if isinstance(pantheon, list) else []:
            if not isinstance(raw, Mapping):
                logger.warning("Ignoring malformed pantheon row %r", raw)
                continue
            try:
                self.save_pantheon_entry(TrophyRecord.from_dict(raw))
            except (TypeError, ValueError) as exc:
                logger.warning("Ignoring pantheon row %r: %s", raw, exc)
        logger.info(
            "Loaded %d managers, %d seasons, %d match blocks",
            len(self._managers), len(self._seasons), len(self._blocks),
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LeagueStore":
        store = cls()
        store.load(payload)
        return store

    def to_export_dict(self) -> dict:
        """v2.0 document with standings recomputed for every scope with matches."""
        snapshot = self.snapshot()
        penalties = self.penalties()
        seasons = build_season_entries(snapshot, penalties)
        return {
            "version": SUPPORTED_VERSION,
            "entities": {
                "managers": {mid: m.to_dict() for mid, m in snapshot.managers.items()},
                "seasons": {key: seasons[key].to_dict() for key in sorted(seasons, key=_season_order)},
                "matches": [block.to_dict() for block in snapshot.matches],
            },
            "penalties": penalties,
            "palmares": [record.to_dict() for record in self.champions_archive()],
            "pantheon": [record.to_dict() for record in self.pantheon_archive()],
        }


def _season_order(key: str) -> Tuple[int, str]:
    parsed = parse_season_key(key)
    if parsed is None:
        return (0, key)
    return (parsed[1], parsed[0])

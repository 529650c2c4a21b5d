from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


STANDARD_MATCHDAYS = 18
HYENES_MATCHDAYS = 72
SPECIAL_SEASON = 6
FRANCE_S6_MATCHDAYS = 8
HYENES_S6_MATCHDAYS = 62
MATCHES_PER_MATCHDAY = 5

SUPER_LEAGUE_ID = "hyenes"
SUPER_LEAGUE_KEY = "ligue_hyenes"


@dataclass(frozen=True)
class ChampionshipConfig:
    """
    Static description of one championship track.
    `key` is the internal identifier used in season keys and match blocks,
    `id` is the user-facing identifier used in filters and penalty keys.
    """
    id: str
    key: str
    name: str
    icon: str
    trophy_field: str
    standard_matchdays: int
    special_season: Optional[int] = None
    special_matchdays: Optional[int] = None

    @property
    def is_super_league(self) -> bool:
        return self.id == SUPER_LEAGUE_ID

    def total_matchdays(self, season: int) -> int:
        if self.special_season is not None and season == self.special_season:
            return self.special_matchdays
        return self.standard_matchdays

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "icon": self.icon,
            "standard_matchdays": self.standard_matchdays,
            "special_season": self.special_season,
            "special_matchdays": self.special_matchdays,
        }


CHAMPIONSHIPS: List[ChampionshipConfig] = [
    ChampionshipConfig(
        id="hyenes", key="ligue_hyenes", name="Ligue des Hyènes", icon="\U0001F3C6",
        trophy_field="trophies", standard_matchdays=HYENES_MATCHDAYS,
        special_season=SPECIAL_SEASON, special_matchdays=HYENES_S6_MATCHDAYS,
    ),
    ChampionshipConfig(
        id="france", key="france", name="France", icon="\U0001F1EB\U0001F1F7",
        trophy_field="france", standard_matchdays=STANDARD_MATCHDAYS,
        special_season=SPECIAL_SEASON, special_matchdays=FRANCE_S6_MATCHDAYS,
    ),
    ChampionshipConfig(
        id="spain", key="espagne", name="Espagne", icon="\U0001F1EA\U0001F1F8",
        trophy_field="spain", standard_matchdays=STANDARD_MATCHDAYS,
    ),
    ChampionshipConfig(
        id="italy", key="italie", name="Italie", icon="\U0001F1EE\U0001F1F9",
        trophy_field="italy", standard_matchdays=STANDARD_MATCHDAYS,
    ),
    ChampionshipConfig(
        id="england", key="angleterre", name="Angleterre",
        icon="\U0001F3F4\U000E0067\U000E0062\U000E0065\U000E006E\U000E0067\U000E007F",
        trophy_field="england", standard_matchdays=STANDARD_MATCHDAYS,
    ),
]

CHAMPIONSHIP_MAPPING: Dict[str, str] = {c.id: c.key for c in CHAMPIONSHIPS}
REVERSE_CHAMPIONSHIP_MAPPING: Dict[str, str] = {c.key: c.id for c in CHAMPIONSHIPS}
CHAMPIONSHIPS_BY_ID: Dict[str, ChampionshipConfig] = {c.id: c for c in CHAMPIONSHIPS}
CHAMPIONSHIPS_BY_KEY: Dict[str, ChampionshipConfig] = {c.key: c for c in CHAMPIONSHIPS}

DOMESTIC_KEYS: Tuple[str, ...] = tuple(c.key for c in CHAMPIONSHIPS if not c.is_super_league)
TROPHY_FIELDS: Tuple[str, ...] = tuple(c.trophy_field for c in CHAMPIONSHIPS)


def championship_key(championship: str) -> str:
    """Translate an id ('spain') to its key ('espagne'); keys pass through."""
    text = str(championship or "").strip().lower()
    return CHAMPIONSHIP_MAPPING.get(text, text)


def championship_id(championship: str) -> str:
    """Translate a key ('espagne') to its id ('spain'); ids pass through."""
    text = str(championship or "").strip().lower()
    return REVERSE_CHAMPIONSHIP_MAPPING.get(text, text)


def get_championship(championship: str) -> Optional[ChampionshipConfig]:
    return CHAMPIONSHIPS_BY_KEY.get(championship_key(championship))


def season_key(championship: str, season: int) -> str:
    return f"{championship_key(championship)}_s{season}"


def parse_season_key(key: str) -> Optional[Tuple[str, int]]:
    """'ligue_hyenes_s6' -> ('ligue_hyenes', 6); None when malformed."""
    head, sep, tail = str(key).rpartition("_s")
    if not sep or not head:
        return None
    try:
        return head, int(tail)
    except ValueError:
        return None


@dataclass(frozen=True)
class ResolutionOverride:
    """
    Manual resolution of a season whose title was shared.
    The scope is considered complete regardless of matchdays played.
    """
    championship_key: str
    season: int
    co_champions: Tuple[str, ...] = field(default_factory=tuple)
    separator: str = " / "

    @property
    def label(self) -> str:
        return self.separator.join(self.co_champions)


RESOLUTION_OVERRIDES: Dict[Tuple[str, int], ResolutionOverride] = {
    ("france", 6): ResolutionOverride(
        championship_key="france",
        season=6,
        co_champions=("BimBam", "Warnaque"),
    ),
}


def get_resolution_override(championship: str, season: int) -> Optional[ResolutionOverride]:
    try:
        season = int(season)
    except (TypeError, ValueError):
        return None
    return RESOLUTION_OVERRIDES.get((championship_key(championship), season))

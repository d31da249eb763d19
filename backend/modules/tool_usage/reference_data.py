"""
modules/tool_usage/reference_data.py
--------------------------------------
Static reference tables the scheduler and the advisory heuristics depend on.

Scheduling output changes whenever these values change, so they are
versioned with the code (TABLES_VERSION) rather than fetched at runtime.
All mappings are wrapped in MappingProxyType so a shared instance can be
read from any number of threads without copying.

Every public operation takes an explicit ``tables=`` argument and falls
back to DEFAULT_TABLES, built once at import.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from schemas.itinerary import Coordinate, DayTripConfig

TABLES_VERSION = "2026.10"


@dataclass(frozen=True)
class PassTier:
    name: str
    validity_days: int
    price: int                    # JPY, ordinary car


@dataclass(frozen=True)
class MealWindow:
    meal_type: str
    start_min: int
    end_min: int


# ── City centroids ────────────────────────────────────────────────────────────
_CITY_CENTERS: dict[str, Coordinate] = {
    "tokyo":     Coordinate(35.6762, 139.6503),
    "yokohama":  Coordinate(35.4437, 139.6380),
    "osaka":     Coordinate(34.6937, 135.5023),
    "kyoto":     Coordinate(35.0116, 135.7681),
    "nara":      Coordinate(34.6851, 135.8048),
    "kobe":      Coordinate(34.6901, 135.1956),
    "nagoya":    Coordinate(35.1815, 136.9066),
    "fukuoka":   Coordinate(33.5904, 130.4017),
    "sapporo":   Coordinate(43.0618, 141.3545),
    "sendai":    Coordinate(38.2682, 140.8694),
    "hiroshima": Coordinate(34.3853, 132.4553),
    "kanazawa":  Coordinate(36.5613, 136.6562),
    "naha":      Coordinate(26.2124, 127.6809),
    "matsuyama": Coordinate(33.8416, 132.7657),
    "takamatsu": Coordinate(34.3401, 134.0434),
    "hakodate":  Coordinate(41.7687, 140.7288),
    "nagasaki":  Coordinate(32.7503, 129.8779),
}

# ── Inter-city travel minutes (fastest rail, symmetric) ───────────────────────
_TRAVEL_MINUTES: dict[tuple[str, str], int] = {
    ("tokyo", "yokohama"):    30,
    ("tokyo", "nagoya"):      100,
    ("tokyo", "kyoto"):       135,
    ("tokyo", "osaka"):       150,
    ("tokyo", "kanazawa"):    170,
    ("tokyo", "sendai"):      95,
    ("tokyo", "hiroshima"):   240,
    ("tokyo", "hakodate"):    260,
    ("kyoto", "osaka"):       30,
    ("kyoto", "nara"):        45,
    ("kyoto", "kobe"):        50,
    ("kyoto", "nagoya"):      35,
    ("kyoto", "kanazawa"):    135,
    ("kyoto", "hiroshima"):   100,
    ("osaka", "nara"):        50,
    ("osaka", "kobe"):        25,
    ("osaka", "hiroshima"):   85,
    ("osaka", "nagoya"):      50,
    ("osaka", "fukuoka"):     150,
    ("osaka", "takamatsu"):   110,
    ("hiroshima", "fukuoka"): 65,
    ("fukuoka", "nagasaki"):  85,
    ("hiroshima", "matsuyama"): 170,
    ("sendai", "hakodate"):   170,
    ("hakodate", "sapporo"):  225,
}

# ── Point-to-point rail fares (JPY, reserved seat, symmetric) ─────────────────
_RAIL_FARES: dict[tuple[str, str], int] = {
    ("tokyo", "yokohama"):    490,
    ("tokyo", "nagoya"):      11300,
    ("tokyo", "kyoto"):       14170,
    ("tokyo", "osaka"):       14720,
    ("tokyo", "kanazawa"):    14380,
    ("tokyo", "sendai"):      11410,
    ("tokyo", "hiroshima"):   19760,
    ("tokyo", "hakodate"):    23430,
    ("kyoto", "osaka"):       580,
    ("kyoto", "nara"):        720,
    ("kyoto", "kobe"):        1110,
    ("kyoto", "nagoya"):      5910,
    ("kyoto", "kanazawa"):    7790,
    ("kyoto", "hiroshima"):   11620,
    ("osaka", "nara"):        820,
    ("osaka", "kobe"):        410,
    ("osaka", "hiroshima"):   10620,
    ("osaka", "nagoya"):      6680,
    ("osaka", "fukuoka"):     15600,
    ("osaka", "takamatsu"):   5370,
    ("hiroshima", "fukuoka"): 9140,
    ("fukuoka", "nagasaki"):  5520,
    ("sendai", "hakodate"):   17000,
    ("hakodate", "sapporo"):  9440,
}

_PASS_TIERS: tuple[PassTier, ...] = (
    PassTier("7-day", 7, 50000),
    PassTier("14-day", 14, 80000),
    PassTier("21-day", 21, 100000),
)

# ── Day-trip candidates per base city ─────────────────────────────────────────
_DAY_TRIPS: dict[str, tuple[DayTripConfig, ...]] = {
    "kyoto": (
        DayTripConfig("osaka", "Osaka", 30, 3, "Street food in Dotonbori and Osaka Castle"),
        DayTripConfig("nara", "Nara", 45, 2, "Todai-ji and the deer of Nara Park"),
        DayTripConfig("kobe", "Kobe", 50, 4, "Harbourland, Kitano and Kobe beef"),
        DayTripConfig("himeji", "Himeji", 60, 4, "Himeji Castle and Koko-en garden"),
    ),
    "osaka": (
        DayTripConfig("kobe", "Kobe", 25, 2, "Harbourland, Kitano and Kobe beef"),
        DayTripConfig("kyoto", "Kyoto", 30, 2, "Temples of Higashiyama"),
        DayTripConfig("nara", "Nara", 50, 2, "Todai-ji and the deer of Nara Park"),
        DayTripConfig("himeji", "Himeji", 60, 3, "Himeji Castle and Koko-en garden"),
    ),
    "tokyo": (
        DayTripConfig("yokohama", "Yokohama", 30, 3, "Minato Mirai and Chinatown"),
        DayTripConfig("kamakura", "Kamakura", 60, 3, "The Great Buddha and coastal temples"),
        DayTripConfig("hakone", "Hakone", 90, 4, "Hot springs and views of Mount Fuji"),
        DayTripConfig("nikko", "Nikko", 120, 4, "Toshogu Shrine and Kegon Falls"),
    ),
    "hiroshima": (
        DayTripConfig("miyajima", "Miyajima", 50, 1, "The floating torii of Itsukushima"),
        DayTripConfig("okayama", "Okayama", 40, 3, "Korakuen garden"),
    ),
    "fukuoka": (
        DayTripConfig("dazaifu", "Dazaifu", 40, 2, "Dazaifu Tenmangu shrine"),
        DayTripConfig("nagasaki", "Nagasaki", 85, 3, "Peace Park and Dejima"),
    ),
    "sapporo": (
        DayTripConfig("otaru", "Otaru", 40, 2, "Canal district and glassworks"),
    ),
    "kanazawa": (
        DayTripConfig("shirakawa-go", "Shirakawa-go", 80, 2, "Gassho-zukuri farmhouses"),
    ),
}

# ── Default visit durations by category (minutes) ─────────────────────────────
_CATEGORY_DURATIONS: dict[str, int] = {
    "shrine": 60,
    "temple": 90,
    "landmark": 120,
    "museum": 120,
    "historic": 90,
    "park": 90,
    "garden": 60,
    "viewpoint": 30,
    "market": 90,
    "restaurant": 60,
    "bar": 90,
    "entertainment": 120,
    "onsen": 90,
    "culture": 90,
    "nature": 120,
    "shopping": 90,
    "view": 30,
    "accommodation": 0,
    "transportation": 0,
}

# Check order matters: the detector reports the first overlap.
_MEAL_WINDOWS: tuple[MealWindow, ...] = (
    MealWindow("breakfast", 7 * 60, 9 * 60),
    MealWindow("lunch", 12 * 60, 14 * 60),
    MealWindow("dinner", 18 * 60, 21 * 60),
)


def _symmetric(table: dict[tuple[str, str], int]) -> dict[tuple[str, str], int]:
    out: dict[tuple[str, str], int] = {}
    for (a, b), value in table.items():
        out[(a, b)] = value
        out[(b, a)] = value
    return out


@dataclass(frozen=True)
class ReferenceTables:
    """Immutable bundle of lookup tables, safe for unsynchronised concurrent reads."""
    city_centers: Mapping[str, Coordinate] = field(default_factory=dict)
    travel_minutes: Mapping[tuple[str, str], int] = field(default_factory=dict)
    rail_fares: Mapping[tuple[str, str], int] = field(default_factory=dict)
    pass_tiers: tuple[PassTier, ...] = ()
    day_trips: Mapping[str, tuple[DayTripConfig, ...]] = field(default_factory=dict)
    category_durations: Mapping[str, int] = field(default_factory=dict)
    meal_windows: tuple[MealWindow, ...] = ()
    version: str = TABLES_VERSION

    def city_center(self, city_id: Optional[str]) -> Optional[Coordinate]:
        if not city_id:
            return None
        return self.city_centers.get(city_id.strip().lower())

    def travel_minutes_between(self, from_city: str, to_city: str) -> Optional[int]:
        if from_city == to_city:
            return 0
        return self.travel_minutes.get((from_city, to_city))

    def fare_between(self, from_city: str, to_city: str) -> Optional[int]:
        return self.rail_fares.get((from_city, to_city))


def build_reference_tables(
    *,
    city_centers: Optional[dict[str, Coordinate]] = None,
    travel_minutes: Optional[dict[tuple[str, str], int]] = None,
    rail_fares: Optional[dict[tuple[str, str], int]] = None,
    pass_tiers: Optional[tuple[PassTier, ...]] = None,
    day_trips: Optional[dict[str, tuple[DayTripConfig, ...]]] = None,
    category_durations: Optional[dict[str, int]] = None,
    meal_windows: Optional[tuple[MealWindow, ...]] = None,
) -> ReferenceTables:
    """
    Assemble a ReferenceTables instance, filling any table left as None from
    the built-in data.  Pair tables are mirrored so lookups work both ways;
    day-trip candidates are sorted by travel time.
    """
    trips = day_trips if day_trips is not None else _DAY_TRIPS
    return ReferenceTables(
        city_centers=MappingProxyType(dict(city_centers if city_centers is not None else _CITY_CENTERS)),
        travel_minutes=MappingProxyType(_symmetric(travel_minutes if travel_minutes is not None else _TRAVEL_MINUTES)),
        rail_fares=MappingProxyType(_symmetric(rail_fares if rail_fares is not None else _RAIL_FARES)),
        pass_tiers=tuple(sorted(pass_tiers if pass_tiers is not None else _PASS_TIERS,
                                key=lambda t: (t.validity_days, t.price))),
        day_trips=MappingProxyType({
            city: tuple(sorted(candidates, key=lambda c: c.travel_minutes))
            for city, candidates in trips.items()
        }),
        category_durations=MappingProxyType(dict(
            category_durations if category_durations is not None else _CATEGORY_DURATIONS
        )),
        meal_windows=tuple(meal_windows if meal_windows is not None else _MEAL_WINDOWS),
    )


DEFAULT_TABLES: ReferenceTables = build_reference_tables()

"""
schemas/itinerary.py
--------------------
Dataclass definitions for the itinerary engine: the typed inputs handed
over by the location/content layer and the derived schedule structures.

Inputs (Coordinate, activities, Day, EntryPoint, OperatingHours) are frozen
value objects.  The scheduler never mutates them; every scheduled record is
a fresh ScheduledActivity that points back at its source activity.

Time fields on outputs are minutes since midnight (int); the *_time
properties render them as "HH:MM" for serialisation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Union

from modules.tool_usage.time_tool import format_time


class TravelMode(str, Enum):
    walk = "walk"
    transit = "transit"
    taxi = "taxi"
    train = "train"          # inter-city legs only


class TimeOfDay(str, Enum):
    morning = "morning"
    afternoon = "afternoon"
    evening = "evening"


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


class ScheduleStatus(str, Enum):
    scheduled = "scheduled"          # fits inside a known operating window
    tentative = "tentative"          # no operating-hours data to check against
    out_of_hours = "out_of_hours"    # placed, but violates a window or the day end
    unscheduled = "unscheduled"      # notes: kept in place, never timed


class ConflictReason(str, Enum):
    closed_today = "closed_today"
    no_remaining_window = "no_remaining_window"
    closes_before_departure = "closes_before_departure"
    exceeds_day_end = "exceeds_day_end"


MealType = Literal["breakfast", "lunch", "dinner"]


# ── Inputs ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Coordinate:
    """WGS-84 point.  Out-of-range values are a caller bug and raise."""
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"lat={self.lat} is outside valid range [-90, 90]")
        if not (-180.0 <= self.lng <= 180.0):
            raise ValueError(f"lng={self.lng} is outside valid range [-180, 180]")


@dataclass(frozen=True)
class OperatingPeriod:
    """One open→close window on a weekday.  Overnight windows close after midnight."""
    day: Weekday
    open: str                    # "HH:MM"
    close: str                   # "HH:MM"
    is_overnight: bool = False


@dataclass(frozen=True)
class OperatingHours:
    periods: tuple[OperatingPeriod, ...] = ()
    notes: str = ""

    def windows_for(self, weekday: Weekday) -> list[OperatingPeriod]:
        """Periods for *weekday* sorted by opening time; empty means closed."""
        return sorted(
            (p for p in self.periods if p.day == weekday),
            key=lambda p: p.open.zfill(5),
        )


@dataclass(frozen=True)
class PlaceActivity:
    """A visit to a place.  Movable by the route optimizer when it has coordinates."""
    id: str
    title: str
    coordinates: Optional[Coordinate] = None
    duration_minutes: Optional[int] = None
    time_of_day: Optional[TimeOfDay] = None
    operating_hours: Optional[OperatingHours] = None
    category: Optional[str] = None
    travel_mode: Optional[TravelMode] = None     # explicit user choice for the inbound leg
    city_id: Optional[str] = None
    kind: Literal["place"] = field(default="place", init=False)


@dataclass(frozen=True)
class NoteActivity:
    """A fixed annotation slot.  Never reordered, never timed."""
    id: str
    title: str
    notes: str = ""
    time_of_day: Optional[TimeOfDay] = None
    kind: Literal["note"] = field(default="note", init=False)


Activity = Union[PlaceActivity, NoteActivity]


@dataclass(frozen=True)
class Day:
    id: str
    activities: tuple[Activity, ...] = ()
    date_label: str = ""
    city_id: Optional[str] = None
    weekday: Optional[Weekday] = None
    start_time: Optional[str] = None          # overrides SchedulerOptions.day_start
    end_time: Optional[str] = None            # overrides SchedulerOptions.day_end

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for activity in self.activities:
            if activity.id in seen:
                raise ValueError(f"Duplicate activity id {activity.id!r} in day {self.id!r}")
            seen.add(activity.id)


@dataclass(frozen=True)
class EntryPoint:
    """Named anchor (airport, station, hotel) bounding a day's route."""
    id: str
    name: str
    coordinates: Coordinate
    type: str = "hotel"                       # airport | station | hotel | custom
    city_id: Optional[str] = None


@dataclass(frozen=True)
class DayEntryPoints:
    start: Optional[EntryPoint] = None
    end: Optional[EntryPoint] = None


@dataclass(frozen=True)
class Itinerary:
    id: str
    days: tuple[Day, ...] = ()
    timezone: str = "Asia/Tokyo"


# ── Derived outputs ───────────────────────────────────────────────────────────

@dataclass
class TravelSegment:
    mode: TravelMode
    duration_minutes: int
    distance_meters: float
    departure_min: Optional[int] = None
    arrival_min: Optional[int] = None
    low_confidence: bool = False              # estimated without coordinates

    @property
    def departure_time(self) -> Optional[str]:
        return format_time(self.departure_min)

    @property
    def arrival_time(self) -> Optional[str]:
        return format_time(self.arrival_min)


@dataclass
class SchedulingConflict:
    activity_id: str
    reason: ConflictReason
    detail: str = ""


@dataclass
class ScheduledActivity:
    """
    The scheduler's view of one input activity.

    arrival_min / departure_min are None for notes.  operating_window is the
    (open, close) pair that was applied, as "HH:MM" strings.
    """
    activity: Activity
    arrival_min: Optional[int] = None
    departure_min: Optional[int] = None
    duration_minutes: int = 0
    status: ScheduleStatus = ScheduleStatus.tentative
    travel_from_previous: Optional[TravelSegment] = None
    operating_window: Optional[tuple[str, str]] = None
    arrival_buffer_minutes: int = 0           # wait for the place to open
    conflict: Optional[SchedulingConflict] = None

    @property
    def id(self) -> str:
        return self.activity.id

    @property
    def arrival_time(self) -> Optional[str]:
        return format_time(self.arrival_min)

    @property
    def departure_time(self) -> Optional[str]:
        return format_time(self.departure_min)


@dataclass
class MealGap:
    after_activity_id: str
    before_activity_id: str
    meal_type: MealType
    suggested_min: int

    @property
    def suggested_time(self) -> str:
        return format_time(self.suggested_min) or "00:00"


@dataclass
class RouteOrderResult:
    order: list[str]
    order_changed: bool = False
    optimized_count: int = 0
    skipped_count: int = 0


@dataclass
class CityTransition:
    from_city_id: str
    to_city_id: str
    mode: TravelMode
    duration_minutes: int
    departure_min: int
    arrival_min: int

    @property
    def departure_time(self) -> str:
        return format_time(self.departure_min) or "00:00"

    @property
    def arrival_time(self) -> str:
        return format_time(self.arrival_min) or "00:00"


@dataclass
class ScheduledDay:
    day: Day
    activities: list[ScheduledActivity] = field(default_factory=list)
    conflicts: list[SchedulingConflict] = field(default_factory=list)
    meal_gaps: list[MealGap] = field(default_factory=list)
    travel_to_end: Optional[TravelSegment] = None
    start_min: int = 0
    end_min: int = 0
    total_minutes: int = 0                    # day start → arrival at end anchor / last departure
    low_confidence_ids: list[str] = field(default_factory=list)
    route: Optional[RouteOrderResult] = None
    city_transition: Optional[CityTransition] = None

    @property
    def start_time(self) -> str:
        return format_time(self.start_min) or "00:00"

    @property
    def end_time(self) -> str:
        return format_time(self.end_min) or "00:00"


@dataclass(frozen=True)
class DayTripConfig:
    city_id: str
    name: str
    travel_minutes: int
    min_days_before_suggesting: int
    description: str = ""


@dataclass(frozen=True)
class Journey:
    from_city_id: str
    to_city_id: str
    fare: int


@dataclass
class JRPassRecommendation:
    """
    recommendation is "save" when the pass beats point-to-point tickets,
    "buy" (individual tickets) otherwise.  savings is never negative.
    """
    journeys: list[Journey]
    individual_total: int
    pass_type: Optional[str]
    pass_price: int
    savings: int
    recommendation: Literal["buy", "save"]


@dataclass
class PlannedItinerary:
    itinerary: Itinerary
    days: list[ScheduledDay] = field(default_factory=list)
    rail_pass: Optional[JRPassRecommendation] = None
    day_trips: dict[str, DayTripConfig] = field(default_factory=dict)   # day id → suggestion

    @property
    def conflict_count(self) -> int:
        return sum(len(d.conflicts) for d in self.days)

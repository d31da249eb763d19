"""
modules/planning/itinerary_planner.py
---------------------------------------
Trip-level driver: route-orders and schedules every day, links days that
change city with a rail transition, and attaches the advisory heuristics.

Each day d:
  1. optimize_route_order(d.activities, start, end)   (needs a start anchor)
  2. reorder d (new Day object; the input is never mutated)
  3. DayScheduler.schedule(d, entry_points)
  4. city changed since d-1 → CityTransition (leaves at d-1's day end)
  5. day-trip suggestion from the remaining-inventory signal

Trip-wide: rail-pass value over the ordered list of distinct cities.

Days do not depend on one another except through the read-only trip
inputs, so the planner holds no state between calls.
"""

from __future__ import annotations
import logging
import time as _time_mod
from dataclasses import replace
from typing import Mapping, Optional

from schemas.itinerary import (
    CityTransition,
    DayEntryPoints,
    Itinerary,
    PlaceActivity,
    PlannedItinerary,
    ScheduledDay,
    TravelMode,
)
from modules.observability.logger import StructuredLogger
from modules.planning.day_scheduler import DayScheduler, SchedulerOptions
from modules.planning.day_trips import should_suggest_day_trip
from modules.planning.rail_pass import calculate_jr_pass_value
from modules.planning.route_optimizer import apply_order, optimize_route_order
from modules.tool_usage.reference_data import DEFAULT_TABLES, ReferenceTables
from modules.tool_usage.travel_time_tool import TravelTimeProvider

logger = logging.getLogger(__name__)

_event_logger = StructuredLogger()


def _city_transition(
    previous: ScheduledDay,
    current: ScheduledDay,
    tables: ReferenceTables,
) -> Optional[CityTransition]:
    from_city, to_city = previous.day.city_id, current.day.city_id
    if not from_city or not to_city or from_city == to_city:
        return None
    minutes = tables.travel_minutes_between(from_city, to_city)
    if minutes is None:
        logger.debug("No travel time for %s → %s; transition omitted", from_city, to_city)
        return None
    departure = previous.end_min
    return CityTransition(
        from_city_id=from_city,
        to_city_id=to_city,
        mode=TravelMode.train,
        duration_minutes=minutes,
        departure_min=departure,
        arrival_min=departure + minutes,
    )


def _city_sequence(itinerary: Itinerary) -> list[str]:
    """Distinct consecutive city ids in visiting order (A, A, B, A → A, B, A)."""
    sequence: list[str] = []
    for day in itinerary.days:
        if day.city_id and (not sequence or sequence[-1] != day.city_id):
            sequence.append(day.city_id)
    return sequence


def plan_itinerary(
    itinerary: Itinerary,
    options: SchedulerOptions | None = None,
    day_entry_points: Mapping[str, DayEntryPoints] | None = None,
    *,
    remaining_locations: Mapping[str, int] | None = None,
    activities_per_day: int = 3,
    provider: TravelTimeProvider | None = None,
    tables: ReferenceTables | None = None,
    event_logger: StructuredLogger | None = None,
) -> PlannedItinerary:
    """
    Plan every day of *itinerary*.

    Args:
        options:             Scheduler defaults (day bounds, visit length, buffer).
        day_entry_points:    day id → start/end anchors.
        remaining_locations: city id → unused locations at trip start; enables
                             day-trip suggestions.  Scheduled places in that city
                             are subtracted as the trip progresses.
        activities_per_day:  Target density used by the day-trip heuristic.

    Returns:
        PlannedItinerary with one ScheduledDay per input day (same order).
    """
    _t0 = _time_mod.perf_counter()
    tables = tables or DEFAULT_TABLES
    scheduler = DayScheduler(options=options, provider=provider, tables=tables)
    entry_map = day_entry_points or {}
    inventory = dict(remaining_locations or {})

    planned = PlannedItinerary(itinerary=itinerary)
    previous: Optional[ScheduledDay] = None
    city_day_counter: dict[str, int] = {}
    last_city: Optional[str] = None

    for day in itinerary.days:
        anchors = entry_map.get(day.id) or DayEntryPoints()

        route = optimize_route_order(day.activities, anchors.start, anchors.end)
        ordered_day = (
            replace(day, activities=apply_order(day.activities, route.order))
            if route.order_changed else day
        )

        scheduled = scheduler.schedule(ordered_day, anchors)
        scheduled.route = route
        if previous is not None:
            scheduled.city_transition = _city_transition(previous, scheduled, tables)

        # ── day-trip advisory ────────────────────────────────────────────────
        if day.city_id:
            if day.city_id == last_city:
                city_day_counter[day.city_id] = city_day_counter.get(day.city_id, 0) + 1
            else:
                city_day_counter[day.city_id] = 1
                last_city = day.city_id
            if day.city_id in inventory:
                suggestion = should_suggest_day_trip(
                    day.city_id,
                    city_day_counter[day.city_id],
                    inventory[day.city_id],
                    activities_per_day,
                    tables=tables,
                )
                if suggestion is not None:
                    planned.day_trips[day.id] = suggestion
                places_today = sum(1 for a in day.activities if isinstance(a, PlaceActivity))
                inventory[day.city_id] = max(0, inventory[day.city_id] - places_today)

        planned.days.append(scheduled)
        previous = scheduled

    planned.rail_pass = calculate_jr_pass_value(
        len(itinerary.days), _city_sequence(itinerary), tables=tables,
    )

    events = event_logger or _event_logger
    events.log(itinerary.id, "SCHEDULE_SUMMARY", {
        "days": len(planned.days),
        "conflicts": planned.conflict_count,
        "low_confidence": sum(len(d.low_confidence_ids) for d in planned.days),
        "reordered_days": sum(1 for d in planned.days if d.route and d.route.order_changed),
        "day_trips": {k: v.city_id for k, v in planned.day_trips.items()},
        "rail_pass": planned.rail_pass.recommendation if planned.rail_pass else None,
        "tables_version": tables.version,
    })
    events.log(itinerary.id, "PERFORMANCE", {
        "component": "plan_itinerary",
        "duration_ms": round((_time_mod.perf_counter() - _t0) * 1000, 2),
    })
    # one plan per id; later plans reopen in append mode
    events.close(itinerary.id)
    return planned

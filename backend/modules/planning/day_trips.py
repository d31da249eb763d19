"""
modules/planning/day_trips.py
-------------------------------
Day-trip suggestion for long single-city stays.

A trip is suggested only when the base city is running out of fresh
locations: fewer than activities_per_day × DAY_TRIP_INVENTORY_DAYS remain.
The candidate is the closest (by travel time) excursion whose
min_days_before_suggesting has been reached.  Advisory only; the schedule
is never touched.
"""

from __future__ import annotations
import logging
from typing import Optional

import config
from schemas.itinerary import DayTripConfig
from modules.tool_usage.reference_data import DEFAULT_TABLES, ReferenceTables

logger = logging.getLogger(__name__)


def get_day_trips_from_city(
    city_id: str,
    *,
    tables: ReferenceTables | None = None,
) -> tuple[DayTripConfig, ...]:
    """Candidates for *city_id*, closest first (empty when none are known)."""
    return (tables or DEFAULT_TABLES).day_trips.get(city_id.strip().lower(), ())


def should_suggest_day_trip(
    base_city_id: str,
    day_number_in_city: int,
    remaining_locations_in_city: int,
    activities_per_day: int = 3,
    *,
    tables: ReferenceTables | None = None,
) -> Optional[DayTripConfig]:
    if activities_per_day <= 0:
        raise ValueError(f"activities_per_day must be positive (got {activities_per_day})")

    locations_needed = activities_per_day * config.DAY_TRIP_INVENTORY_DAYS
    if remaining_locations_in_city >= locations_needed:
        return None

    for candidate in get_day_trips_from_city(base_city_id, tables=tables):
        if candidate.min_days_before_suggesting <= day_number_in_city:
            logger.info(
                "Day-trip suggestion from %s on day %d: %s (%d remaining < %d needed)",
                base_city_id, day_number_in_city, candidate.city_id,
                remaining_locations_in_city, locations_needed,
            )
            return candidate
    return None

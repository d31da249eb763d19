"""
api/routes/advice.py
--------------------
Stand-alone advisory lookups (no itinerary needed):

  GET /v1/advice/rail-pass?duration_days=7&cities=tokyo&cities=kyoto
  GET /v1/advice/day-trip?city_id=kyoto&day_number=5&remaining_locations=2
  GET /v1/advice/meal-gap?previous_end=11:30&next_start=13:00
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from schemas.serialization import day_trip_to_dict, rail_pass_to_dict
from modules.planning.day_trips import get_day_trips_from_city, should_suggest_day_trip
from modules.planning.meal_gaps import detect_meal_gap
from modules.planning.rail_pass import calculate_jr_pass_value
from modules.tool_usage.time_tool import parse_time

router = APIRouter()


@router.get("/rail-pass", summary="Rail pass vs. individual tickets")
def rail_pass(
    duration_days: int = Query(..., ge=1),
    cities: list[str] = Query(..., description="Visited city ids in order"),
) -> dict:
    """`recommendation` is null when the trip is too short or has no known fares."""
    ordered = [c.strip().lower() for c in cities if c.strip()]
    return {"recommendation": rail_pass_to_dict(calculate_jr_pass_value(duration_days, ordered))}


@router.get("/day-trip", summary="Day-trip suggestion for a long single-city stay")
def day_trip(
    city_id: str,
    day_number: int = Query(..., ge=1, description="Day number within the current city"),
    remaining_locations: int = Query(..., ge=0),
    activities_per_day: int = Query(3, ge=1),
) -> dict:
    city = city_id.strip().lower()
    suggestion = should_suggest_day_trip(city, day_number, remaining_locations, activities_per_day)
    return {
        "suggestion": day_trip_to_dict(suggestion) if suggestion else None,
        "candidates": [day_trip_to_dict(t) for t in get_day_trips_from_city(city)],
    }


@router.get("/meal-gap", summary="Meal window between two visits")
def meal_gap(previous_end: str, next_start: str) -> dict:
    bad = [v for v in (previous_end, next_start) if parse_time(v) is None]
    if bad:
        raise HTTPException(status_code=400, detail=[f"{v!r} is not a valid HH:MM time" for v in bad])
    result = detect_meal_gap(previous_end, next_start)
    return {"has_gap": result.has_gap, "meal_type": result.meal_type}

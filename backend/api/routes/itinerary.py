"""
api/routes/itinerary.py
------------------------
POST /v1/itinerary/plan
POST /v1/itinerary/optimize-route

/plan route-orders, schedules and annotates every day of the submitted
itinerary and returns it with all clock values as "HH:MM".
/optimize-route runs only the route heuristic for one list of activities.

Status codes:
  400  payload shape is wrong (missing itinerary/days, bad coordinates,
       duplicate ids, malformed HH:MM)
  422  pydantic type errors (FastAPI default)
  500  anything unexpected while planning
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from schemas.serialization import (
    activity_from_dict,
    day_entry_points_from_dict,
    entry_point_from_dict,
    itinerary_from_dict,
    planned_itinerary_to_dict,
    route_to_dict,
    scheduler_options_from_dict,
)
from modules.planning.itinerary_planner import plan_itinerary
from modules.planning.route_optimizer import optimize_route_order
from modules.validation import (
    validate_day,
    validate_day_entry_points,
    validate_itinerary_payload,
)

router = APIRouter()
logger = logging.getLogger(__name__)


# ── Request schemas ────────────────────────────────────────────────────────────

class CoordinateIn(BaseModel):
    lat: float
    lng: float


class OperatingPeriodIn(BaseModel):
    day: str = Field(..., description="monday … sunday")
    open: str = Field(..., description='"HH:MM"')
    close: str = Field(..., description='"HH:MM"')
    is_overnight: bool = False


class OperatingHoursIn(BaseModel):
    periods: list[OperatingPeriodIn] = Field(default_factory=list)
    notes: str = ""


class ActivityIn(BaseModel):
    kind: str = Field("place", description="place | note")
    id: str
    title: str = Field(..., min_length=1)
    coordinates: Optional[CoordinateIn] = None
    duration_minutes: Optional[int] = None
    time_of_day: Optional[str] = None            # morning | afternoon | evening
    operating_hours: Optional[OperatingHoursIn] = None
    category: Optional[str] = None
    travel_mode: Optional[str] = None            # walk | transit | taxi
    city_id: Optional[str] = None
    notes: str = ""


class DayIn(BaseModel):
    id: str
    activities: list[ActivityIn] = Field(default_factory=list)
    date_label: str = ""
    city_id: Optional[str] = None
    weekday: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class ItineraryIn(BaseModel):
    id: str = "trip"
    days: list[DayIn] = Field(default_factory=list)
    timezone: str = "Asia/Tokyo"


class EntryPointIn(BaseModel):
    id: str
    name: str = ""
    coordinates: CoordinateIn
    type: str = Field("hotel", description="airport | station | hotel | custom")
    city_id: Optional[str] = None


class DayEntryPointsIn(BaseModel):
    start: Optional[EntryPointIn] = None
    end: Optional[EntryPointIn] = None


class OptionsIn(BaseModel):
    day_start: Optional[str] = Field(None, description='"HH:MM"')
    day_end: Optional[str] = Field(None, description='"HH:MM"')
    default_visit_minutes: Optional[int] = Field(None, ge=0)
    transition_buffer_minutes: Optional[int] = Field(None, ge=0)


class PlanRequest(BaseModel):
    itinerary: Optional[ItineraryIn] = None
    options: Optional[OptionsIn] = None
    day_entry_points: dict[str, DayEntryPointsIn] = Field(default_factory=dict)
    remaining_locations: dict[str, int] = Field(
        default_factory=dict,
        description="city id → unused locations at trip start (enables day-trip suggestions)",
    )
    activities_per_day: int = Field(3, ge=1)


class OptimizeRouteRequest(BaseModel):
    activities: list[ActivityIn] = Field(default_factory=list)
    start: Optional[EntryPointIn] = None
    end: Optional[EntryPointIn] = None
    two_opt: Optional[bool] = None


# ── Helpers ────────────────────────────────────────────────────────────────────

def _raise_if_invalid(errors: list[str]) -> None:
    if errors:
        raise HTTPException(status_code=400, detail=errors)


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/plan", summary="Route-order and schedule a multi-day itinerary")
def plan(req: PlanRequest) -> dict:
    """
    For each day:
      1. Nearest-neighbour (+ 2-opt) ordering when a start anchor is given
      2. Clock times, operating-window fitting and conflicts
      3. Meal gaps, end-anchor leg, city transition from the previous day

    Trip-level: day-trip suggestions and rail-pass value.
    """
    body = req.model_dump()

    # ── Validate shape ─────────────────────────────────────────────────────
    errors = validate_itinerary_payload(body["itinerary"]).errors
    errors += validate_day_entry_points(body["day_entry_points"]).errors
    _raise_if_invalid(errors)

    try:
        itinerary = itinerary_from_dict(body["itinerary"])
        anchors = day_entry_points_from_dict(body["day_entry_points"])
        options = scheduler_options_from_dict(body["options"])
    except (KeyError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=[str(exc)]) from exc

    # ── Plan ───────────────────────────────────────────────────────────────
    try:
        planned = plan_itinerary(
            itinerary,
            options,
            anchors,
            remaining_locations={k.strip().lower(): v for k, v in body["remaining_locations"].items()},
            activities_per_day=req.activities_per_day,
        )
    except Exception as exc:
        logger.exception("Planning failed for itinerary %s", itinerary.id)
        raise HTTPException(status_code=500, detail=f"Planning error: {exc}") from exc

    return planned_itinerary_to_dict(planned)


@router.post("/optimize-route", summary="Reorder one day's activities")
def optimize_route(req: OptimizeRouteRequest) -> dict:
    """Route heuristic only: no clock times, no conflicts."""
    body = req.model_dump()
    errors = validate_day({"id": "route", "activities": body["activities"]}).errors
    errors += validate_day_entry_points({"route": {"start": body["start"], "end": body["end"]}}).errors
    _raise_if_invalid(errors)

    try:
        activities = [activity_from_dict(a) for a in body["activities"]]
        start = entry_point_from_dict(body["start"])
        end = entry_point_from_dict(body["end"])
    except (KeyError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=[str(exc)]) from exc

    return route_to_dict(optimize_route_order(activities, start, end, two_opt=req.two_opt))

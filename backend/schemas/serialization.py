"""
schemas/serialization.py
------------------------
JSON ⇄ dataclass conversion for the itinerary engine.

Inbound dicts are expected to have passed modules.validation first; the
converters here only coerce types (str → Enum, dict → Coordinate, ...).
Outbound dicts render every clock value as "HH:MM".

Used by both api/routes/itinerary.py and the main.py CLI.
"""

from __future__ import annotations
from dataclasses import fields
from typing import Any, Mapping, Optional

from schemas.itinerary import (
    Activity,
    CityTransition,
    Coordinate,
    Day,
    DayEntryPoints,
    EntryPoint,
    Itinerary,
    JRPassRecommendation,
    NoteActivity,
    OperatingHours,
    OperatingPeriod,
    PlaceActivity,
    PlannedItinerary,
    RouteOrderResult,
    ScheduledActivity,
    ScheduledDay,
    TimeOfDay,
    TravelMode,
    TravelSegment,
    Weekday,
    DayTripConfig,
)
from modules.planning.day_scheduler import SchedulerOptions
from modules.tool_usage.time_tool import parse_time


# ── Inbound ───────────────────────────────────────────────────────────────────

def _opt_enum(enum_cls, value):
    return enum_cls(str(value).lower()) if value else None


def coordinate_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[Coordinate]:
    if not data:
        return None
    return Coordinate(lat=float(data["lat"]), lng=float(data["lng"]))


def operating_hours_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[OperatingHours]:
    if not data:
        return None
    periods = tuple(
        OperatingPeriod(
            day=Weekday(str(p["day"]).lower()),
            open=p["open"],
            close=p["close"],
            is_overnight=bool(p.get("is_overnight", False)),
        )
        for p in data.get("periods", [])
    )
    return OperatingHours(periods=periods, notes=data.get("notes", "") or "")


def activity_from_dict(data: Mapping[str, Any]) -> Activity:
    if data.get("kind") == "note":
        return NoteActivity(
            id=str(data["id"]),
            title=data["title"],
            notes=data.get("notes", "") or "",
            time_of_day=_opt_enum(TimeOfDay, data.get("time_of_day")),
        )
    duration = data.get("duration_minutes")
    return PlaceActivity(
        id=str(data["id"]),
        title=data["title"],
        coordinates=coordinate_from_dict(data.get("coordinates")),
        duration_minutes=int(duration) if duration is not None else None,
        time_of_day=_opt_enum(TimeOfDay, data.get("time_of_day")),
        operating_hours=operating_hours_from_dict(data.get("operating_hours")),
        category=data.get("category"),
        travel_mode=_opt_enum(TravelMode, data.get("travel_mode")),
        city_id=data.get("city_id"),
    )


def day_from_dict(data: Mapping[str, Any]) -> Day:
    return Day(
        id=str(data["id"]),
        activities=tuple(activity_from_dict(a) for a in data.get("activities", [])),
        date_label=data.get("date_label", "") or "",
        city_id=(data.get("city_id") or None) and str(data["city_id"]).strip().lower(),
        weekday=_opt_enum(Weekday, data.get("weekday")),
        start_time=data.get("start_time"),
        end_time=data.get("end_time"),
    )


def itinerary_from_dict(data: Mapping[str, Any]) -> Itinerary:
    return Itinerary(
        id=str(data.get("id") or "trip"),
        days=tuple(day_from_dict(d) for d in data["days"]),
        timezone=data.get("timezone") or "Asia/Tokyo",
    )


def entry_point_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[EntryPoint]:
    if not data:
        return None
    return EntryPoint(
        id=str(data["id"]),
        name=data.get("name") or str(data["id"]),
        coordinates=Coordinate(lat=float(data["coordinates"]["lat"]), lng=float(data["coordinates"]["lng"])),
        type=data.get("type") or "hotel",
        city_id=(data.get("city_id") or None) and str(data["city_id"]).strip().lower(),
    )


def day_entry_points_from_dict(data: Optional[Mapping[str, Any]]) -> dict[str, DayEntryPoints]:
    """{"day-1": {"start": {...}, "end": {...}}, ...} → day id → DayEntryPoints."""
    return {
        str(day_id): DayEntryPoints(
            start=entry_point_from_dict(anchors.get("start")),
            end=entry_point_from_dict(anchors.get("end")),
        )
        for day_id, anchors in (data or {}).items()
    }


# ── Outbound ──────────────────────────────────────────────────────────────────

def segment_to_dict(segment: Optional[TravelSegment]) -> Optional[dict]:
    if segment is None:
        return None
    return {
        "mode":             segment.mode.value,
        "duration_minutes": segment.duration_minutes,
        "distance_meters":  segment.distance_meters,
        "departure_time":   segment.departure_time,
        "arrival_time":     segment.arrival_time,
        "low_confidence":   segment.low_confidence,
    }


def scheduled_activity_to_dict(scheduled: ScheduledActivity) -> dict:
    activity = scheduled.activity
    return {
        "id":                     scheduled.id,
        "kind":                   activity.kind,
        "title":                  activity.title,
        "status":                 scheduled.status.value,
        "arrival_time":           scheduled.arrival_time,
        "departure_time":         scheduled.departure_time,
        "duration_minutes":       scheduled.duration_minutes,
        "arrival_buffer_minutes": scheduled.arrival_buffer_minutes,
        "operating_window":       list(scheduled.operating_window) if scheduled.operating_window else None,
        "travel_from_previous":   segment_to_dict(scheduled.travel_from_previous),
        "conflict": (
            {"reason": scheduled.conflict.reason.value, "detail": scheduled.conflict.detail}
            if scheduled.conflict else None
        ),
    }


def route_to_dict(route: Optional[RouteOrderResult]) -> Optional[dict]:
    if route is None:
        return None
    return {
        "order":           list(route.order),
        "order_changed":   route.order_changed,
        "optimized_count": route.optimized_count,
        "skipped_count":   route.skipped_count,
    }


def city_transition_to_dict(transition: Optional[CityTransition]) -> Optional[dict]:
    if transition is None:
        return None
    return {
        "from_city_id":     transition.from_city_id,
        "to_city_id":       transition.to_city_id,
        "mode":             transition.mode.value,
        "duration_minutes": transition.duration_minutes,
        "departure_time":   transition.departure_time,
        "arrival_time":     transition.arrival_time,
    }


def scheduled_day_to_dict(day: ScheduledDay) -> dict:
    return {
        "id":              day.day.id,
        "date_label":      day.day.date_label,
        "city_id":         day.day.city_id,
        "start_time":      day.start_time,
        "end_time":        day.end_time,
        "total_minutes":   day.total_minutes,
        "activities":      [scheduled_activity_to_dict(a) for a in day.activities],
        "conflicts": [
            {"activity_id": c.activity_id, "reason": c.reason.value, "detail": c.detail}
            for c in day.conflicts
        ],
        "meal_gaps": [
            {
                "after_activity_id":  g.after_activity_id,
                "before_activity_id": g.before_activity_id,
                "meal_type":          g.meal_type,
                "suggested_time":     g.suggested_time,
            }
            for g in day.meal_gaps
        ],
        "travel_to_end":      segment_to_dict(day.travel_to_end),
        "low_confidence_ids": list(day.low_confidence_ids),
        "route":              route_to_dict(day.route),
        "city_transition":    city_transition_to_dict(day.city_transition),
    }


def day_trip_to_dict(trip: DayTripConfig) -> dict:
    return {
        "city_id":                    trip.city_id,
        "name":                       trip.name,
        "travel_minutes":             trip.travel_minutes,
        "min_days_before_suggesting": trip.min_days_before_suggesting,
        "description":                trip.description,
    }


def rail_pass_to_dict(rec: Optional[JRPassRecommendation]) -> Optional[dict]:
    if rec is None:
        return None
    return {
        "journeys": [
            {"from_city_id": j.from_city_id, "to_city_id": j.to_city_id, "fare": j.fare}
            for j in rec.journeys
        ],
        "individual_total": rec.individual_total,
        "pass_type":        rec.pass_type,
        "pass_price":       rec.pass_price,
        "savings":          rec.savings,
        "recommendation":   rec.recommendation,
    }


def planned_itinerary_to_dict(planned: PlannedItinerary) -> dict:
    return {
        "itinerary_id":   planned.itinerary.id,
        "timezone":       planned.itinerary.timezone,
        "conflict_count": planned.conflict_count,
        "days":           [scheduled_day_to_dict(d) for d in planned.days],
        "day_trips":      {day_id: day_trip_to_dict(t) for day_id, t in planned.day_trips.items()},
        "rail_pass":      rail_pass_to_dict(planned.rail_pass),
    }


def scheduler_options_from_dict(data: Optional[Mapping[str, Any]]) -> SchedulerOptions:
    """Overlay the non-null fields of *data* on the configured defaults."""
    if not data:
        return SchedulerOptions()
    for key in ("day_start", "day_end"):
        value = data.get(key)
        if value is not None and parse_time(value) is None:
            raise ValueError(f"options.{key}={value!r} is not a valid HH:MM time")
    known = {f.name for f in fields(SchedulerOptions)}
    overrides = {k: v for k, v in data.items() if k in known and v is not None}
    return SchedulerOptions(**overrides)

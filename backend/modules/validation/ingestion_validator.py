"""
modules/validation/ingestion_validator.py
------------------------------------------
Input-shape guards applied to raw itinerary payloads before they are
converted into schema objects and handed to the planner.

  Itinerary:
    ✓ Present and a mapping
    ✓ Non-empty ``days`` list
    ✓ Day ids unique across the trip

  Day:
    ✓ Non-empty id
    ✓ ``activities`` is a list, activity ids unique within the day
    ✓ start_time / end_time parse as "HH:MM" when present

  Activity:
    ✓ kind is "place" or "note"
    ✓ Non-empty id and title
    ✓ Coordinates (when present) numeric and in range
    ✓ duration_minutes (when present) >= 0

Missing coordinates or durations are NOT errors: the scheduler degrades
them to low-confidence estimates.

Usage:
    from modules.validation import validate_itinerary_payload

    result = validate_itinerary_payload(body.get("itinerary"))
    if not result.valid:
        print(result.errors)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from modules.tool_usage.time_tool import parse_time

_ACTIVITY_KINDS = frozenset({"place", "note"})


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record dict (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


def _result(errors: list[str], record: Any) -> ValidationResult:
    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        record=record if isinstance(record, dict) else {},
    )


# ── Coordinates ───────────────────────────────────────────────────────────────

def validate_coordinates(record: Any, where: str = "coordinates") -> list[str]:
    """Return error strings for a {"lat", "lng"} mapping (empty when valid)."""
    if not isinstance(record, dict):
        return [f"{where} must be an object with lat/lng (got {record!r})"]
    lat, lng = record.get("lat"), record.get("lng")
    if lat is None or lng is None:
        return [f"{where}.lat/{where}.lng must not be NULL (got lat={lat!r}, lng={lng!r})"]
    try:
        lat_f, lng_f = float(lat), float(lng)
    except (TypeError, ValueError):
        return [f"{where}.lat/{where}.lng must be numeric (got lat={lat!r}, lng={lng!r})"]
    errors: list[str] = []
    if not (-90.0 <= lat_f <= 90.0):
        errors.append(f"{where}.lat={lat_f} is outside valid range [-90, 90]")
    if not (-180.0 <= lng_f <= 180.0):
        errors.append(f"{where}.lng={lng_f} is outside valid range [-180, 180]")
    return errors


# ── Activity ──────────────────────────────────────────────────────────────────

def validate_activity(record: dict[str, Any]) -> ValidationResult:
    errors: list[str] = []
    if not isinstance(record, dict):
        return _result([f"activity must be an object (got {type(record).__name__})"], record)

    kind = record.get("kind")
    if kind not in _ACTIVITY_KINDS:
        errors.append(f"kind={kind!r} must be one of {sorted(_ACTIVITY_KINDS)}")

    activity_id = record.get("id")
    if not activity_id or not str(activity_id).strip():
        errors.append("id must not be empty or NULL")
    title = record.get("title")
    if not title or not str(title).strip():
        errors.append(f"activity {activity_id!r}: title must not be empty or NULL")

    if kind == "place":
        coords = record.get("coordinates")
        if coords is not None:
            errors.extend(validate_coordinates(coords, f"activity {activity_id!r} coordinates"))

        duration = record.get("duration_minutes")
        if duration is not None:
            try:
                if int(duration) < 0:
                    errors.append(f"activity {activity_id!r}: duration_minutes={duration} must be >= 0")
            except (TypeError, ValueError):
                errors.append(f"activity {activity_id!r}: duration_minutes={duration!r} must be an integer")

    return _result(errors, record)


# ── Day ───────────────────────────────────────────────────────────────────────

def validate_day(record: dict[str, Any]) -> ValidationResult:
    errors: list[str] = []
    if not isinstance(record, dict):
        return _result([f"day must be an object (got {type(record).__name__})"], record)

    day_id = record.get("id")
    if not day_id or not str(day_id).strip():
        errors.append("day id must not be empty or NULL")

    for key in ("start_time", "end_time"):
        value = record.get(key)
        if value is not None and parse_time(value) is None:
            errors.append(f"day {day_id!r}: {key}={value!r} is not a valid HH:MM time")

    activities = record.get("activities", [])
    if not isinstance(activities, list):
        errors.append(f"day {day_id!r}: activities must be a list")
        return _result(errors, record)

    seen: set[str] = set()
    for activity in activities:
        errors.extend(validate_activity(activity).errors)
        if isinstance(activity, dict) and activity.get("id"):
            aid = str(activity["id"])
            if aid in seen:
                errors.append(f"day {day_id!r}: duplicate activity id {aid!r}")
            seen.add(aid)

    return _result(errors, record)


# ── Itinerary ─────────────────────────────────────────────────────────────────

def validate_itinerary_payload(record: Any) -> ValidationResult:
    """Top-level shape check; a missing itinerary or empty days list is an error."""
    if record is None:
        return _result(["itinerary is required"], record)
    if not isinstance(record, dict):
        return _result([f"itinerary must be an object (got {type(record).__name__})"], record)

    days = record.get("days")
    if not isinstance(days, list) or not days:
        return _result(["itinerary.days must be a non-empty list"], record)

    errors: list[str] = []
    seen: set[str] = set()
    for day in days:
        errors.extend(validate_day(day).errors)
        if isinstance(day, dict) and day.get("id"):
            did = str(day["id"])
            if did in seen:
                errors.append(f"duplicate day id {did!r}")
            seen.add(did)
    return _result(errors, record)


# ── Entry points ──────────────────────────────────────────────────────────────

def validate_day_entry_points(record: Any) -> ValidationResult:
    """{"<day id>": {"start": {...}, "end": {...}}}; anchors need id + coordinates."""
    if record is None:
        return _result([], record)
    if not isinstance(record, dict):
        return _result([f"day_entry_points must be an object (got {type(record).__name__})"], record)

    errors: list[str] = []
    for day_id, anchors in record.items():
        if not isinstance(anchors, dict):
            errors.append(f"day_entry_points[{day_id!r}] must be an object")
            continue
        for side in ("start", "end"):
            anchor = anchors.get(side)
            if anchor is None:
                continue
            where = f"day_entry_points[{day_id!r}].{side}"
            if not isinstance(anchor, dict):
                errors.append(f"{where} must be an object")
                continue
            if not anchor.get("id"):
                errors.append(f"{where}.id must not be empty or NULL")
            errors.extend(validate_coordinates(anchor.get("coordinates"), f"{where}.coordinates"))
    return _result(errors, record)

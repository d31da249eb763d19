"""
main.py
--------
Command-line entry point: plans an itinerary JSON document offline.

The input file has the same shape as the POST /v1/itinerary/plan body:
  {
    "itinerary":           {"id": ..., "days": [...]},
    "options":             {"day_start": "09:00", ...},          (optional)
    "day_entry_points":    {"day-1": {"start": {...}}},          (optional)
    "remaining_locations": {"kyoto": 6},                         (optional)
    "activities_per_day":  3                                     (optional)
  }

Run:
  cd backend
  python main.py trip.json --pretty
  python main.py trip.json --summary

Exit codes: 0 ok · 1 unreadable file · 2 invalid payload.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Any, Optional

import config
from schemas.itinerary import PlannedItinerary, ScheduleStatus
from schemas.serialization import (
    day_entry_points_from_dict,
    itinerary_from_dict,
    planned_itinerary_to_dict,
    scheduler_options_from_dict,
)
from modules.planning.itinerary_planner import plan_itinerary
from modules.validation import validate_day_entry_points, validate_itinerary_payload

logger = logging.getLogger("main")


class PayloadError(ValueError):
    """Input document failed the shape checks."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def run_plan(payload: dict[str, Any]) -> PlannedItinerary:
    """Validate *payload*, convert it and plan the itinerary."""
    if not isinstance(payload, dict):
        raise PayloadError([f"document must be a JSON object (got {type(payload).__name__})"])

    errors = validate_itinerary_payload(payload.get("itinerary")).errors
    errors += validate_day_entry_points(payload.get("day_entry_points")).errors
    if errors:
        raise PayloadError(errors)

    try:
        itinerary = itinerary_from_dict(payload["itinerary"])
        anchors = day_entry_points_from_dict(payload.get("day_entry_points"))
        options = scheduler_options_from_dict(payload.get("options"))
        remaining_raw = payload.get("remaining_locations") or {}
        if not isinstance(remaining_raw, dict):
            raise ValueError("remaining_locations must be an object of city id → count")
        remaining = {str(k).strip().lower(): int(v) for k, v in remaining_raw.items()}
    except (KeyError, TypeError, ValueError) as exc:
        raise PayloadError([str(exc)]) from exc

    per_day = payload.get("activities_per_day", 3)
    if not isinstance(per_day, int) or per_day < 1:
        raise PayloadError([f"activities_per_day={per_day!r} must be a positive integer"])

    return plan_itinerary(
        itinerary,
        options,
        anchors,
        remaining_locations=remaining,
        activities_per_day=per_day,
    )


def _print_summary(planned: PlannedItinerary) -> None:
    print("\n" + "=" * 60)
    print(f"  ITINERARY {planned.itinerary.id}")
    print("=" * 60)
    for day in planned.days:
        transition = day.city_transition
        print(f"\n[{day.day.id}] {day.day.date_label or ''} {day.day.city_id or ''}".rstrip())
        if transition is not None:
            print(f"  ↳ {transition.from_city_id} → {transition.to_city_id} "
                  f"{transition.departure_time}–{transition.arrival_time} ({transition.mode.value})")
        for item in day.activities:
            if item.status == ScheduleStatus.unscheduled:
                print(f"    ·  {'':11}  {item.activity.title}")
                continue
            flag = f"  ⚠ {item.conflict.reason.value}" if item.conflict else ""
            print(f"    {item.arrival_time}–{item.departure_time}  {item.activity.title}{flag}")
        for gap in day.meal_gaps:
            print(f"    ~ {gap.meal_type} around {gap.suggested_time}")
        if day.day.id in planned.day_trips:
            trip = planned.day_trips[day.day.id]
            print(f"  Day trip idea: {trip.name} ({trip.travel_minutes} min)")
    if planned.rail_pass is not None:
        rp = planned.rail_pass
        print(f"\n  Rail pass: {rp.recommendation} "
              f"(tickets ¥{rp.individual_total:,} vs {rp.pass_type} ¥{rp.pass_price:,})")
    print(f"\n  Conflicts: {planned.conflict_count}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Plan an itinerary JSON document.")
    parser.add_argument("path", help="Path to the itinerary JSON file")
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    parser.add_argument("--summary", action="store_true", help="Print a readable day-by-day summary instead of JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    try:
        with open(args.path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Could not read %s: %s", args.path, exc)
        return 1

    try:
        planned = run_plan(payload)
    except PayloadError as exc:
        for err in exc.errors:
            logger.error("Invalid payload: %s", err)
        return 2

    if args.summary:
        _print_summary(planned)
    else:
        print(json.dumps(planned_itinerary_to_dict(planned), indent=2 if args.pretty else None, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())

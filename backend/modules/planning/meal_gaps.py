"""
modules/planning/meal_gaps.py
-------------------------------
Meal-gap detection: flags unscheduled time between two visits that spans a
canonical meal window.

Windows (inclusive at both ends):
  breakfast 07:00–09:00 · lunch 12:00–14:00 · dinner 18:00–21:00

A window counts when it overlaps [previous_end, next_start].  Only the first
matching window is reported (breakfast → lunch → dinner).  The output is
advisory; malformed clock strings simply mean "no gap".
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from schemas.itinerary import MealGap, MealType, PlaceActivity, ScheduledActivity
from modules.tool_usage.reference_data import DEFAULT_TABLES, ReferenceTables
from modules.tool_usage.time_tool import parse_time


@dataclass(frozen=True)
class MealGapResult:
    has_gap: bool
    meal_type: Optional[MealType] = None


_NO_GAP = MealGapResult(has_gap=False)


def _overlapping_meal(start_min: int, end_min: int, tables: ReferenceTables) -> Optional[str]:
    for window in tables.meal_windows:
        if window.start_min <= end_min and window.end_min >= start_min:
            return window.meal_type
    return None


def detect_meal_gap(
    previous_end_time: str,
    next_start_time: str,
    *,
    tables: ReferenceTables | None = None,
) -> MealGapResult:
    """Return which meal (if any) falls in the free interval between two visits."""
    start = parse_time(previous_end_time)
    end = parse_time(next_start_time)
    if start is None or end is None:
        return _NO_GAP
    meal = _overlapping_meal(start, end, tables or DEFAULT_TABLES)
    if meal is None:
        return _NO_GAP
    return MealGapResult(has_gap=True, meal_type=meal)


def meal_type_for_time(value: str, *, tables: ReferenceTables | None = None) -> Optional[str]:
    """Meal whose window contains the given "HH:MM", or None."""
    minute = parse_time(value)
    if minute is None:
        return None
    for window in (tables or DEFAULT_TABLES).meal_windows:
        if window.start_min <= minute <= window.end_min:
            return window.meal_type
    return None


def detect_meal_gaps_in_day(
    scheduled: Sequence[ScheduledActivity],
    *,
    tables: ReferenceTables | None = None,
) -> list[MealGap]:
    """
    Walk consecutive timed place visits and flag each gap that spans a meal.
    The suggested time is the midpoint of the free interval.
    """
    tables = tables or DEFAULT_TABLES
    timed = [
        s for s in scheduled
        if isinstance(s.activity, PlaceActivity)
        and s.arrival_min is not None
        and s.departure_min is not None
    ]
    gaps: list[MealGap] = []
    for current, nxt in zip(timed, timed[1:]):
        start, end = current.departure_min, nxt.arrival_min
        meal = _overlapping_meal(start, end, tables)
        if meal is None:
            continue
        gaps.append(MealGap(
            after_activity_id=current.id,
            before_activity_id=nxt.id,
            meal_type=meal,
            suggested_min=(start + end) // 2,
        ))
    return gaps

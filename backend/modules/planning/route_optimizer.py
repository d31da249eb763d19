"""
modules/planning/route_optimizer.py
-------------------------------------
Orders a day's place visits to cut down on backtracking.

This is a fast deterministic heuristic, NOT an optimal TSP solver:

  1. Nearest-neighbour walk from the day's start anchor.
  2. End correction: if an end anchor is given, try swapping the last stop
     with the stop nearest that anchor; keep the swap only if the total
     route (including the final leg) gets shorter.
  3. Optional 2-opt pass (segment reversal) bounded by TWO_OPT_MAX_PASSES.

Only place activities with coordinates move.  Notes and coordinate-less
places keep their original index; the optimised sequence refills the
remaining slots in order.
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence

import config
from schemas.itinerary import (
    Activity,
    Coordinate,
    EntryPoint,
    PlaceActivity,
    RouteOrderResult,
)
from modules.tool_usage.distance_tool import distance_meters

logger = logging.getLogger(__name__)


def total_route_distance(
    order: Sequence[str],
    coords: dict[str, Coordinate],
    start: Coordinate,
    end: Optional[Coordinate] = None,
) -> float:
    """Metres along start → order… → end (end leg only when *end* is given)."""
    if not order:
        return 0.0
    total = 0.0
    prev = start
    for activity_id in order:
        point = coords.get(activity_id)
        if point is None:
            continue
        total += distance_meters(prev, point)
        prev = point
    if end is not None:
        total += distance_meters(prev, end)
    return total


def _nearest_neighbour(
    candidates: list[str],
    coords: dict[str, Coordinate],
    start: Coordinate,
) -> list[str]:
    """Greedy walk; ties go to the earlier candidate (strict < keeps input order)."""
    remaining = list(candidates)
    ordered: list[str] = []
    current = start
    while remaining:
        best_idx = 0
        best_dist = distance_meters(current, coords[remaining[0]])
        for idx in range(1, len(remaining)):
            d = distance_meters(current, coords[remaining[idx]])
            if d < best_dist:
                best_idx, best_dist = idx, d
        chosen = remaining.pop(best_idx)
        ordered.append(chosen)
        current = coords[chosen]
    return ordered


def _end_correction(
    order: list[str],
    coords: dict[str, Coordinate],
    start: Coordinate,
    end: Coordinate,
) -> list[str]:
    if len(order) < 2:
        return order
    nearest_end = min(
        range(len(order)),
        key=lambda i: (distance_meters(coords[order[i]], end), i),
    )
    last = len(order) - 1
    if nearest_end == last:
        return order
    candidate = list(order)
    candidate[nearest_end], candidate[last] = candidate[last], candidate[nearest_end]
    if total_route_distance(candidate, coords, start, end) < total_route_distance(order, coords, start, end):
        return candidate
    return order


def _two_opt(
    order: list[str],
    coords: dict[str, Coordinate],
    start: Coordinate,
    end: Optional[Coordinate],
    max_passes: int,
) -> list[str]:
    """Reverse sub-segments while the route strictly shrinks."""
    if len(order) <= 2:
        return order
    best = list(order)
    best_dist = total_route_distance(best, coords, start, end)
    for _ in range(max_passes):
        improved = False
        for i in range(len(best) - 1):
            for j in range(i + 1, len(best)):
                candidate = best[:i] + best[i:j + 1][::-1] + best[j + 1:]
                cand_dist = total_route_distance(candidate, coords, start, end)
                # 1 mm tolerance keeps float noise from flipping equal routes
                if cand_dist < best_dist - 1e-3:
                    best, best_dist = candidate, cand_dist
                    improved = True
        if not improved:
            break
    return best


def optimize_route_order(
    activities: Sequence[Activity],
    start: Optional[EntryPoint] = None,
    end: Optional[EntryPoint] = None,
    *,
    two_opt: Optional[bool] = None,
) -> RouteOrderResult:
    """
    Reorder *activities* for a day bounded by *start* / *end* anchors.

    Returns the full id sequence (fixed slots untouched) plus counters:
      optimized_count -- movable places that went through the heuristic
      skipped_count   -- places without coordinates, left where they were
      order_changed   -- final sequence differs from the input
    """
    original = [a.id for a in activities]

    places = [a for a in activities if isinstance(a, PlaceActivity)]
    movable = [a for a in places if a.coordinates is not None]
    skipped = len(places) - len(movable)

    if start is None or not movable:
        return RouteOrderResult(
            order=original,
            order_changed=False,
            optimized_count=0,
            skipped_count=skipped if start is not None else 0,
        )

    coords: dict[str, Coordinate] = {a.id: a.coordinates for a in movable}
    start_pt = start.coordinates
    end_pt = end.coordinates if end is not None else None

    ordered = _nearest_neighbour([a.id for a in movable], coords, start_pt)
    if end_pt is not None:
        ordered = _end_correction(ordered, coords, start_pt, end_pt)
    use_two_opt = config.TWO_OPT_ENABLED if two_opt is None else two_opt
    if use_two_opt:
        ordered = _two_opt(ordered, coords, start_pt, end_pt, config.TWO_OPT_MAX_PASSES)

    # refill movable slots, fixed ones keep their index
    movable_ids = set(coords)
    refill = iter(ordered)
    final = [next(refill) if activity_id in movable_ids else activity_id for activity_id in original]

    changed = final != original
    if changed:
        logger.debug(
            "Route reordered: %s → %s (%.0f m → %.0f m)",
            original, final,
            total_route_distance([i for i in original if i in movable_ids], coords, start_pt, end_pt),
            total_route_distance(ordered, coords, start_pt, end_pt),
        )
    return RouteOrderResult(
        order=final,
        order_changed=changed,
        optimized_count=len(movable),
        skipped_count=skipped,
    )


def apply_order(activities: Sequence[Activity], order: Sequence[str]) -> tuple[Activity, ...]:
    """Return *activities* rearranged to *order*; the id set must match exactly."""
    by_id = {a.id: a for a in activities}
    if len(order) != len(by_id) or set(order) != set(by_id):
        raise ValueError("Route order does not match the day's activity ids")
    return tuple(by_id[i] for i in order)

"""
modules/planning/rail_pass.py
-------------------------------
Rail-pass value check: point-to-point fares along the visited city order
versus the cheapest pass tier that covers the trip.

Short trips (< RAIL_PASS_MIN_DAYS) and single-city trips are never pass
candidates.  Pairs without a known fare are left out of the sum; if no
pair has a fare the result is None ("insufficient data", not an error).

recommendation: "save" when the pass undercuts the individual tickets,
"buy" (point-to-point tickets) otherwise.
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence

import config
from schemas.itinerary import JRPassRecommendation, Journey
from modules.tool_usage.reference_data import DEFAULT_TABLES, PassTier, ReferenceTables

logger = logging.getLogger(__name__)


def _pick_tier(duration_days: int, tiers: Sequence[PassTier]) -> Optional[PassTier]:
    """Cheapest tier valid for the whole trip; the longest one when none is."""
    if not tiers:
        return None
    covering = [t for t in tiers if t.validity_days >= duration_days]
    if covering:
        return min(covering, key=lambda t: t.price)
    return max(tiers, key=lambda t: t.validity_days)


def calculate_jr_pass_value(
    duration_days: int,
    cities: Sequence[str],
    *,
    tables: ReferenceTables | None = None,
) -> Optional[JRPassRecommendation]:
    tables = tables or DEFAULT_TABLES
    if len(cities) < config.RAIL_PASS_MIN_CITIES or duration_days < config.RAIL_PASS_MIN_DAYS:
        return None

    journeys: list[Journey] = []
    for from_city, to_city in zip(cities, cities[1:]):
        if from_city == to_city:
            continue
        fare = tables.fare_between(from_city, to_city)
        if fare is None:
            logger.debug("No fare for %s → %s; leg excluded", from_city, to_city)
            continue
        journeys.append(Journey(from_city_id=from_city, to_city_id=to_city, fare=fare))

    if not journeys:
        return None

    tier = _pick_tier(duration_days, tables.pass_tiers)
    individual_total = sum(j.fare for j in journeys)
    pass_price = tier.price if tier else 0
    savings = max(0, individual_total - pass_price) if tier else 0

    return JRPassRecommendation(
        journeys=journeys,
        individual_total=individual_total,
        pass_type=tier.name if tier else None,
        pass_price=pass_price,
        savings=savings,
        recommendation="save" if savings > 0 else "buy",
    )

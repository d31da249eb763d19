"""
modules/tool_usage/travel_time_tool.py
----------------------------------------
Geometric travel-time estimates.  No routing API is called: minutes come
from straight-line distance, a per-mode effective speed and a fixed buffer.

The scheduler only talks to the TravelTimeProvider interface, so a real
routing backend can be dropped in by subclassing it.

Config knobs (config.py):
  WALK_SPEED_KMH / TRANSIT_SPEED_KMH / TAXI_SPEED_KMH  -- effective speeds
  TRANSIT_BUFFER_MINUTES / DEFAULT_BUFFER_MINUTES      -- per-leg overhead
  ENTRY_POINT_DWELL_MINUTES                            -- airport/station dwell
  LONG_DISTANCE_THRESHOLD_KM / LONG_DISTANCE_SPEED_KMH -- rail/flight switch
  AIRPORT_ACCESS_SPEED_KMH                             -- shorter entry legs
  WALK_MAX_MINUTES                                     -- walk → transit switch
"""

from __future__ import annotations
import logging
import math
from typing import Optional

import config
from schemas.itinerary import Coordinate, EntryPoint, TravelMode, TravelSegment
from modules.tool_usage.distance_tool import distance_km
from modules.tool_usage.reference_data import DEFAULT_TABLES, ReferenceTables

logger = logging.getLogger(__name__)


def _km_to_minutes(km: float, speed_kmh: float) -> float:
    """Straight-line km to minutes at a given speed."""
    return (km / speed_kmh) * 60.0


class TravelTimeProvider:
    """Interface for anything that can turn two points into a travel segment."""

    def estimate(self, distance_km: float, mode: TravelMode) -> int:
        raise NotImplementedError

    def estimate_from_entry_point(self, entry_point: EntryPoint, target_city_id: Optional[str]) -> int:
        raise NotImplementedError

    def mode_for_distance(self, distance_km: float) -> TravelMode:
        raise NotImplementedError

    def segment(
        self,
        origin: Coordinate,
        destination: Coordinate,
        mode: Optional[TravelMode] = None,
    ) -> TravelSegment:
        """Default composition: haversine distance → mode → estimate."""
        km = distance_km(origin, destination)
        chosen = mode or self.mode_for_distance(km)
        return TravelSegment(
            mode=chosen,
            duration_minutes=self.estimate(km, chosen),
            distance_meters=round(km * 1000.0, 1),
        )


class HeuristicTravelTimeProvider(TravelTimeProvider):
    """
    Speed-and-buffer estimator.

        minutes = ceil(km / speed * 60 + buffer)

    with buffer = TRANSIT_BUFFER_MINUTES for transit, DEFAULT_BUFFER_MINUTES
    for every other mode.
    """

    def __init__(self, tables: ReferenceTables | None = None) -> None:
        self.tables = tables or DEFAULT_TABLES
        self.speeds: dict[TravelMode, float] = {
            TravelMode.walk: config.WALK_SPEED_KMH,
            TravelMode.transit: config.TRANSIT_SPEED_KMH,
            TravelMode.taxi: config.TAXI_SPEED_KMH,
            TravelMode.train: config.LONG_DISTANCE_SPEED_KMH,
        }

    def estimate(self, distance_km: float, mode: TravelMode) -> int:
        speed = self.speeds[TravelMode(mode)]
        buffer = (
            config.TRANSIT_BUFFER_MINUTES
            if mode == TravelMode.transit
            else config.DEFAULT_BUFFER_MINUTES
        )
        raw = _km_to_minutes(max(distance_km, 0.0), speed)
        return int(math.ceil(raw + buffer))

    def estimate_from_entry_point(self, entry_point: EntryPoint, target_city_id: Optional[str]) -> int:
        """
        Minutes from an airport/station/hotel to the centre of *target_city_id*.

        Same city → 0.  Otherwise a flat dwell buffer plus the leg at either
        the long-distance speed (beyond LONG_DISTANCE_THRESHOLD_KM) or the
        airport-access ground speed.  Unknown city → 0.
        """
        if entry_point.city_id and target_city_id and entry_point.city_id == target_city_id:
            return 0
        center = self.tables.city_center(target_city_id)
        if center is None:
            logger.debug(
                "No centroid for city %r; entry-point leg from %s estimated as 0",
                target_city_id, entry_point.id,
            )
            return 0
        km = distance_km(entry_point.coordinates, center)
        speed = (
            config.LONG_DISTANCE_SPEED_KMH
            if km > config.LONG_DISTANCE_THRESHOLD_KM
            else config.AIRPORT_ACCESS_SPEED_KMH
        )
        return int(math.ceil(_km_to_minutes(km, speed) + config.ENTRY_POINT_DWELL_MINUTES))

    def mode_for_distance(self, distance_km: float) -> TravelMode:
        walk_minutes = _km_to_minutes(distance_km, self.speeds[TravelMode.walk])
        return TravelMode.walk if walk_minutes <= config.WALK_MAX_MINUTES else TravelMode.transit


_default_provider: HeuristicTravelTimeProvider | None = None


def default_provider() -> HeuristicTravelTimeProvider:
    global _default_provider
    if _default_provider is None:
        _default_provider = HeuristicTravelTimeProvider()
    return _default_provider


def estimate(distance_km: float, mode: TravelMode | str) -> int:
    """Module-level shortcut for the heuristic estimator."""
    return default_provider().estimate(distance_km, TravelMode(mode))


def estimate_from_entry_point(entry_point: EntryPoint, target_city_id: Optional[str]) -> int:
    return default_provider().estimate_from_entry_point(entry_point, target_city_id)

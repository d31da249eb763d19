"""
modules/tool_usage/distance_tool.py
-------------------------------------
Great-circle distances using the Haversine formula.
No external HTTP calls are made.
"""

from __future__ import annotations
import math

from schemas.itinerary import Coordinate

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    if lat1 == lat2 and lon1 == lon2:
        return 0.0
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    # rounding can push a fraction of an ulp above 1 for antipodal points
    return 2 * r * math.asin(math.sqrt(min(a, 1.0)))


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance between two coordinates in metres."""
    return haversine_km(a.lat, a.lng, b.lat, b.lng) * 1000.0


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)

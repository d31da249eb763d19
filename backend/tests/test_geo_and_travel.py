"""
Unit tests for modules/tool_usage/distance_tool.py, time_tool.py and
travel_time_tool.py.
"""
import math

import pytest

from schemas.itinerary import Coordinate, EntryPoint, TravelMode
from modules.tool_usage.distance_tool import distance_km, distance_meters, haversine_km
from modules.tool_usage.time_tool import format_time, parse_time
from modules.tool_usage.travel_time_tool import (
    HeuristicTravelTimeProvider,
    estimate,
    estimate_from_entry_point,
)

from conftest import BASE, north

TOKYO_STATION = Coordinate(35.6812, 139.7671)
KANSAI_AIRPORT = Coordinate(34.4320, 135.2304)


class TestHaversine:

    def test_same_point_is_zero(self):
        assert haversine_km(35.0, 135.0, 35.0, 135.0) == 0.0

    def test_symmetric(self):
        a, b = BASE, TOKYO_STATION
        assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))

    def test_one_degree_latitude(self):
        assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.195, abs=0.01)

    def test_tokyo_to_osaka(self):
        assert 390 < haversine_km(35.6762, 139.6503, 34.6937, 135.5023) < 410

    def test_antipodal_points_do_not_raise(self):
        assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * 6371.0)

    def test_meters_vs_km(self):
        assert distance_meters(BASE, north(1)) == pytest.approx(distance_km(BASE, north(1)) * 1000.0)


class TestCoordinate:

    @pytest.mark.parametrize("lat,lng", [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (0.0, -181.0)])
    def test_out_of_range_raises(self, lat, lng):
        with pytest.raises(ValueError):
            Coordinate(lat, lng)


class TestClock:

    @pytest.mark.parametrize("value,expected", [
        ("09:00", 540), ("9:05", 545), ("00:00", 0), ("24:00", 1440), (" 12:30 ", 750),
    ])
    def test_parse(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", ["", None, "noon", "25:00", "12:75", "24:01", "1200"])
    def test_parse_rejects(self, value):
        assert parse_time(value) is None

    def test_format_wraps_past_midnight(self):
        assert format_time(540) == "09:00"
        assert format_time(1440 + 75) == "01:15"
        assert format_time(None) is None


class TestEstimate:

    def test_walk(self):
        # 1 km at 4 km/h = 15 min + 5 min buffer
        assert estimate(1.0, TravelMode.walk) == 20

    def test_transit_uses_transit_buffer(self):
        # 10 km at 20 km/h = 30 min + 10 min buffer
        assert estimate(10.0, "transit") == 40

    def test_taxi_rounds_up(self):
        assert estimate(3.0, TravelMode.taxi) == 11

    def test_zero_distance_is_just_the_buffer(self):
        assert estimate(0.0, TravelMode.walk) == 5


class TestModeForDistance:

    def test_short_hop_is_walk(self):
        assert HeuristicTravelTimeProvider().mode_for_distance(0.5) == TravelMode.walk

    def test_longer_hop_is_transit(self):
        assert HeuristicTravelTimeProvider().mode_for_distance(0.7) == TravelMode.transit

    def test_segment_picks_mode_and_minutes(self):
        seg = HeuristicTravelTimeProvider().segment(BASE, north(1))
        assert seg.mode == TravelMode.walk
        assert seg.duration_minutes == 14
        assert seg.distance_meters == pytest.approx(556.0, abs=1.0)
        assert seg.low_confidence is False

    def test_segment_honours_explicit_mode(self):
        seg = HeuristicTravelTimeProvider().segment(BASE, north(1), TravelMode.taxi)
        assert seg.mode == TravelMode.taxi


class TestEntryPoint:

    def test_same_city_is_zero(self):
        ep = EntryPoint(id="h", name="Hotel", coordinates=BASE, city_id="kyoto")
        assert estimate_from_entry_point(ep, "kyoto") == 0

    def test_unknown_city_is_zero(self):
        ep = EntryPoint(id="h", name="Hotel", coordinates=BASE, city_id="kyoto")
        assert estimate_from_entry_point(ep, "atlantis") == 0

    def test_airport_access_leg(self):
        ep = EntryPoint(id="kix", name="Kansai Airport", coordinates=KANSAI_AIRPORT, type="airport")
        # ≈ 38 km at 60 km/h + 30 min dwell
        assert 60 < estimate_from_entry_point(ep, "osaka") < 80

    def test_long_distance_leg(self):
        ep = EntryPoint(id="tyo", name="Tokyo Station", coordinates=TOKYO_STATION, type="station")
        # ≈ 400 km at 200 km/h + 30 min dwell
        assert 140 < estimate_from_entry_point(ep, "osaka") < 165

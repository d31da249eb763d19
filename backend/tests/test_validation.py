"""
Unit tests for modules/validation/ingestion_validator.py and the payload
converters in schemas/serialization.py
"""
import pytest

from schemas.itinerary import NoteActivity, PlaceActivity, TravelMode, Weekday
from schemas.serialization import itinerary_from_dict, scheduler_options_from_dict
from modules.validation import (
    validate_activity,
    validate_coordinates,
    validate_day,
    validate_day_entry_points,
    validate_itinerary_payload,
)


def _payload(**day_overrides):
    day = {
        "id": "d1",
        "city_id": "Kyoto",
        "weekday": "Monday",
        "activities": [
            {"kind": "place", "id": "a", "title": "Kinkaku-ji",
             "coordinates": {"lat": 35.0394, "lng": 135.7292}, "duration_minutes": 60,
             "operating_hours": {"periods": [{"day": "monday", "open": "09:00", "close": "17:00"}]}},
            {"kind": "note", "id": "n", "title": "Buy a bus pass"},
            {"kind": "place", "id": "b", "title": "Ryoan-ji", "travel_mode": "taxi"},
        ],
    }
    day.update(day_overrides)
    return {"id": "trip-1", "days": [day]}


class TestItineraryPayload:

    def test_valid(self):
        result = validate_itinerary_payload(_payload())
        assert result.valid
        assert bool(result) is True
        assert result.errors == []

    def test_missing_itinerary(self):
        result = validate_itinerary_payload(None)
        assert not result
        assert result.errors == ["itinerary is required"]

    @pytest.mark.parametrize("days", [None, [], "d1"])
    def test_days_must_be_non_empty_list(self, days):
        result = validate_itinerary_payload({"id": "t", "days": days})
        assert result.errors == ["itinerary.days must be a non-empty list"]

    def test_duplicate_day_ids(self):
        payload = _payload()
        payload["days"].append(dict(payload["days"][0]))
        assert "duplicate day id 'd1'" in validate_itinerary_payload(payload).errors


class TestDay:

    def test_duplicate_activity_ids(self):
        day = _payload()["days"][0]
        day["activities"].append({"kind": "note", "id": "a", "title": "dup"})
        errors = validate_day(day).errors
        assert any("duplicate activity id 'a'" in e for e in errors)

    def test_bad_day_bounds(self):
        errors = validate_day(_payload(start_time="9am")["days"][0]).errors
        assert any("start_time" in e for e in errors)

    def test_activities_must_be_list(self):
        assert not validate_day({"id": "d", "activities": "nope"})


class TestActivity:

    def test_unknown_kind(self):
        assert not validate_activity({"kind": "meal", "id": "x", "title": "X"})

    def test_empty_title(self):
        assert not validate_activity({"kind": "place", "id": "x", "title": "  "})

    def test_negative_duration(self):
        assert not validate_activity({"kind": "place", "id": "x", "title": "X", "duration_minutes": -5})

    def test_missing_coordinates_are_allowed(self):
        assert validate_activity({"kind": "place", "id": "x", "title": "X"})


class TestCoordinates:

    @pytest.mark.parametrize("coords", [
        {"lat": 95.0, "lng": 0.0},
        {"lat": 0.0, "lng": -200.0},
        {"lat": None, "lng": 0.0},
        {"lat": "north", "lng": 0.0},
        "35,135",
    ])
    def test_rejected(self, coords):
        assert validate_coordinates(coords) != []

    def test_accepted(self):
        assert validate_coordinates({"lat": -33.9, "lng": 151.2}) == []


class TestEntryPoints:

    def test_valid(self):
        anchors = {"d1": {"start": {"id": "h", "coordinates": {"lat": 35.0, "lng": 135.7}}}}
        assert validate_day_entry_points(anchors)

    def test_missing_coordinates(self):
        anchors = {"d1": {"end": {"id": "h"}}}
        assert not validate_day_entry_points(anchors)

    def test_none_is_fine(self):
        assert validate_day_entry_points(None)


class TestConversion:

    def test_itinerary_from_dict(self):
        itinerary = itinerary_from_dict(_payload())
        day = itinerary.days[0]
        assert itinerary.id == "trip-1"
        assert day.city_id == "kyoto"
        assert day.weekday == Weekday.monday
        a, n, b = day.activities
        assert isinstance(a, PlaceActivity) and isinstance(n, NoteActivity)
        assert a.operating_hours.windows_for(Weekday.monday)[0].close == "17:00"
        assert b.coordinates is None
        assert b.travel_mode == TravelMode.taxi

    def test_unknown_enum_value_raises(self):
        with pytest.raises(ValueError):
            itinerary_from_dict(_payload(weekday="funday"))

    def test_options_overlay(self):
        opts = scheduler_options_from_dict({"day_start": "08:00", "day_end": None})
        assert opts.day_start == "08:00"
        assert opts.day_end == "21:00"

    def test_options_bad_time(self):
        with pytest.raises(ValueError):
            scheduler_options_from_dict({"day_end": "late"})

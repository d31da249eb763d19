"""
HTTP-level tests for api/server.py (FastAPI TestClient) and the main.py CLI.
"""
import json

import pytest
from fastapi.testclient import TestClient

from api.server import app
import main as cli

HOTEL = {"id": "hotel", "name": "Kyoto Hotel", "coordinates": {"lat": 35.0, "lng": 135.75}, "city_id": "kyoto"}


def _body(**extra):
    body = {
        "itinerary": {
            "id": "api-trip",
            "days": [
                {
                    "id": "d1",
                    "city_id": "kyoto",
                    "weekday": "monday",
                    "activities": [
                        {"id": "far", "title": "Far", "coordinates": {"lat": 35.015, "lng": 135.75},
                         "duration_minutes": 60},
                        {"kind": "note", "id": "n", "title": "Pick up rail pass"},
                        {"id": "near", "title": "Near", "coordinates": {"lat": 35.005, "lng": 135.75},
                         "duration_minutes": 60},
                    ],
                },
                {"id": "d2", "city_id": "osaka", "activities": []},
            ],
        },
        "day_entry_points": {"d1": {"start": HOTEL, "end": HOTEL}},
    }
    body.update(extra)
    return body


@pytest.fixture
def client():
    return TestClient(app)


class TestHealth:

    def test_ok(self, client):
        resp = client.get("/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["tables_version"]


class TestPlan:

    def test_plan(self, client):
        resp = client.post("/v1/itinerary/plan", json=_body())
        assert resp.status_code == 200
        data = resp.json()
        d1 = data["days"][0]
        assert d1["route"]["order"] == ["near", "n", "far"]
        assert [a["id"] for a in d1["activities"]] == ["near", "n", "far"]
        near = d1["activities"][0]
        assert near["arrival_time"] == "09:14"
        assert near["travel_from_previous"]["mode"] == "walk"
        assert d1["activities"][1]["status"] == "unscheduled"
        assert d1["activities"][1]["arrival_time"] is None
        assert d1["travel_to_end"]["arrival_time"] is not None
        assert data["days"][1]["city_transition"]["to_city_id"] == "osaka"
        assert data["conflict_count"] == 0

    def test_missing_itinerary_is_400(self, client):
        resp = client.post("/v1/itinerary/plan", json={})
        assert resp.status_code == 400
        assert resp.json()["detail"] == ["itinerary is required"]

    def test_empty_days_is_400(self, client):
        resp = client.post("/v1/itinerary/plan", json={"itinerary": {"id": "t", "days": []}})
        assert resp.status_code == 400

    def test_out_of_range_coordinates_is_400(self, client):
        body = _body()
        body["itinerary"]["days"][0]["activities"][0]["coordinates"]["lat"] = 95.0
        resp = client.post("/v1/itinerary/plan", json=body)
        assert resp.status_code == 400

    def test_bad_weekday_is_400(self, client):
        body = _body()
        body["itinerary"]["days"][0]["weekday"] = "funday"
        assert client.post("/v1/itinerary/plan", json=body).status_code == 400

    def test_type_error_is_422(self, client):
        body = _body()
        body["itinerary"]["days"][0]["activities"][0]["duration_minutes"] = "an hour"
        assert client.post("/v1/itinerary/plan", json=body).status_code == 422

    def test_missing_title_is_422(self, client):
        body = _body()
        del body["itinerary"]["days"][0]["activities"][0]["title"]
        assert client.post("/v1/itinerary/plan", json=body).status_code == 422
        body["itinerary"]["days"][0]["activities"][0]["title"] = ""
        assert client.post("/v1/itinerary/plan", json=body).status_code == 422

    def test_remaining_locations_enable_day_trips(self, client):
        body = _body(remaining_locations={"Kyoto": 1})
        body["itinerary"]["days"].insert(1, {"id": "d1b", "city_id": "kyoto", "activities": []})
        data = client.post("/v1/itinerary/plan", json=body).json()
        assert data["day_trips"]["d1b"]["city_id"] == "nara"


class TestOptimizeRoute:

    def test_reorders(self, client):
        body = {
            "activities": _body()["itinerary"]["days"][0]["activities"],
            "start": HOTEL,
        }
        resp = client.post("/v1/itinerary/optimize-route", json=body)
        assert resp.status_code == 200
        assert resp.json() == {
            "order": ["near", "n", "far"],
            "order_changed": True,
            "optimized_count": 2,
            "skipped_count": 0,
        }

    def test_without_start_keeps_order(self, client):
        body = {"activities": _body()["itinerary"]["days"][0]["activities"]}
        assert client.post("/v1/itinerary/optimize-route", json=body).json()["order_changed"] is False


class TestAdvice:

    def test_rail_pass(self, client):
        resp = client.get("/v1/advice/rail-pass", params={"duration_days": 7, "cities": ["tokyo", "kyoto"]})
        assert resp.status_code == 200
        assert resp.json()["recommendation"]["recommendation"] == "buy"

    def test_rail_pass_short_trip(self, client):
        resp = client.get("/v1/advice/rail-pass", params={"duration_days": 2, "cities": ["tokyo", "osaka"]})
        assert resp.json() == {"recommendation": None}

    def test_day_trip(self, client):
        resp = client.get("/v1/advice/day-trip",
                          params={"city_id": "Kyoto", "day_number": 5, "remaining_locations": 2})
        data = resp.json()
        assert data["suggestion"]["city_id"] == "osaka"
        assert len(data["candidates"]) == 4

    def test_meal_gap(self, client):
        resp = client.get("/v1/advice/meal-gap", params={"previous_end": "08:30", "next_start": "08:45"})
        assert resp.json() == {"has_gap": True, "meal_type": "breakfast"}

    def test_meal_gap_bad_time(self, client):
        resp = client.get("/v1/advice/meal-gap", params={"previous_end": "noon", "next_start": "13:00"})
        assert resp.status_code == 400


class TestCli:

    def test_prints_json(self, tmp_path, capsys):
        path = tmp_path / "trip.json"
        path.write_text(json.dumps(_body()), encoding="utf-8")
        assert cli.main([str(path)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["itinerary_id"] == "api-trip"
        assert data["days"][0]["route"]["order_changed"] is True

    def test_summary(self, tmp_path, capsys):
        path = tmp_path / "trip.json"
        path.write_text(json.dumps(_body()), encoding="utf-8")
        assert cli.main([str(path), "--summary"]) == 0
        out = capsys.readouterr().out
        assert "ITINERARY api-trip" in out
        assert "kyoto → osaka" in out

    def test_invalid_payload(self, tmp_path):
        path = tmp_path / "trip.json"
        path.write_text(json.dumps({"itinerary": {"days": []}}), encoding="utf-8")
        assert cli.main([str(path)]) == 2

    def test_non_numeric_remaining_locations(self, tmp_path):
        path = tmp_path / "trip.json"
        path.write_text(json.dumps(_body(remaining_locations={"kyoto": "many"})), encoding="utf-8")
        assert cli.main([str(path)]) == 2

    def test_unreadable_file(self, tmp_path):
        assert cli.main([str(tmp_path / "missing.json")]) == 1

    def test_run_plan_raises_payload_error(self):
        with pytest.raises(cli.PayloadError) as exc_info:
            cli.run_plan({})
        assert exc_info.value.errors == ["itinerary is required"]

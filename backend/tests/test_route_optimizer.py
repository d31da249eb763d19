"""
Unit tests for modules/planning/route_optimizer.py
"""
from itertools import permutations

import pytest

from schemas.itinerary import Coordinate, EntryPoint
from modules.planning.route_optimizer import (
    apply_order,
    optimize_route_order,
    total_route_distance,
)

from conftest import note, place


def _anchor(lat, lng, aid="anchor"):
    return EntryPoint(id=aid, name=aid, coordinates=Coordinate(lat, lng))


def _on_equator(pid, lng):
    return place(pid, Coordinate(0.0, lng))


def _brute_force_best(activities, start, end=None):
    coords = {a.id: a.coordinates for a in activities}
    return min(
        total_route_distance(list(p), coords, start.coordinates, end.coordinates if end else None)
        for p in permutations(coords)
    )


class TestNoOp:

    def test_without_start_anchor_order_is_unchanged(self):
        acts = [_on_equator("c", 0.03), _on_equator("a", 0.01)]
        result = optimize_route_order(acts)
        assert result.order == ["c", "a"]
        assert result.order_changed is False
        assert result.optimized_count == 0
        assert result.skipped_count == 0

    def test_no_movable_activities(self):
        acts = [note("n1"), place("x"), note("n2")]
        result = optimize_route_order(acts, _anchor(0.0, 0.0))
        assert result.order == ["n1", "x", "n2"]
        assert result.order_changed is False
        assert result.optimized_count == 0
        assert result.skipped_count == 1

    def test_empty_day(self):
        result = optimize_route_order([], _anchor(0.0, 0.0))
        assert result.order == []
        assert result.order_changed is False


class TestOrdering:

    def test_collinear_points_sorted_by_distance(self):
        acts = [_on_equator("c", 0.03), _on_equator("a", 0.01), _on_equator("b", 0.02)]
        result = optimize_route_order(acts, _anchor(0.0, 0.0))
        assert result.order == ["a", "b", "c"]
        assert result.order_changed is True
        assert result.optimized_count == 3

    def test_fixed_slots_keep_their_index(self):
        acts = [
            _on_equator("far", 0.02),
            note("lunch-note"),
            place("no-coords"),
            _on_equator("near", 0.01),
        ]
        result = optimize_route_order(acts, _anchor(0.0, 0.0))
        assert result.order == ["near", "lunch-note", "no-coords", "far"]
        assert result.optimized_count == 2
        assert result.skipped_count == 1

    def test_ids_are_preserved(self):
        acts = [_on_equator(f"p{i}", lng) for i, lng in enumerate([0.05, 0.01, 0.04, 0.02, 0.03])]
        acts.insert(2, note("n"))
        result = optimize_route_order(acts, _anchor(0.0, 0.0))
        assert sorted(result.order) == sorted(a.id for a in acts)
        assert result.order[2] == "n"

    def test_tie_goes_to_earlier_candidate(self):
        acts = [_on_equator("east", 0.01), _on_equator("west", -0.01)]
        result = optimize_route_order(acts, _anchor(0.0, 0.0), two_opt=False)
        assert result.order[0] == "east"

    def test_deterministic(self):
        acts = [_on_equator("c", 0.03), _on_equator("a", 0.01), _on_equator("b", 0.02)]
        start = _anchor(0.0, 0.0)
        assert optimize_route_order(acts, start).order == optimize_route_order(acts, start).order


class TestEndCorrection:
    """Greedy order first, then the last-stop swap toward the end anchor (2-opt off)."""

    def _acts(self):
        return [_on_equator("c", 0.045), _on_equator("b", -0.02), _on_equator("a", 0.01)]

    def test_greedy_order_without_end(self):
        result = optimize_route_order(self._acts(), _anchor(0.0, 0.0), two_opt=False)
        assert result.order == ["a", "b", "c"]

    def test_swap_toward_end_anchor(self):
        # a,b,c runs 0.18° with the end leg; a,c,b runs 0.12°
        result = optimize_route_order(
            self._acts(), _anchor(0.0, 0.0), _anchor(0.0, -0.03, "station"), two_opt=False,
        )
        assert result.order == ["a", "c", "b"]

    def test_last_stop_already_nearest_end(self):
        acts = [_on_equator("c", 0.03), _on_equator("a", 0.01), _on_equator("b", 0.02)]
        result = optimize_route_order(acts, _anchor(0.0, 0.0), _anchor(0.0, 0.04, "station"), two_opt=False)
        assert result.order == ["a", "b", "c"]

    def test_swap_rejected_when_route_grows(self):
        # a is nearest the end, but c,b,a (0.052°) is longer than a,b,c (0.048°)
        acts = [_on_equator("c", 0.03), _on_equator("a", 0.01), _on_equator("b", 0.02)]
        result = optimize_route_order(acts, _anchor(0.0, 0.0), _anchor(0.0, 0.012, "station"), two_opt=False)
        assert result.order == ["a", "b", "c"]


class TestAgainstBruteForce:

    def test_triangle_with_start_anchor(self):
        start = _anchor(0.0, 0.0)
        acts = [
            place("b", Coordinate(0.01, 0.01)),
            place("a", Coordinate(0.01, 0.0)),
            place("c", Coordinate(0.0, 0.01)),
        ]
        result = optimize_route_order(acts, start)
        coords = {a.id: a.coordinates for a in acts}
        got = total_route_distance(result.order, coords, start.coordinates)
        assert got == pytest.approx(_brute_force_best(acts, start), abs=1.0)

    def test_round_trip_to_end_anchor(self):
        start = _anchor(0.0, 0.0, "hotel")
        end = _anchor(0.0, 0.0, "hotel")
        acts = [_on_equator("c", 0.03), _on_equator("a", 0.01), _on_equator("b", 0.02), _on_equator("d", 0.015)]
        result = optimize_route_order(acts, start, end)
        coords = {a.id: a.coordinates for a in acts}
        got = total_route_distance(result.order, coords, start.coordinates, end.coordinates)
        assert got == pytest.approx(_brute_force_best(acts, start, end), abs=1.0)

    def test_two_opt_never_lengthens_the_route(self):
        start = _anchor(0.0, 0.0)
        end = _anchor(0.0, 0.05)
        acts = [
            place("p1", Coordinate(0.01, 0.01)),
            place("p2", Coordinate(-0.01, 0.02)),
            place("p3", Coordinate(0.012, 0.03)),
            place("p4", Coordinate(-0.008, 0.04)),
        ]
        coords = {a.id: a.coordinates for a in acts}
        plain = optimize_route_order(acts, start, end, two_opt=False)
        tuned = optimize_route_order(acts, start, end, two_opt=True)
        assert (
            total_route_distance(tuned.order, coords, start.coordinates, end.coordinates)
            <= total_route_distance(plain.order, coords, start.coordinates, end.coordinates) + 1e-6
        )


class TestApplyOrder:

    def test_reorders(self):
        acts = [place("a"), place("b"), note("n")]
        assert [a.id for a in apply_order(acts, ["n", "b", "a"])] == ["n", "b", "a"]

    def test_mismatched_ids_raise(self):
        with pytest.raises(ValueError):
            apply_order([place("a"), place("b")], ["a", "c"])

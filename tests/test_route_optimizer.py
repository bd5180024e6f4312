"""Tests for the exact route optimizer."""

import random
from itertools import permutations

import pytest

from fast_planeco.algorithm.route_optimizer import (
    RouteOptimizer,
    find_optimal_order,
    path_distance,
)
from fast_planeco.exceptions import StopLimitError, ValidationError
from fast_planeco.models import StopSet, Waypoint


def _random_matrix(rng: random.Random, size: int) -> list[list[float]]:
    return [
        [0.0 if i == j else float(rng.randint(1, 50_000)) for j in range(size)]
        for i in range(size)
    ]


@pytest.mark.parametrize("size", range(2, 9))
def test_optimal_order_beats_every_permutation(size):
    """The returned order is never longer than any other order."""
    rng = random.Random(size)

    for _ in range(5):
        matrix = _random_matrix(rng, size)
        best = find_optimal_order(matrix)
        best_distance = path_distance(matrix, best)

        assert sorted(best) == list(range(1, size))
        for order in permutations(range(1, size)):
            assert best_distance <= path_distance(matrix, order)


def test_open_path_has_no_return_leg():
    """Distance back to the origin is not counted."""
    matrix = [
        [0, 10, 100],
        [1000, 0, 10],
        [1000, 1000, 0],
    ]
    assert find_optimal_order(matrix) == (1, 2)
    assert path_distance(matrix, (1, 2)) == 20


def test_ties_keep_first_enumerated_order():
    """Equidistant points resolve to the first permutation, every time."""
    matrix = [
        [0, 1, 1],
        [1, 0, 1],
        [1, 1, 0],
    ]
    results = {find_optimal_order(matrix) for _ in range(10)}
    assert results == {(1, 2)}

    flat = [[0 if i == j else 5 for j in range(5)] for i in range(5)]
    assert find_optimal_order(flat) == (1, 2, 3, 4)


def test_single_following_stop():
    """With one following stop the only order is returned."""
    assert find_optimal_order([[0, 42], [42, 0]]) == (1,)


def test_origin_only_matrix():
    assert find_optimal_order([[0]]) == ()


def test_non_square_matrix_rejected():
    with pytest.raises(ValueError):
        find_optimal_order([[0, 1], [1, 0, 3]])


def test_optimizer_reorders_stop_set(origin, stops):
    """Following stops are mapped back to waypoints in optimal order."""
    stop_set = StopSet(origin=origin, following=tuple(stops))
    matrix = [
        [abs(a.lon - b.lon) for b in stop_set.all_waypoints]
        for a in stop_set.all_waypoints
    ]

    optimizer = RouteOptimizer(max_following_stops=8)
    optimized = optimizer.optimize(stop_set, matrix)

    assert [wp.address for wp in optimized.following] == ["B", "C", "A"]
    assert optimized.origin == origin
    assert optimizer.call_count == 1


def test_optimizer_keeps_stop_set_when_already_optimal(origin):
    following = (
        Waypoint(address="near", lat=0.0, lon=1.0),
        Waypoint(address="far", lat=0.0, lon=2.0),
    )
    stop_set = StopSet(origin=origin, following=following)
    matrix = [[0, 1, 2], [1, 0, 1], [2, 1, 0]]

    assert RouteOptimizer(max_following_stops=8).optimize(stop_set, matrix) is stop_set


def test_optimizer_enforces_stop_limit(origin):
    """Too many stops are rejected before any enumeration."""
    following = tuple(
        Waypoint(address=f"S{i}", lat=0.0, lon=float(i)) for i in range(4)
    )
    stop_set = StopSet(origin=origin, following=following)
    matrix = [[0.0] * 5 for _ in range(5)]
    optimizer = RouteOptimizer(max_following_stops=3)

    with pytest.raises(StopLimitError) as exc_info:
        optimizer.optimize(stop_set, matrix)

    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.limit == 3
    assert optimizer.call_count == 0


def test_optimizer_rejects_mismatched_matrix(origin, stops):
    stop_set = StopSet(origin=origin, following=tuple(stops))
    with pytest.raises(ValueError):
        RouteOptimizer(max_following_stops=8).optimize(stop_set, [[0, 1], [1, 0]])

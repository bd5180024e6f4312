"""Exact visiting-order optimization over a distance matrix."""

from __future__ import annotations

import logging
from itertools import permutations
from typing import Optional, Sequence

from fast_planeco.config import get_settings
from fast_planeco.exceptions import StopLimitError
from fast_planeco.models import StopSet

logger = logging.getLogger(__name__)


def path_distance(matrix: Sequence[Sequence[float]], order: Sequence[int]) -> float:
    """Sum the legs of the open path 0 -> order[0] -> order[1] -> ..."""
    total = 0.0
    current = 0
    for index in order:
        total += matrix[current][index]
        current = index
    return total


def find_optimal_order(matrix: Sequence[Sequence[float]]) -> tuple[int, ...]:
    """Find the shortest open path starting at index 0 that visits every index.

    Every permutation of 1..N-1 is tried, in lexicographic order. Only a
    strictly shorter path replaces the current best, so on ties the first
    permutation enumerated wins.

    Args:
        matrix: Square distance matrix with the origin at index 0.

    Returns:
        The winning order of the non-origin indices.
    """
    size = len(matrix)
    if any(len(row) != size for row in matrix):
        raise ValueError("Distance matrix must be square")
    if size <= 1:
        return ()

    best_order: tuple[int, ...] = tuple(range(1, size))
    best_distance = float("inf")

    for order in permutations(range(1, size)):
        distance = path_distance(matrix, order)
        if distance < best_distance:
            best_distance = distance
            best_order = order

    return best_order


class RouteOptimizer:
    """Reorders the following stops of a stop set along the shortest path."""

    def __init__(self, max_following_stops: Optional[int] = None):
        """Initialize the optimizer.

        Args:
            max_following_stops: Largest number of following stops accepted.
        """
        if max_following_stops is None:
            max_following_stops = get_settings().max_following_stops
        self.max_following_stops = max_following_stops
        self.call_count = 0

    def check_limit(self, following_count: int):
        """Raise StopLimitError if there are too many stops to enumerate."""
        if following_count > self.max_following_stops:
            raise StopLimitError(following_count, self.max_following_stops)

    def optimize(
        self, stop_set: StopSet, matrix: Sequence[Sequence[float]]
    ) -> StopSet:
        """Return the stop set with its following stops in optimal order.

        Args:
            stop_set: Stop set with an origin; its order matches the matrix.
            matrix: Distance matrix for origin + following stops.

        Returns:
            A new StopSet, or the same one when the order is already optimal.
        """
        if stop_set.origin is None:
            raise ValueError("Cannot optimize a stop set without an origin")

        following = stop_set.following
        self.check_limit(len(following))
        if len(matrix) != len(following) + 1:
            raise ValueError(
                f"Distance matrix size {len(matrix)} does not match "
                f"{len(following) + 1} stops"
            )

        self.call_count += 1
        order = find_optimal_order(matrix)
        optimized = [following[index - 1] for index in order]

        if tuple(optimized) == following:
            return stop_set

        logger.info(
            f"Reordered {len(following)} following stops "
            f"({path_distance(matrix, order) / 1000:.2f} km by matrix)"
        )
        return stop_set.with_following(optimized)

"""Even-stride sampling and overlapping chunking of point sequences."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

import numpy as np

from ..config import ROUTE_MAX_POINTS, ROUTE_MAX_WAYPOINTS

T = TypeVar("T")


def sample_indices(count: int, max_points: int) -> List[int]:
    """Indices ``round(i * (count - 1) / (max_points - 1))`` for ``i < max_points``.

    Halves round up, so the first and last index are always ``0`` and
    ``count - 1`` and the sequence never decreases.
    """

    if count <= max_points:
        return list(range(count))
    if max_points < 2:
        raise ValueError("max_points must be at least 2 to keep both endpoints")
    step = (count - 1) / (max_points - 1)
    raw = np.floor(np.arange(max_points) * step + 0.5).astype(int)
    return np.minimum(raw, count - 1).tolist()


def sample_points(points: Sequence[T], max_points: int = ROUTE_MAX_POINTS) -> List[T]:
    """Reduce ``points`` to at most ``max_points`` items, keeping both ends."""

    return [points[idx] for idx in sample_indices(len(points), max_points)]


def chunk_points(
    points: Sequence[T], max_waypoints: int = ROUTE_MAX_WAYPOINTS
) -> List[List[T]]:
    """Split ``points`` into request-sized chunks sharing one boundary point.

    Every chunk holds at most ``max_waypoints + 2`` points (origin,
    waypoints, destination); the last point of a chunk is the first of the
    next so the resulting legs join without a gap.
    """

    if max_waypoints < 0:
        raise ValueError("max_waypoints must not be negative")
    if len(points) < 2:
        return []
    size = max_waypoints + 2
    stride = size - 1
    chunks: List[List[T]] = []
    start = 0
    while start < len(points) - 1:
        chunks.append(list(points[start : start + size]))
        start += stride
    return chunks


__all__ = ["chunk_points", "sample_indices", "sample_points"]

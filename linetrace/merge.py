"""Per-line accumulation, de-duplication and chronological ordering."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Tuple

from .models import GeoPoint

LOGGER = logging.getLogger(__name__)

DedupKey = Tuple[float, float, str]


def dedup_key(point: GeoPoint) -> DedupKey:
    return (point.lat, point.lng, point.timestamp or "")


def timestamp_sort_key(point: GeoPoint) -> str:
    # Missing timestamps sort first; provider timestamps are ISO ordered.
    return point.timestamp or ""


def dedupe_points(points: Iterable[GeoPoint]) -> List[GeoPoint]:
    """Drop repeated observations, keeping the first occurrence of each key."""

    seen: set[DedupKey] = set()
    unique: List[GeoPoint] = []
    for point in points:
        key = dedup_key(point)
        if key in seen:
            continue
        seen.add(key)
        unique.append(point)
    return unique


def sort_chronologically(points: Iterable[GeoPoint]) -> List[GeoPoint]:
    return sorted(points, key=timestamp_sort_key)


class LineRegistry:
    """Accumulators keyed by line id, owned by a single pipeline run.

    After every contribution the accumulator of the affected line is free of
    duplicates and sorted by timestamp. Iteration follows the order in which
    line ids were first seen.
    """

    def __init__(self) -> None:
        self._lines: Dict[str, List[GeoPoint]] = {}

    def contribute(self, line_id: str, points: Iterable[GeoPoint]) -> List[GeoPoint]:
        key = str(line_id)
        existing = self._lines.get(key, [])
        merged = sort_chronologically(dedupe_points([*existing, *points]))
        self._lines[key] = merged
        LOGGER.debug(
            "Line %s: %d points after merge (was %d)", key, len(merged), len(existing)
        )
        return merged

    def contribute_tagged(self, points: Iterable[GeoPoint]) -> None:
        """Contribute points that carry their own ``line_id``."""

        grouped: Dict[str, List[GeoPoint]] = {}
        skipped = 0
        for point in points:
            if not point.line_id:
                skipped += 1
                continue
            grouped.setdefault(point.line_id, []).append(point)
        if skipped:
            LOGGER.debug("Ignored %d points without a line id", skipped)
        for line_id, line_points in grouped.items():
            self.contribute(line_id, line_points)

    def points(self, line_id: str) -> List[GeoPoint]:
        return list(self._lines.get(str(line_id), []))

    def line_ids(self) -> List[str]:
        return list(self._lines)

    def items(self) -> Iterator[Tuple[str, List[GeoPoint]]]:
        for line_id, points in self._lines.items():
            yield line_id, list(points)

    def total_points(self) -> int:
        return sum(len(points) for points in self._lines.values())

    def __contains__(self, line_id: object) -> bool:
        return str(line_id) in self._lines

    def __len__(self) -> int:
        return len(self._lines)


__all__ = [
    "LineRegistry",
    "dedup_key",
    "dedupe_points",
    "sort_chronologically",
    "timestamp_sort_key",
]

"""Route reconstruction service.

Samples an ordered point sequence down to the provider's per-request cap,
splits it into overlapping chunks and requests each chunk in turn. Chunks are
never requested concurrently: the next request waits for the previous
response, and leg order follows chunk order.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional

from ..config import ROUTE_MAX_POINTS, ROUTE_MAX_WAYPOINTS
from ..merge import sort_chronologically
from ..models import GeoPoint, RouteLeg
from ..routing.directions import DirectionsClient
from ..routing.legs import legs_from_response
from ..routing.sampling import chunk_points, sample_points


def _has_coordinates(point: GeoPoint) -> bool:
    for value in (point.lat, point.lng):
        if value is None or not math.isfinite(float(value)):
            return False
    return True


class RouteService:
    def __init__(
        self,
        client: DirectionsClient | None = None,
        *,
        max_points: int = ROUTE_MAX_POINTS,
        max_waypoints: int = ROUTE_MAX_WAYPOINTS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self.max_points = max_points
        self.max_waypoints = max_waypoints
        self._log = logger or logging.getLogger(self.__class__.__name__)

    @property
    def client(self) -> DirectionsClient:
        if self._client is None:
            self._client = DirectionsClient()
        return self._client

    def fetch_route(self, points: Iterable[GeoPoint]) -> Optional[List[RouteLeg]]:
        """Return the driving route through ``points`` in timestamp order.

        Returns ``None`` without any request when fewer than two points have
        coordinates, and ``None`` when any chunk comes back without a route.

        Raises:
            DirectionsNetworkError: the service could not be reached.
            DirectionsConfigError: missing or rejected credential.
            DirectionsQuotaError: provider quota exhausted.
        """

        usable = [point for point in points if _has_coordinates(point)]
        if len(usable) < 2:
            self._log.info("Need at least 2 located points for a route; got %d", len(usable))
            return None

        ordered = sort_chronologically(usable)
        sampled = sample_points(ordered, self.max_points)
        chunks = chunk_points(sampled, self.max_waypoints)
        self._log.info(
            "Requesting route for %d points (%d sampled) in %d chunk(s)",
            len(ordered),
            len(sampled),
            len(chunks),
        )

        legs: List[RouteLeg] = []
        for number, chunk in enumerate(chunks, start=1):
            payload = self.client.fetch_directions(chunk)
            if payload is None:
                self._log.info(
                    "Chunk %d/%d has no route; abandoning remaining chunks",
                    number,
                    len(chunks),
                )
                return None
            chunk_legs = legs_from_response(payload, chunk)
            self._log.debug("Chunk %d/%d -> %d legs", number, len(chunks), len(chunk_legs))
            legs.extend(chunk_legs)
        return legs

"""Turn Directions responses into route legs with decoded geometry."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from polyline import decode as polyline_decode

from ..models import GeoPoint, LatLng, RouteLeg

LOGGER = logging.getLogger(__name__)

# Encoded polylines carry five decimal places.
POLYLINE_PRECISION = 5


def decode_polyline(encoded: Optional[str]) -> List[LatLng]:
    """Decode an encoded polyline string into a list of (lat, lng) tuples."""

    if not encoded:
        return []
    try:
        decoded = polyline_decode(encoded, POLYLINE_PRECISION)
    except (ValueError, TypeError, IndexError) as exc:
        raise ValueError("Unable to decode polyline") from exc
    return [(float(lat), float(lng)) for lat, lng in decoded]


def _encoded_points(container: Any) -> Optional[str]:
    if not isinstance(container, dict):
        return None
    geometry = container.get("polyline")
    if isinstance(geometry, dict):
        return geometry.get("points")
    return None


def _text(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("text") or "")
    return ""


def _at(chunk: Sequence[GeoPoint], index: int) -> Optional[GeoPoint]:
    if 0 <= index < len(chunk):
        return chunk[index]
    return None


def _endpoint(location: Any, fallback: GeoPoint) -> GeoPoint:
    """Prefer provider coordinates, keeping the chunk point's attributes."""

    lat = lng = None
    if isinstance(location, dict):
        lat, lng = location.get("lat"), location.get("lng")
    if lat is None or lng is None:
        return fallback
    return replace(fallback, lat=float(lat), lng=float(lng))


def _overview_polyline(route: Dict[str, Any]) -> List[LatLng]:
    try:
        return decode_polyline(_encoded_points({"polyline": route.get("overview_polyline")}))
    except ValueError:
        LOGGER.warning("Ignoring undecodable overview polyline")
        return []


def _leg_polyline(leg: Dict[str, Any]) -> List[LatLng]:
    """Concatenated step geometry; empty when any step fails to decode."""

    points: List[LatLng] = []
    for step in leg.get("steps") or []:
        try:
            points.extend(decode_polyline(_encoded_points(step)))
        except ValueError:
            LOGGER.warning("Ignoring leg geometry with an undecodable step polyline")
            return []
    return points


def legs_from_response(
    payload: Dict[str, Any], chunk: Sequence[GeoPoint]
) -> List[RouteLeg]:
    """Build the legs of the first route in ``payload`` for ``chunk``.

    Provider legs map onto consecutive chunk points; a route that only carries
    an overview polyline becomes one leg spanning the whole chunk.
    """

    if not chunk:
        raise ValueError("Cannot build legs for an empty chunk")
    routes = payload.get("routes") or []
    if not routes:
        return []
    route = routes[0]
    overview = _overview_polyline(route)
    provider_legs = route.get("legs") or []

    if not provider_legs:
        if not overview:
            LOGGER.debug("Route has neither legs nor overview geometry")
            return []
        return [
            RouteLeg(
                start_point=chunk[0],
                end_point=chunk[-1],
                polyline=overview,
            )
        ]

    legs: List[RouteLeg] = []
    for idx, leg in enumerate(provider_legs):
        start_fallback = _at(chunk, idx) or chunk[-1]
        end_fallback = _at(chunk, idx + 1) or chunk[-1]
        geometry = _leg_polyline(leg)
        legs.append(
            RouteLeg(
                start_point=_endpoint(leg.get("start_location"), start_fallback),
                end_point=_endpoint(leg.get("end_location"), end_fallback),
                polyline=geometry or list(overview),
                distance_label=_text(leg.get("distance")),
                duration_label=_text(leg.get("duration")),
            )
        )
    return legs


def route_to_dict(legs: Sequence[RouteLeg]) -> List[Dict[str, Any]]:
    """JSON-friendly representation of a reconstructed route."""

    def _point(point: GeoPoint) -> Dict[str, Any]:
        return {"lat": point.lat, "lng": point.lng, "timestamp": point.timestamp}

    return [
        {
            "start": _point(leg.start_point),
            "end": _point(leg.end_point),
            "distance": leg.distance_label,
            "duration": leg.duration_label,
            "polyline": [list(pair) for pair in leg.polyline],
        }
        for leg in legs
    ]


__all__ = [
    "POLYLINE_PRECISION",
    "decode_polyline",
    "legs_from_response",
    "route_to_dict",
]

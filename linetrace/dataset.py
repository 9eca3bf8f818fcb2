"""Layer assembly and the persisted dataset format.

The dataset is a JSON array of layer objects::

    {"id": ..., "label": ..., "color": "#RRGGBB", "type": "lines"|"centers",
     "points": {"type": "FeatureCollection", "features": [...]}}

Each point is a GeoJSON ``Point`` feature with ``[lng, lat]`` coordinates and
every other attribute under ``properties``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import (
    CENTERS_COLOR,
    CENTERS_LABEL,
    CENTERS_LAYER_ID,
    LAYER_COLORS,
    LINE_LAYER_PREFIX,
)
from .merge import LineRegistry
from .models import CenterPoint, GeoPoint, Layer, Point
from .normalize import parse_number
from .utils import json_dumps

LOGGER = logging.getLogger(__name__)

LINES = "lines"
CENTERS = "centers"

# Attribute name -> serialized property name.
_GEO_PROPERTIES = {
    "timestamp": "timestamp",
    "line_id": "lineId",
    "contact_type": "contactType",
    "counterparty_number": "counterpartyNumber",
    "duration_seconds": "durationSeconds",
    "azimuth": "azimuth",
    "location": "location",
    "site_code": "siteCode",
    "maps_url": "mapsUrl",
}
_CENTER_PROPERTIES = {
    "name": "name",
    "address": "address",
    "phone": "phone",
    "category": "category",
}


def assemble_layers(
    registry: LineRegistry,
    centers: Sequence[CenterPoint],
    *,
    palette: Sequence[str] = LAYER_COLORS,
    centers_color: str = CENTERS_COLOR,
    centers_label: str = CENTERS_LABEL,
) -> List[Layer]:
    """Build one layer per non-empty line plus a trailing centers layer.

    Line colours cycle through ``palette`` in order of assignment; the centers
    layer always uses ``centers_color`` and is emitted even when empty.
    """

    if not palette:
        raise ValueError("Layer palette must not be empty")
    layers: List[Layer] = []
    color_idx = 0
    for line_id, points in registry.items():
        if not points:
            continue
        layers.append(
            Layer(
                id=f"{LINE_LAYER_PREFIX}{line_id}",
                label=line_id,
                color=palette[color_idx % len(palette)],
                type=LINES,
                points=tuple(points),
            )
        )
        color_idx += 1
    layers.append(
        Layer(
            id=CENTERS_LAYER_ID,
            label=centers_label,
            color=centers_color,
            type=CENTERS,
            points=tuple(centers),
        )
    )
    return layers


def point_properties(point: Point) -> Dict[str, Any]:
    names = _CENTER_PROPERTIES if isinstance(point, CenterPoint) else _GEO_PROPERTIES
    return {prop: getattr(point, attr) for attr, prop in names.items()}


def point_to_feature(point: Point) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [point.lng, point.lat]},
        "properties": point_properties(point),
    }


def to_feature_collection(points: Iterable[Point]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [point_to_feature(point) for point in points],
    }


def layer_to_dict(layer: Layer) -> Dict[str, Any]:
    return {
        "id": layer.id,
        "label": layer.label,
        "color": layer.color,
        "type": layer.type,
        "points": to_feature_collection(layer.points),
    }


def dataset_to_json(layers: Sequence[Layer]) -> str:
    return json_dumps([layer_to_dict(layer) for layer in layers])


def write_dataset(path: str | Path, layers: Sequence[Layer]) -> Path:
    """Write ``layers`` to ``path`` (parent folders are created)."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dataset_to_json(layers), encoding="utf-8")
    LOGGER.debug("Wrote %d layers to %s", len(layers), out_path)
    return out_path


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _feature_coordinates(feature: Dict[str, Any]) -> Optional[tuple[float, float]]:
    geometry = feature.get("geometry") or {}
    coords = geometry.get("coordinates")
    if geometry.get("type") != "Point" or not isinstance(coords, (list, tuple)):
        return None
    if len(coords) < 2:
        return None
    lng = parse_number(coords[0])
    lat = parse_number(coords[1])
    if lat is None or lng is None:
        return None
    return lat, lng


def _point_from_feature(feature: Dict[str, Any], point_cls: type) -> Optional[Point]:
    coords = _feature_coordinates(feature)
    if coords is None:
        return None
    names = _CENTER_PROPERTIES if point_cls is CenterPoint else _GEO_PROPERTIES
    properties = feature.get("properties") or {}
    attributes = {attr: properties.get(prop) for attr, prop in names.items()}
    return point_cls(lat=coords[0], lng=coords[1], **attributes)


def points_from_feature_collection(
    collection: Dict[str, Any], *, centers: bool = False
) -> List[Point]:
    """Convert a point feature collection back into point records.

    Features without a usable ``Point`` geometry are skipped.
    """

    point_cls = CenterPoint if centers else GeoPoint
    points: List[Point] = []
    for feature in collection.get("features") or []:
        if not isinstance(feature, dict):
            continue
        point = _point_from_feature(feature, point_cls)
        if point is not None:
            points.append(point)
    return points


def layer_from_dict(data: Dict[str, Any]) -> Layer:
    layer_type = data.get("type", LINES)
    collection = data.get("points") or {}
    points = points_from_feature_collection(collection, centers=layer_type == CENTERS)
    return Layer(
        id=str(data["id"]),
        label=str(data.get("label", data["id"])),
        color=str(data.get("color", "")),
        type=layer_type,
        points=tuple(points),
    )


def load_dataset(path: str | Path) -> List[Layer]:
    """Read a dataset written by :func:`write_dataset`."""

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Dataset {path} must contain a JSON array of layers")
    return [layer_from_dict(item) for item in raw]


def find_layer(layers: Iterable[Layer], key: str) -> Optional[Layer]:
    """Return the layer whose id or label equals ``key``."""

    for layer in layers:
        if key in (layer.id, layer.label):
            return layer
    return None


__all__ = [
    "CENTERS",
    "LINES",
    "assemble_layers",
    "dataset_to_json",
    "find_layer",
    "layer_from_dict",
    "layer_to_dict",
    "load_dataset",
    "point_to_feature",
    "points_from_feature_collection",
    "to_feature_collection",
    "write_dataset",
]

import json

from linetrace.config import CENTERS_COLOR, LAYER_COLORS
from linetrace.dataset import (
    assemble_layers,
    dataset_to_json,
    find_layer,
    load_dataset,
    points_from_feature_collection,
    write_dataset,
)
from linetrace.merge import LineRegistry
from linetrace.models import CenterPoint


def _registry(point, line_ids):
    registry = LineRegistry()
    for idx, line_id in enumerate(line_ids):
        registry.contribute(line_id, [point(21.0 + idx / 100, -105.0, f"2020-04-22 0{idx % 10}:00:00", line=line_id)])
    return registry


def test_layers_follow_first_seen_order_and_cycle_palette(point):
    line_ids = [str(100 + i) for i in range(len(LAYER_COLORS) + 2)]
    layers = assemble_layers(_registry(point, line_ids), [])
    assert [layer.id for layer in layers[:-1]] == [f"line-{i}" for i in line_ids]
    assert [layer.color for layer in layers[:-1]] == [
        LAYER_COLORS[i % len(LAYER_COLORS)] for i in range(len(line_ids))
    ]
    centers = layers[-1]
    assert (centers.id, centers.type, centers.color, centers.points) == ("centers", "centers", CENTERS_COLOR, ())
    assert all(layer.type == "lines" for layer in layers[:-1])


def test_empty_lines_are_skipped_without_consuming_a_color(point):
    registry = LineRegistry()
    registry.contribute("empty", [])
    registry.contribute("full", [point(21.0, -105.0, "t")])
    layers = assemble_layers(registry, [CenterPoint(lat=20.7, lng=-105.2, name="C")])
    assert [layer.id for layer in layers] == ["line-full", "centers"]
    assert layers[0].color == LAYER_COLORS[0]


def test_feature_collection_uses_lng_lat_and_camel_case_properties(point):
    registry = LineRegistry()
    registry.contribute("555", [point(21.05, -105.25, "2020-04-22 10:00:00", contact_type="VOZ SAL", duration_seconds=30)])
    layers = assemble_layers(registry, [CenterPoint(lat=20.7, lng=-105.2, name="Clínica", phone="322")])
    data = json.loads(dataset_to_json(layers))
    line_layer, centers_layer = data
    assert set(line_layer) == {"id", "label", "color", "type", "points"}
    feature = line_layer["points"]["features"][0]
    assert line_layer["points"]["type"] == "FeatureCollection"
    assert feature["geometry"] == {"type": "Point", "coordinates": [-105.25, 21.05]}
    assert feature["properties"]["lineId"] == "555"
    assert feature["properties"]["contactType"] == "VOZ SAL"
    assert feature["properties"]["durationSeconds"] == 30
    assert feature["properties"]["siteCode"] is None
    assert centers_layer["points"]["features"][0]["properties"]["name"] == "Clínica"


def test_dataset_round_trips_including_empty_centers(tmp_path, point):
    registry = LineRegistry()
    registry.contribute("555", [point(21.05, -105.25, "2020-04-22 10:00:00", counterparty_number="5551234567")])
    layers = assemble_layers(registry, [])
    path = write_dataset(tmp_path / "out" / "layers.json", layers)
    loaded = load_dataset(path)
    assert loaded == layers
    assert loaded[-1].points == ()


def test_points_from_feature_collection_skips_bad_features():
    collection = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [-105.0, 21.0]}, "properties": {"timestamp": "t"}},
            {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}},
            {"type": "Feature", "geometry": None},
            "junk",
        ],
    }
    points = points_from_feature_collection(collection)
    assert [(p.lat, p.lng, p.timestamp) for p in points] == [(21.0, -105.0, "t")]


def test_find_layer_by_id_or_label(point):
    layers = assemble_layers(_registry(point, ["555"]), [])
    assert find_layer(layers, "555").id == "line-555"
    assert find_layer(layers, "line-555").label == "555"
    assert find_layer(layers, "nope") is None

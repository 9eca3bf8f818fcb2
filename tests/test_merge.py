import itertools

from linetrace.extractors import CallRecordExtractor
from linetrace.merge import LineRegistry, dedupe_points, sort_chronologically


def test_registry_merges_dedupes_and_sorts(point):
    registry = LineRegistry()
    registry.contribute("555", [point(21.0, -105.0, "2020-04-22 10:00:00"), point(21.1, -105.1, "2020-04-22 08:00:00")])
    merged = registry.contribute(
        "555",
        [point(21.0, -105.0, "2020-04-22 10:00:00"), point(21.2, -105.2, "2020-04-22 09:00:00")],
    )
    assert [p.timestamp for p in merged] == [
        "2020-04-22 08:00:00",
        "2020-04-22 09:00:00",
        "2020-04-22 10:00:00",
    ]
    assert registry.points("555") == merged


def test_duplicates_collapse_for_any_batch_order(point):
    a = point(21.0, -105.0, "2020-04-22 10:00:00")
    b = point(21.0, -105.0, "2020-04-22 11:00:00")
    dup = point(21.0, -105.0, "2020-04-22 10:00:00", contact_type="VOZ ENT")
    for batches in itertools.permutations([[a], [b, dup], [dup]]):
        registry = LineRegistry()
        for batch in batches:
            registry.contribute("1", batch)
        points = registry.points("1")
        assert len(points) == 2
        keys = [(p.lat, p.lng, p.timestamp) for p in points]
        assert len(set(keys)) == len(keys)


def test_first_occurrence_wins_within_concatenation(point):
    first = point(21.0, -105.0, None, contact_type="first")
    second = point(21.0, -105.0, None, contact_type="second")
    assert dedupe_points([first, second]) == [first]


def test_missing_timestamp_sorts_first_and_sort_is_stable(point):
    late = point(21.0, -105.0, "2020-04-22 10:00:00")
    untimed_a = point(21.1, -105.0, None)
    untimed_b = point(21.2, -105.0, "")
    ordered = sort_chronologically([late, untimed_a, untimed_b])
    assert ordered == [untimed_a, untimed_b, late]


def test_contribute_tagged_groups_by_line_in_first_seen_order(point):
    registry = LineRegistry()
    registry.contribute_tagged(
        [
            point(21.0, -105.0, "b", line="222"),
            point(21.0, -105.0, "a", line="111"),
            point(21.1, -105.0, "a", line="222"),
            point(21.1, -105.0, "a", line=None),
        ]
    )
    assert registry.line_ids() == ["222", "111"]
    assert [p.timestamp for p in registry.points("222")] == ["a", "b"]
    assert "111" in registry and "999" not in registry
    assert len(registry) == 2
    assert registry.total_points() == 3


def test_end_to_end_three_raw_rows(scenario_grid):
    registry = LineRegistry()
    registry.contribute("555", CallRecordExtractor().extract(scenario_grid, "555"))
    points = registry.points("555")
    assert len(points) == 2
    assert [p.timestamp for p in points] == ["2020-04-22 09:00:00", "2020-04-22 10:00:00"]
    assert [(p.lat, p.lng) for p in points] == [(21.10, -105.20), (21.05, -105.25)]

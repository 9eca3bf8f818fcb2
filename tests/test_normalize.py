import math
from datetime import datetime, time

import pytest

from linetrace.models import CenterPoint, GeoPoint
from linetrace.normalize import (
    accept_coordinates,
    clean_identifier,
    combine_timestamp,
    fraction_to_hour_minute,
    make_center_point,
    make_geo_point,
    parse_duration,
    parse_number,
    resolve_columns,
    strip_brackets,
    within_region,
)


def test_bracket_wrapped_numbers_are_unwrapped():
    assert strip_brackets("[21.05]") == "21.05"
    assert parse_number("[21.05]") == pytest.approx(21.05)
    assert parse_number(" -105.25 ") == pytest.approx(-105.25)
    assert parse_number(21) == 21.0


@pytest.mark.parametrize("raw", [None, "", "abc", "[]", float("nan"), float("inf"), True])
def test_parse_number_rejects_non_numbers(raw):
    assert parse_number(raw) is None


def test_unset_zero_pair_is_rejected():
    assert accept_coordinates(0, 0) is None
    assert accept_coordinates("0", "0.0") is None


@pytest.mark.parametrize(
    "lat,lng",
    [(14.99, -100.0), (35.01, -100.0), (20.0, -120.01), (20.0, -84.99), (21.0, 0)],
)
def test_out_of_region_points_are_rejected(lat, lng):
    assert accept_coordinates(lat, lng) is None
    assert make_geo_point(lat, lng, line_id="1") is None


def test_region_edges_are_inclusive():
    assert within_region(15, -120)
    assert within_region(35, -85)
    assert accept_coordinates("[15]", "-85") == (15.0, -85.0)


def test_make_points_return_frozen_records():
    geo = make_geo_point("[21.05]", "-105.25", line_id="555", timestamp="2020-04-22 10:00:00")
    assert geo == GeoPoint(lat=21.05, lng=-105.25, line_id="555", timestamp="2020-04-22 10:00:00")
    center = make_center_point(20.75, -105.33, name="Clinica")
    assert isinstance(center, CenterPoint)
    with pytest.raises(Exception):
        geo.lat = 1.0  # type: ignore[misc]


def test_serial_date_and_fraction_time_combine_to_minute_precision():
    assert combine_timestamp(43943, 10 / 24) == "2020-04-22 10:00:00"
    assert combine_timestamp(43943.0, 0.375) == "2020-04-22 09:00:00"
    # 13:45:50 -> seconds are truncated
    fraction = (13 * 3600 + 45 * 60 + 50) / 86400
    assert combine_timestamp(43943, fraction) == "2020-04-22 13:45:00"


def test_fraction_conversion_absorbs_float_noise():
    for hour in range(24):
        for minute in (0, 1, 29, 59):
            fraction = (hour * 60 + minute) / 1440
            assert fraction_to_hour_minute(fraction) == (hour, minute)


def test_engine_decoded_cells_are_accepted():
    assert combine_timestamp(datetime(2020, 4, 22), time(8, 5, 59)) == "2020-04-22 08:05:00"
    assert combine_timestamp("2020-04-22", "07:30") == "2020-04-22 07:30:00"


def test_missing_date_or_time():
    assert combine_timestamp(None, 0.5) is None
    assert combine_timestamp(43943, None) == "2020-04-22 00:00:00"
    assert combine_timestamp(float("nan"), 0.5) is None


def test_identifier_and_duration_cleanup():
    assert clean_identifier(5551234567.0) == "5551234567"
    assert clean_identifier("5551234567.0") == "5551234567"
    assert clean_identifier(" abc ") == "abc"
    assert clean_identifier(None) is None
    assert parse_duration("45") == 45
    assert parse_duration(12.5) == 12.5
    assert parse_duration("") is None


def test_column_lookup_is_case_insensitive_and_tolerant():
    header = ["fecha", "Latitud", None, "LONGITUD"]
    mapping = resolve_columns(
        header,
        {"lat": ("LATITUD",), "lng": ("longitud",), "dur": ("DUR",), "date": ("Fecha",)},
    )
    assert mapping.columns == {"lat": 1, "lng": 3, "date": 0}
    row = ["x", 21.0, None, -105.0]
    assert mapping.get(row, "lat") == 21.0
    assert mapping.get(row, "dur") is None
    assert mapping.get(["short"], "lng") is None
    assert not mapping.has("dur")


def test_parse_number_keeps_finite_values_only():
    assert math.isclose(parse_number("[-105.2]"), -105.2)


def test_text_dates_are_read_day_first():
    assert combine_timestamp("03/04/2024", "10:00") == "2024-04-03 10:00:00"
    assert combine_timestamp("22-04-2020", "07:30") == "2020-04-22 07:30:00"
    assert combine_timestamp("2024-04-03", "10:00") == "2024-04-03 10:00:00"


def test_unrecognised_text_dates_have_no_timestamp():
    assert combine_timestamp("04/22/2020", "10:00") is None
    assert combine_timestamp("sin fecha", "10:00") is None

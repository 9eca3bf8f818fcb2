"""Row-level normalisation into canonical point records.

Everything here is a pure function of the cell values it is given. Rows that
cannot produce a valid point are rejected by returning ``None``; data-quality
problems never raise.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .config import REGION_BOUNDS
from .models import CenterPoint, GeoPoint

# Spreadsheet serial day 0.
_SERIAL_EPOCH = date(1899, 12, 30)
# Text dates: ISO first, then day-first as written in the regional extracts.
_DATE_FORMATS = ("ISO8601", "%d/%m/%Y", "%d-%m-%Y")

# Absorbs float noise such as 10/24 * 24 == 9.999999999999998.
_HOUR_EPSILON = 1e-9
_MINUTE_EPSILON = 1e-6

Row = Sequence[Any]


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        return False
    return str(value).strip() == ""


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def strip_brackets(value: object) -> str:
    """Return ``value`` as trimmed text without one leading ``[`` / trailing ``]``."""

    if _is_blank(value):
        return ""
    text = str(value).strip()
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    return text.strip()


def parse_number(value: object) -> Optional[float]:
    """Parse a finite decimal number, unwrapping ``[21.05]`` style strings."""

    if _is_number(value):
        numeric = float(value)  # type: ignore[arg-type]
    else:
        text = strip_brackets(value)
        if not text:
            return None
        try:
            numeric = float(text)
        except ValueError:
            return None
    if not math.isfinite(numeric):
        return None
    return numeric


def clean_text(value: object) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()


def clean_identifier(value: object) -> Optional[str]:
    """Text form of an identifier cell; ``5551234567.0`` becomes ``5551234567``."""

    if _is_blank(value):
        return None
    if _is_number(value) and float(value).is_integer():  # type: ignore[arg-type]
        return str(int(value))  # type: ignore[arg-type]
    candidate = str(value).strip()
    if candidate.endswith(".0") and candidate[:-2].lstrip("-").isdigit():
        candidate = candidate[:-2]
    return candidate


def parse_duration(value: object) -> Optional[float]:
    numeric = parse_number(value)
    if numeric is None:
        return None
    if numeric.is_integer():
        return int(numeric)
    return numeric


def within_region(
    lat: float,
    lng: float,
    bounds: Tuple[Tuple[float, float], Tuple[float, float]] = REGION_BOUNDS,
) -> bool:
    (min_lat, max_lat), (min_lng, max_lng) = bounds
    return min_lat <= lat <= max_lat and min_lng <= lng <= max_lng


def accept_coordinates(lat_raw: object, lng_raw: object) -> Optional[Tuple[float, float]]:
    """Return a parsed ``(lat, lng)`` pair or ``None`` when the pair is unusable."""

    lat = parse_number(lat_raw)
    lng = parse_number(lng_raw)
    if lat is None or lng is None:
        return None
    if lat == 0 and lng == 0:
        return None
    if not within_region(lat, lng):
        return None
    return lat, lng


# ---------------------------------------------------------------------------
# Dates and times
# ---------------------------------------------------------------------------


def _date_from_serial(value: object) -> Optional[date]:
    if not _is_number(value) or not math.isfinite(float(value)):  # type: ignore[arg-type]
        return None
    days = math.floor(float(value))  # type: ignore[arg-type]
    try:
        return _SERIAL_EPOCH + timedelta(days=days)
    except OverflowError:
        return None


def _date_from_datetime(value: object) -> Optional[date]:
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _date_from_string(value: object) -> Optional[date]:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    for fmt in _DATE_FORMATS:
        parsed = pd.to_datetime(text, format=fmt, errors="coerce")
        if not pd.isna(parsed):
            return parsed.date()
    return None


def _to_date(value: object) -> Optional[date]:
    for converter in (_date_from_datetime, _date_from_serial, _date_from_string):
        result = converter(value)
        if result is not None:
            return result
    return None


def fraction_to_hour_minute(fraction: float) -> Tuple[int, int]:
    """Convert a fractional day into ``(hour, minute)``; seconds are dropped."""

    fraction = fraction - math.floor(fraction)
    hours = fraction * 24
    hour = min(int(math.floor(hours + _HOUR_EPSILON)), 23)
    minute = int(math.floor(max(hours - hour, 0.0) * 60 + _MINUTE_EPSILON))
    return hour, min(minute, 59)


def _time_from_fraction(value: object) -> Optional[Tuple[int, int]]:
    if not _is_number(value) or not math.isfinite(float(value)):  # type: ignore[arg-type]
        return None
    return fraction_to_hour_minute(float(value))  # type: ignore[arg-type]


def _time_from_clock(value: object) -> Optional[Tuple[int, int]]:
    if isinstance(value, pd.Timestamp) and pd.isna(value):
        return None
    if isinstance(value, (datetime, time)):
        return value.hour, value.minute
    return None


def _time_from_string(value: object) -> Optional[Tuple[int, int]]:
    if not isinstance(value, str) or not value.strip():
        return None
    candidate = value.strip()
    if candidate.count(":") == 1:
        candidate = f"{candidate}:00"
    parsed = pd.to_timedelta(candidate, errors="coerce")
    if pd.isna(parsed):
        return None
    total_minutes = int(parsed.total_seconds() // 60)
    return (total_minutes // 60) % 24, total_minutes % 60


def _to_hour_minute(value: object) -> Optional[Tuple[int, int]]:
    for converter in (_time_from_clock, _time_from_fraction, _time_from_string):
        result = converter(value)
        if result is not None:
            return result
    return None


def combine_timestamp(date_value: object, time_value: object) -> Optional[str]:
    """Build a ``YYYY-MM-DD HH:MM:00`` timestamp from separate date/time cells.

    Serial numbers (whole days since 1899-12-30, fractional day for the time)
    and values already decoded by the workbook engine are both accepted. A
    missing time yields midnight; a missing or unreadable date yields ``None``.
    """

    day = _to_date(date_value)
    if day is None:
        return None
    hour_minute = None if _is_blank(time_value) else _to_hour_minute(time_value)
    hour, minute = hour_minute or (0, 0)
    return f"{day.isoformat()} {hour:02d}:{minute:02d}:00"


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnMapping:
    """Field name -> column index, resolved once per source."""

    columns: Mapping[str, int]

    def has(self, field: str) -> bool:
        return field in self.columns

    def get(self, row: Row, field: str) -> Any:
        index = self.columns.get(field)
        if index is None or index >= len(row):
            return None
        return row[index]


def header_index(header: Row) -> Dict[str, int]:
    """Map lower-cased header text to its first column index."""

    index: Dict[str, int] = {}
    for position, cell in enumerate(header):
        name = clean_text(cell)
        if name is None:
            continue
        index.setdefault(name.lower(), position)
    return index


def resolve_columns(
    header: Row, synonyms: Mapping[str, Iterable[str]]
) -> ColumnMapping:
    """Resolve each field to the first header matching one of its synonyms.

    Matching is case-insensitive; fields without a match are left out of the
    mapping so lookups on them return ``None``.
    """

    index = header_index(header)
    resolved: Dict[str, int] = {}
    for field, names in synonyms.items():
        for name in names:
            position = index.get(name.lower())
            if position is not None:
                resolved[field] = position
                break
    return ColumnMapping(resolved)


# ---------------------------------------------------------------------------
# Point builders
# ---------------------------------------------------------------------------


def make_geo_point(lat_raw: object, lng_raw: object, **attributes: Any) -> Optional[GeoPoint]:
    coords = accept_coordinates(lat_raw, lng_raw)
    if coords is None:
        return None
    return GeoPoint(lat=coords[0], lng=coords[1], **attributes)


def make_center_point(
    lat_raw: object, lng_raw: object, **attributes: Any
) -> Optional[CenterPoint]:
    coords = accept_coordinates(lat_raw, lng_raw)
    if coords is None:
        return None
    return CenterPoint(lat=coords[0], lng=coords[1], **attributes)


__all__ = [
    "ColumnMapping",
    "accept_coordinates",
    "clean_identifier",
    "clean_text",
    "combine_timestamp",
    "fraction_to_hour_minute",
    "header_index",
    "make_center_point",
    "make_geo_point",
    "parse_duration",
    "parse_number",
    "resolve_columns",
    "strip_brackets",
    "within_region",
]

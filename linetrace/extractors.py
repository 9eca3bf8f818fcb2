"""Source extractors: one class per known row shape.

Each extractor knows where its headers live, how its columns are named and
how a row maps onto a point. Column positions are resolved once per table
into a :class:`~linetrace.normalize.ColumnMapping`; rows are then fed through
the normaliser one by one and rejected rows are skipped silently.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from .config import CDR_HEADER_ROW
from .models import CenterPoint, GeoPoint
from .normalize import (
    ColumnMapping,
    clean_identifier,
    clean_text,
    combine_timestamp,
    header_index,
    make_center_point,
    make_geo_point,
    parse_duration,
    resolve_columns,
    strip_brackets,
)
from .source_reader import Table

LOGGER = logging.getLogger(__name__)


def _row_at(table: Table, index: int) -> List[Any]:
    if 0 <= index < len(table) and isinstance(table[index], (list, tuple)):
        return list(table[index])
    return []


def _has_columns(header: Sequence[Any], *names: str) -> bool:
    index = header_index(header)
    return all(name.lower() in index for name in names)


class SourceExtractor:
    """Base class for the extractor variants."""

    name = "source"
    #: ``"lines"`` extractors emit GeoPoints, ``"centers"`` emit CenterPoints.
    kind = "lines"
    header_row = 0
    needs_line_id = False

    def applies(self, table: Table) -> bool:
        raise NotImplementedError

    def resolve(self, header: Sequence[Any]) -> ColumnMapping:
        raise NotImplementedError

    def extract(self, table: Table, line_id: Optional[str] = None) -> list:
        raise NotImplementedError

    def _mapping_for(self, table: Table) -> Optional[ColumnMapping]:
        mapping = self.resolve(_row_at(table, self.header_row))
        if not (mapping.has("lat") and mapping.has("lng")):
            LOGGER.warning(
                "%s extractor: coordinate columns not found; source yields no points",
                self.name,
            )
            return None
        return mapping

    def _data_rows(self, table: Table) -> List[List[Any]]:
        return [
            list(row)
            for row in table[self.header_row + 1 :]
            if isinstance(row, (list, tuple))
        ]


class CallRecordExtractor(SourceExtractor):
    """Per-line CDR workbook: preamble, headers on row 11, data below."""

    name = "call-record"
    header_row = CDR_HEADER_ROW
    needs_line_id = True

    SYNONYMS = {
        "lat": ("LATITUD",),
        "lng": ("LONGITUD",),
        "date": ("FECHA",),
        "time": ("HORA",),
        "service": ("SERV",),
        "direction": ("T_REG",),
        "counterparty": ("DEST",),
        "duration": ("DUR",),
        "azimuth": ("AZIMUTH",),
    }

    def applies(self, table: Table) -> bool:
        return _has_columns(_row_at(table, self.header_row), "LATITUD", "LONGITUD")

    def resolve(self, header: Sequence[Any]) -> ColumnMapping:
        return resolve_columns(header, self.SYNONYMS)

    def extract(self, table: Table, line_id: Optional[str] = None) -> List[GeoPoint]:
        if not line_id:
            raise ValueError("CallRecordExtractor requires a line id")
        mapping = self._mapping_for(table)
        if mapping is None:
            return []
        points: List[GeoPoint] = []
        for row in self._data_rows(table):
            point = self._point_from_row(row, mapping, line_id)
            if point is not None:
                points.append(point)
        return points

    @staticmethod
    def _point_from_row(
        row: List[Any], mapping: ColumnMapping, line_id: str
    ) -> Optional[GeoPoint]:
        contact_type = None
        if clean_text(mapping.get(row, "service")):
            direction = clean_text(mapping.get(row, "direction")) or ""
            contact_type = f"VOZ {direction}".strip()
        azimuth_raw = mapping.get(row, "azimuth")
        return make_geo_point(
            mapping.get(row, "lat"),
            mapping.get(row, "lng"),
            timestamp=combine_timestamp(
                mapping.get(row, "date"), mapping.get(row, "time")
            ),
            line_id=str(line_id),
            contact_type=contact_type,
            counterparty_number=clean_identifier(mapping.get(row, "counterparty")),
            duration_seconds=parse_duration(mapping.get(row, "duration")),
            azimuth=strip_brackets(azimuth_raw) or None,
        )


class ConsolidatedCallExtractor(SourceExtractor):
    """Consolidated CSV: one header row, several lines mixed together."""

    name = "consolidated"

    SYNONYMS = {
        "lat": ("Latitud",),
        "lng": ("Longitud",),
        "line": ("Linea",),
        "has_geo": ("Tiene_geoloc",),
        "timestamp": ("FechaHora",),
        "date": ("Fecha",),
        "time": ("Hora",),
        "type": ("Tipo",),
        "counterparty": ("Numero_contacto",),
        "duration": ("Duracion_seg",),
        "location": ("Ubicacion",),
        "site_code": ("Codigo_sitio",),
        "maps_url": ("GoogleMaps",),
    }

    def applies(self, table: Table) -> bool:
        return _has_columns(
            _row_at(table, self.header_row), "Latitud", "Longitud", "Linea"
        )

    def resolve(self, header: Sequence[Any]) -> ColumnMapping:
        return resolve_columns(header, self.SYNONYMS)

    def extract(self, table: Table, line_id: Optional[str] = None) -> List[GeoPoint]:
        """Return geolocated rows; ``line_id`` restricts output to one line."""

        mapping = self._mapping_for(table)
        if mapping is None:
            return []
        points: List[GeoPoint] = []
        for row in self._data_rows(table):
            flag = clean_text(mapping.get(row, "has_geo")) or ""
            if flag.upper() != "SI":
                continue
            row_line = clean_identifier(mapping.get(row, "line"))
            if not row_line or (line_id and row_line != str(line_id)):
                continue
            point = self._point_from_row(row, mapping, row_line)
            if point is not None:
                points.append(point)
        return points

    @staticmethod
    def _point_from_row(
        row: List[Any], mapping: ColumnMapping, line_id: str
    ) -> Optional[GeoPoint]:
        timestamp = clean_text(mapping.get(row, "timestamp"))
        if timestamp is None:
            date_text = clean_text(mapping.get(row, "date"))
            time_text = clean_text(mapping.get(row, "time"))
            if date_text:
                timestamp = f"{date_text} {time_text or ''}".strip()
        return make_geo_point(
            mapping.get(row, "lat"),
            mapping.get(row, "lng"),
            timestamp=timestamp,
            line_id=line_id,
            contact_type=clean_text(mapping.get(row, "type")),
            counterparty_number=clean_identifier(mapping.get(row, "counterparty")),
            duration_seconds=parse_duration(mapping.get(row, "duration")),
            location=clean_text(mapping.get(row, "location")),
            site_code=clean_text(mapping.get(row, "site_code")),
            maps_url=clean_text(mapping.get(row, "maps_url")),
        )


class CenterRegistryExtractor(SourceExtractor):
    """Point-of-interest registry workbook.

    The registry labels its longitude column as a second ``latitude``, so the
    longitude falls back to the column right after the first ``latitude``,
    and to fixed offsets when the header is unusable.
    """

    name = "center-registry"
    kind = "centers"

    SYNONYMS = {
        "name": ("Name", "Nombre"),
        "address": ("Address", "Direccion", "Dirección"),
        "phone": ("Mobile Number", "Telefono", "Teléfono", "Phone"),
        "category": ("Category", "Catagory", "Categoria", "Categoría"),
        "lat": ("latitude", "latitud"),
        "lng": ("longitude", "longitud"),
    }
    FIXED_COLUMNS = {
        "name": 0,
        "phone": 1,
        "category": 4,
        "address": 5,
        "lat": 10,
        "lng": 11,
    }

    def applies(self, table: Table) -> bool:
        header = _row_at(table, self.header_row)
        if _has_columns(header, "latitude") or _has_columns(header, "latitud"):
            return True
        return len(header) > self.FIXED_COLUMNS["lng"] and _has_columns(
            header, "name"
        )

    def resolve(self, header: Sequence[Any]) -> ColumnMapping:
        mapping = resolve_columns(header, self.SYNONYMS)
        columns = dict(mapping.columns)
        if "lat" in columns and "lng" not in columns:
            following = columns["lat"] + 1
            if following < len(header):
                columns["lng"] = following
        if "lat" not in columns or "lng" not in columns:
            return ColumnMapping(dict(self.FIXED_COLUMNS))
        return ColumnMapping(columns)

    def extract(
        self, table: Table, line_id: Optional[str] = None
    ) -> List[CenterPoint]:
        mapping = self._mapping_for(table)
        if mapping is None:
            return []
        centers: List[CenterPoint] = []
        for row in self._data_rows(table):
            center = make_center_point(
                mapping.get(row, "lat"),
                mapping.get(row, "lng"),
                name=clean_text(mapping.get(row, "name")),
                address=clean_text(mapping.get(row, "address")),
                phone=clean_identifier(mapping.get(row, "phone")),
                category=clean_text(mapping.get(row, "category")),
            )
            if center is not None:
                centers.append(center)
        return centers


# Applicability checks run in this order; the first match wins.
EXTRACTORS: tuple[SourceExtractor, ...] = (
    CallRecordExtractor(),
    ConsolidatedCallExtractor(),
    CenterRegistryExtractor(),
)


def select_extractor(
    table: Table,
    *,
    kind: Optional[str] = None,
    extractors: Sequence[SourceExtractor] = EXTRACTORS,
) -> Optional[SourceExtractor]:
    """Return the first extractor whose shape check accepts ``table``."""

    for extractor in extractors:
        if kind is not None and extractor.kind != kind:
            continue
        if extractor.applies(table):
            return extractor
    return None


__all__ = [
    "CallRecordExtractor",
    "CenterRegistryExtractor",
    "ConsolidatedCallExtractor",
    "EXTRACTORS",
    "SourceExtractor",
    "select_extractor",
]

"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable factories for raw source
grids, workbooks and fake Directions responses.
"""
from __future__ import annotations

import json
import os
import sys

import pandas as pd
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from linetrace.models import GeoPoint


CDR_HEADERS = ["FECHA", "HORA", "SERV", "T_REG", "DEST", "DUR", "LATITUD", "LONGITUD", "AZIMUTH"]
CSV_HEADERS = [
    "Linea", "FechaHora", "Fecha", "Hora", "Tipo", "Numero_contacto", "Duracion_seg",
    "Latitud", "Longitud", "Ubicacion", "Codigo_sitio", "GoogleMaps", "Tiene_geoloc",
]
CENTER_HEADERS = [
    "Name", "Mobile Number", "Email", "Website", "Catagory", "Address",
    "City", "State", "Zip", "Rating", "latitude", "latitude",
]

# 2020-04-22 as a spreadsheet serial day.
SERIAL_2020_04_22 = 43943


# --- Factory helpers -------------------------------------------------
def make_cdr_grid(data_rows):
    preamble = [[f"Reporte linea {i}"] for i in range(11)]
    return preamble + [list(CDR_HEADERS)] + [r if r is None else list(r) for r in data_rows]


def make_cdr_row(lat, lng, hour_fraction, serial=SERIAL_2020_04_22, dest=5551234567, dur=30, az="[120]"):
    return [serial, hour_fraction, "VOZ", "SAL", dest, dur, lat, lng, az]


def make_csv_grid(data_rows):
    return [list(CSV_HEADERS)] + [[row.get(col, "") for col in CSV_HEADERS] for row in data_rows]


def make_center_grid(data_rows):
    return [list(CENTER_HEADERS)] + [list(r) for r in data_rows]


def make_center_row(name, lat, lng, phone="3221112233", category="Salud", address="Av. Principal 1"):
    return [name, phone, "", "", category, address, "Bucerias", "Nayarit", "63732", 4.5, lat, lng]


def write_grid_xlsx(path, grid):
    width = max(len(r) for r in grid)
    padded = [list(r) + [None] * (width - len(r)) for r in grid]
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        pd.DataFrame(padded).to_excel(w, index=False, header=False)
    return path


def write_grid_csv(path, grid):
    pd.DataFrame(grid).to_csv(path, index=False, header=False)
    return path


def make_point(lat, lng, ts=None, line="555", **extra):
    return GeoPoint(lat=lat, lng=lng, timestamp=ts, line_id=line, **extra)


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, data=None, status_code=200, raw_text=None):
        self.status_code = status_code
        self._data = data
        self._raw_text = raw_text

    def json(self):
        if self._raw_text is not None:
            raise ValueError("not json")
        return self._data

    @property
    def text(self):
        if self._raw_text is not None:
            return self._raw_text
        return json.dumps(self._data)


class FakeSession:
    """Records GET calls and replays queued responses (or raises exceptions)."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def cdr_grid():
    return make_cdr_grid


@pytest.fixture
def cdr_row():
    return make_cdr_row


@pytest.fixture
def csv_grid():
    return make_csv_grid


@pytest.fixture
def center_grid():
    return make_center_grid


@pytest.fixture
def center_row():
    return make_center_row


@pytest.fixture
def xlsx_writer():
    return write_grid_xlsx


@pytest.fixture
def csv_writer():
    return write_grid_csv


@pytest.fixture
def point():
    return make_point


@pytest.fixture
def fake_resp():
    return FakeResp


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def scenario_grid():
    """Three raw rows for line 555: 10:00, an unset (0, 0) pair, 09:00."""
    return make_cdr_grid(
        [
            make_cdr_row(21.05, -105.25, 10 / 24),
            make_cdr_row(0, 0, 9.5 / 24),
            make_cdr_row(21.10, -105.20, 9 / 24),
        ]
    )

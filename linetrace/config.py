"""Central configuration for the linetrace dataset and route tools.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Input/Output
# ---------------------------------------------------------------------------
# Folder holding the raw extracts. Paths can be absolute or relative.
SOURCE_DIR = os.getenv("LINETRACE_SOURCE_DIR", ".")

# Consolidated dataset written by the batch run.
OUTPUT_FILE = os.getenv(
    "LINETRACE_OUTPUT_FILE", os.path.join("public", "data", "layers.geojson.json")
)

# Call-record sources, read in this order. The second element is the line id
# assigned to every point of the file; None means the file carries its own
# line column.
CALL_SOURCES: list[tuple[str, str | None]] = [
    ("llamadas_con_geolocalizacion_consolidado.csv", None),
    ("3222357531.xlsx", "3222357531"),
    # Collaboration extract for the same line (35181280041306 is a reference
    # number, not a phone line).
    ("35181280041306.xlsx", "3222357531"),
]

# Point-of-interest registries.
CENTER_SOURCES: list[str] = ["CentrosBahiaBanderas.xlsx"]

# Keep an existing dataset untouched when none of the call sources exist.
SKIP_WHEN_SOURCES_MISSING = _env_bool("LINETRACE_SKIP_WHEN_SOURCES_MISSING", True)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------
# Regional sanity box as ((min_lat, max_lat), (min_lng, max_lng)).
REGION_BOUNDS = ((15.0, 35.0), (-120.0, -85.0))

# Row index of the header line in per-line CDR workbooks.
CDR_HEADER_ROW = 11


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------
LAYER_COLORS = [
    "#e63946",
    "#2a9d8f",
    "#e9c46a",
    "#264653",
    "#457b9d",
    "#e76f51",
]
# Reserved for the centers layer, never drawn from LAYER_COLORS.
CENTERS_COLOR = "#9b59b6"
CENTERS_LAYER_ID = "centers"
CENTERS_LABEL = os.getenv("LINETRACE_CENTERS_LABEL", "Centros Bahía Banderas")
LINE_LAYER_PREFIX = "line-"


# ---------------------------------------------------------------------------
# Directions settings
# ---------------------------------------------------------------------------
DIRECTIONS_BASE_URL = os.getenv(
    "LINETRACE_DIRECTIONS_BASE_URL",
    "https://maps.googleapis.com/maps/api/directions",
)

# Build-time fallback credential used when the environment slot is empty.
# Shipping a usable key here is a security smell; prefer setting
# LINETRACE_REQUIRE_EXPLICIT_API_KEY and configuring the key explicitly.
DEFAULT_DIRECTIONS_API_KEY = ""

DIRECTIONS_API_KEY = os.getenv("LINETRACE_DIRECTIONS_API_KEY", "")

# Refuse the build-time fallback and fail closed when no key is configured.
REQUIRE_EXPLICIT_API_KEY = _env_bool("LINETRACE_REQUIRE_EXPLICIT_API_KEY", False)

# The provider accepts origin + destination + 23 waypoints per request.
ROUTE_MAX_POINTS = _env_int("LINETRACE_ROUTE_MAX_POINTS", 25)
ROUTE_MAX_WAYPOINTS = _env_int("LINETRACE_ROUTE_MAX_WAYPOINTS", 23)

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_float("LINETRACE_REQUEST_TIMEOUT", 15.0)

# HTTP session pool sizes and transport-level retries.
HTTP_POOL_CONNECTIONS = 4
HTTP_POOL_MAXSIZE = 4
HTTP_MAX_RETRIES = _env_int("LINETRACE_HTTP_MAX_RETRIES", 3)

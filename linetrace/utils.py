"""General utility helpers shared across modules."""

from __future__ import annotations

import json
import math
from datetime import datetime, date
from decimal import Decimal
from typing import Any


def _normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    if isinstance(value, set):
        return sorted(_normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalise_value(val) for key, val in value.items()}
    return value


def json_dumps(value: Any, *, indent: int | None = None) -> str:
    """Serialise ``value`` as UTF-8 friendly JSON (non-ASCII kept as-is)."""

    return json.dumps(_normalise_value(value), ensure_ascii=False, indent=indent)

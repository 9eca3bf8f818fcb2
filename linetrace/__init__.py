"""Call-record geolocation dataset builder and route reconstruction."""

from .main import main
from .models import CenterPoint, GeoPoint, Layer, RouteLeg
from .errors import (
    DirectionsAPIError,
    DirectionsConfigError,
    DirectionsNetworkError,
    DirectionsQuotaError,
    SourceReadError,
)

__all__ = [
    "main",
    "CenterPoint",
    "GeoPoint",
    "Layer",
    "RouteLeg",
    "DirectionsAPIError",
    "DirectionsConfigError",
    "DirectionsNetworkError",
    "DirectionsQuotaError",
    "SourceReadError",
]

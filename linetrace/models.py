from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

LatLng = Tuple[float, float]


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float
    timestamp: Optional[str] = None
    line_id: Optional[str] = None
    contact_type: Optional[str] = None
    counterparty_number: Optional[str] = None
    duration_seconds: Optional[float] = None
    azimuth: Optional[str] = None
    location: Optional[str] = None
    site_code: Optional[str] = None
    maps_url: Optional[str] = None


@dataclass(frozen=True)
class CenterPoint:
    lat: float
    lng: float
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    category: Optional[str] = None


Point = Union[GeoPoint, CenterPoint]


@dataclass(frozen=True)
class Layer:
    id: str
    label: str
    color: str
    type: str  # "lines" | "centers"
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class RouteLeg:
    start_point: GeoPoint
    end_point: GeoPoint
    polyline: List[LatLng] = field(default_factory=list)
    # Provider text such as "25 km" / "30 mins", passed through untouched.
    distance_label: str = ""
    duration_label: str = ""

"""Route reconstruction components (sampling, directions client, legs)."""

from .directions import DirectionsClient, resolve_api_key  # noqa: F401
from .legs import decode_polyline, legs_from_response, route_to_dict  # noqa: F401
from .sampling import chunk_points, sample_points  # noqa: F401
from .directions import build_directions_session  # noqa: F401

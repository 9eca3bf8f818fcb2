"""Directions API client: one GET per chunk, status classification."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Type

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import config
from ..errors import (
    DirectionsAPIError,
    DirectionsConfigError,
    DirectionsNetworkError,
    DirectionsQuotaError,
)
from ..models import GeoPoint

LOGGER = logging.getLogger(__name__)

RequestsJSONDecodeError: Type[Exception]
if hasattr(requests.exceptions, "JSONDecodeError"):
    RequestsJSONDecodeError = requests.exceptions.JSONDecodeError
else:  # pragma: no cover - fallback for old requests versions
    RequestsJSONDecodeError = ValueError

STATUS_OK = "OK"
_HARD_ERRORS: Dict[str, Type[DirectionsAPIError]] = {
    "REQUEST_DENIED": DirectionsConfigError,
    "OVER_QUERY_LIMIT": DirectionsQuotaError,
}
_HARD_ERROR_HINTS = {
    "REQUEST_DENIED": "Directions API key rejected; check the key and that the Directions API is enabled",
    "OVER_QUERY_LIMIT": "Directions API query limit exceeded",
}


def resolve_api_key(
    configured: Optional[str] = None,
    *,
    default: Optional[str] = None,
    require_explicit: Optional[bool] = None,
) -> str:
    """Return the configured credential, falling back to the build default.

    Raises:
        DirectionsConfigError: when no usable key is available, or when the
            fallback is disabled and nothing is configured.
    """

    key = config.DIRECTIONS_API_KEY if configured is None else configured
    if require_explicit is None:
        require_explicit = config.REQUIRE_EXPLICIT_API_KEY
    if key and key.strip():
        return key.strip()
    if require_explicit:
        raise DirectionsConfigError(
            "LINETRACE_DIRECTIONS_API_KEY is not set and the built-in default is disabled"
        )
    fallback = config.DEFAULT_DIRECTIONS_API_KEY if default is None else default
    if not fallback:
        raise DirectionsConfigError("No Directions API key configured")
    LOGGER.warning(
        "LINETRACE_DIRECTIONS_API_KEY not set; using the built-in default key ending ****%s",
        fallback[-4:],
    )
    return fallback


def _latlng(point: GeoPoint) -> str:
    return f"{point.lat},{point.lng}"


def build_params(chunk: Sequence[GeoPoint], api_key: str) -> Dict[str, str]:
    if len(chunk) < 2:
        raise ValueError("A directions request needs at least an origin and a destination")
    params = {
        "origin": _latlng(chunk[0]),
        "destination": _latlng(chunk[-1]),
        "mode": "driving",
        "key": api_key,
    }
    waypoints = "|".join(_latlng(point) for point in chunk[1:-1])
    if waypoints:
        params["waypoints"] = waypoints
    return params


def classify_payload(payload: Any) -> Optional[Dict[str, Any]]:
    """Return the payload for a usable route, ``None`` for a soft miss.

    Raises:
        DirectionsConfigError: on ``REQUEST_DENIED``.
        DirectionsQuotaError: on ``OVER_QUERY_LIMIT``.
        DirectionsAPIError: when the body is not a JSON object.
    """

    if not isinstance(payload, dict):
        raise DirectionsAPIError("Directions response is not a JSON object")
    status = payload.get("status")
    detail = payload.get("error_message") or ""
    error_cls = _HARD_ERRORS.get(status or "")
    if error_cls is not None:
        message = _HARD_ERROR_HINTS[status]
        if detail:
            message = f"{message} | {detail}"
        LOGGER.error("Directions %s: %s", status, message)
        raise error_cls(message)
    if status != STATUS_OK:
        LOGGER.info("Directions returned status=%s; no route", status)
        return None
    routes = payload.get("routes")
    if not isinstance(routes, list) or not routes:
        LOGGER.info("Directions returned OK without routes; no route")
        return None
    return payload


def build_directions_session() -> requests.Session:
    """Pooled session that retries 5xx answers to the idempotent Directions GET."""

    retry = Retry(
        total=config.HTTP_MAX_RETRIES,
        backoff_factor=1.0,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(
        pool_connections=config.HTTP_POOL_CONNECTIONS,
        pool_maxsize=config.HTTP_POOL_MAXSIZE,
        max_retries=retry,
    )
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers["Accept"] = "application/json"
    return session


class DirectionsClient:
    """Thin wrapper around the Directions JSON endpoint."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        session: requests.Session | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key
        self._session = session
        self._base_url = (base_url or config.DIRECTIONS_BASE_URL).rstrip("/")
        self._timeout = config.REQUEST_TIMEOUT if timeout is None else timeout

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = build_directions_session()
        return self._session

    @property
    def url(self) -> str:
        return f"{self._base_url}/json"

    def _key(self) -> str:
        if self._api_key is None:
            self._api_key = resolve_api_key()
        return self._api_key

    def fetch_directions(self, chunk: Sequence[GeoPoint]) -> Optional[Dict[str, Any]]:
        """Request a driving route through ``chunk`` in order.

        Returns the decoded response for a usable route, or ``None`` when the
        provider reports a soft miss such as ``ZERO_RESULTS``.

        Raises:
            DirectionsNetworkError: when the service cannot be reached.
            DirectionsConfigError / DirectionsQuotaError: provider hard errors.
        """

        params = build_params(chunk, self._key())
        LOGGER.debug(
            "GET %s origin=%s destination=%s waypoints=%d",
            self.url,
            params["origin"],
            params["destination"],
            max(len(chunk) - 2, 0),
        )
        try:
            response = self.session.get(self.url, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise DirectionsNetworkError(
                f"Unable to reach the directions service: {exc.__class__.__name__}"
            ) from exc
        try:
            payload = response.json()
        except (ValueError, RequestsJSONDecodeError) as exc:
            raise DirectionsAPIError(
                f"Directions response was not JSON (HTTP {response.status_code})"
            ) from exc
        return classify_payload(payload)


__all__ = [
    "DirectionsClient",
    "build_directions_session",
    "build_params",
    "classify_payload",
    "resolve_api_key",
]

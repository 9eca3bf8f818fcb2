"""Central error types used across the application."""

from __future__ import annotations


class SourceReadError(RuntimeError):
    """Raised when a source file cannot be opened or parsed as a table."""


class DirectionsAPIError(RuntimeError):
    """Base error for routing service failures."""


class DirectionsNetworkError(DirectionsAPIError):
    """Raised when the routing service cannot be reached."""


class DirectionsConfigError(DirectionsAPIError):
    """Raised when the credential is missing or rejected (REQUEST_DENIED)."""


class DirectionsQuotaError(DirectionsAPIError):
    """Raised when the provider reports OVER_QUERY_LIMIT."""


__all__ = [
    "SourceReadError",
    "DirectionsAPIError",
    "DirectionsNetworkError",
    "DirectionsConfigError",
    "DirectionsQuotaError",
]

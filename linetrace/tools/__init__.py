"""Utility entry points for supplementary linetrace tooling."""

from .route_line import reconstruct_line_route

__all__ = ["reconstruct_line_route"]

"""Service layer package.

Exports high-level services consumed by orchestration / presentation layers.
"""

from .dataset_service import DatasetService, DatasetServiceConfig
from .route_service import RouteService

__all__ = ["DatasetService", "DatasetServiceConfig", "RouteService"]

"""Services module for the charm catalog."""

from charmcatalog.services.entity_service import EntityService
from charmcatalog.services.stats_service import StatsService

__all__ = [
    "EntityService",
    "StatsService",
]

"""Database repositories for the charm catalog."""

from charmcatalog.db.repositories.entity_repo import EntityRepository
from charmcatalog.db.repositories.stats_repo import (
    ARCHIVE_DOWNLOAD,
    Counter,
    CounterRequest,
    CounterRequestBy,
    StatsRepository,
    entity_stats_key,
)

__all__ = [
    "EntityRepository",
    "StatsRepository",
    "Counter",
    "CounterRequest",
    "CounterRequestBy",
    "ARCHIVE_DOWNLOAD",
    "entity_stats_key",
]

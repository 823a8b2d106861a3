"""Download statistics service."""

import logging
from datetime import date
from typing import Optional

from charmcatalog.db.repositories.stats_repo import (
    ARCHIVE_DOWNLOAD,
    CounterRequest,
    CounterRequestBy,
    StatsRepository,
    entity_stats_key,
)
from charmcatalog.exceptions import BadRequestError
from charmcatalog.models.entity import Statistic, StatsUpdateEntry
from charmcatalog.models.reference import Reference

logger = logging.getLogger(__name__)


class StatsService:
    """Service for counter queries and download updates.

    Attributes:
        stats_repo: Statistics repository.
    """

    def __init__(self, stats_repo: StatsRepository) -> None:
        self.stats_repo = stats_repo

    async def counter(
        self,
        key_path: str,
        by: str = "",
        start: Optional[date] = None,
        stop: Optional[date] = None,
        list_: bool = False,
    ) -> list[Statistic]:
        """Query aggregated counters.

        Args:
            key_path: Colon separated key, ending in "*" for a prefix query.
            by: "", "day" or "week".
            start: First day included.
            stop: Last day included.
            list_: Report one counter per matching key.

        Returns:
            Counter values; keys are only reported for list queries.

        Raises:
            BadRequestError: If the key or the period is invalid.
        """
        if not key_path or "/" in key_path:
            raise BadRequestError(f'invalid key "{key_path}"')
        try:
            period = CounterRequestBy(by or CounterRequestBy.ALL.value)
        except ValueError:
            raise BadRequestError(f"invalid 'by' value \"{by}\"") from None

        key = key_path.split(":")
        prefix = key[-1] == "*"
        if prefix:
            key = key[:-1]
            if not key:
                raise BadRequestError("unknown key")

        counters = await self.stats_repo.counters(CounterRequest(
            key=key,
            prefix=prefix,
            list=list_,
            by=period,
            start=start,
            stop=stop,
        ))

        stats = []
        for counter in counters:
            name = None
            if list_:
                name = ":".join(counter.key) + (":*" if counter.prefix else "")
            stats.append(Statistic(key=name, day=counter.time, count=counter.count))
        return stats

    async def update(self, entries: list[StatsUpdateEntry]) -> None:
        """Record archive downloads.

        Each entry counts for its revision and for all revisions of the
        entity, on the entry's day. Nothing is recorded unless every entry
        is valid.

        Args:
            entries: Download events.

        Raises:
            BadRequestError: If a reference cannot be parsed or is partial.
        """
        increments = []
        for entry in entries:
            ref = Reference.parse(entry.charm_reference)
            if not ref.is_fully_qualified:
                raise BadRequestError(
                    f'partial reference in stats update: "{entry.charm_reference}"',
                    reference=entry.charm_reference,
                )
            for revision in (ref.revision, -1):
                key = entity_stats_key(ref.series, ref.name, ref.user, revision, ARCHIVE_DOWNLOAD)
                increments.append((key, entry.timestamp))
        await self.stats_repo.increment_many(increments)
        logger.info(f"Recorded {len(entries)} download(s)")

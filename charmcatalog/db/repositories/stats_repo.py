"""Statistics counters repository."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from charmcatalog.db.database import Database
from charmcatalog.exceptions import InternalError

logger = logging.getLogger(__name__)

# Counter kinds.
ARCHIVE_DOWNLOAD = "archive-download"


class CounterRequestBy(str, Enum):
    """Period covered by each aggregated counter."""

    ALL = "all"
    DAY = "day"
    WEEK = "week"


@dataclass
class CounterRequest:
    """Query over stored counters.

    Attributes:
        key: Key tokens to match.
        prefix: Match keys strictly longer than key instead of key itself.
        list: With prefix, report one counter per next key token.
        by: Aggregation period.
        start: First day included.
        stop: Last day included.
    """

    key: list[str]
    prefix: bool = False
    list: bool = False
    by: CounterRequestBy = CounterRequestBy.ALL
    start: Optional[date] = None
    stop: Optional[date] = None


@dataclass
class Counter:
    """An aggregated counter value.

    Attributes:
        key: Key tokens.
        prefix: Whether the counter aggregates keys continuing past key.
        count: Aggregated count.
        time: End of the aggregated period, None when aggregating everything.
    """

    key: list[str] = field(default_factory=list)
    prefix: bool = False
    count: int = 0
    time: Optional[date] = None


def entity_stats_key(series: str, name: str, user: str, revision: int, kind: str) -> list[str]:
    """Build the counter key for an entity.

    Keys have the form kind:series:name:user[:revision]; user is empty
    for unowned entities and revision is omitted when unspecified.
    """
    key = [kind, series, name, user]
    if revision != -1:
        key.append(str(revision))
    return key


def _encode(tokens: list[str]) -> str:
    return "".join(t + ":" for t in tokens)


def _bucket(day: date, by: CounterRequestBy) -> Optional[date]:
    if by == CounterRequestBy.DAY:
        return day
    if by == CounterRequestBy.WEEK:
        # Reported at the end of the week (the following Monday).
        return day - timedelta(days=day.weekday()) + timedelta(days=7)
    return None


class StatsRepository:
    """Repository for daily statistics counters.

    Attributes:
        db: Database instance.
    """

    def __init__(self, db: Database) -> None:
        """Initialize the repository.

        Args:
            db: Database instance.
        """
        self.db = db

    async def increment(self, key: list[str], when: Optional[datetime] = None) -> None:
        """Increment a counter for the day of the given time.

        Args:
            key: Key tokens.
            when: Event time (default: now).
        """
        await self.increment_many([(key, when)])

    async def increment_many(self, items: list[tuple[list[str], Optional[datetime]]]) -> None:
        """Increment several counters in a single transaction.

        Either every counter is incremented or none is.

        Args:
            items: (key tokens, event time) pairs; a None time means now.
        """
        try:
            for key, when in items:
                when = when or datetime.now(timezone.utc)
                if when.tzinfo is not None:
                    when = when.astimezone(timezone.utc)
                await self.db.execute(
                    """
                    INSERT INTO stats_counters (key, day, count) VALUES (?, ?, 1)
                    ON CONFLICT(key, day) DO UPDATE SET count = count + 1
                    """,
                    (_encode(key), when.date().isoformat()),
                )
            await self.db.commit()
        except InternalError:
            await self.db.rollback()
            raise
        logger.debug(f"Incremented {len(items)} counter(s)")

    async def counters(self, req: CounterRequest) -> list[Counter]:
        """Aggregate counters according to the request.

        Args:
            req: Counter query.

        Returns:
            Aggregated counters, earliest period first, then larger counts.
        """
        search = _encode(req.key)
        if req.prefix:
            query = "SELECT key, day, count FROM stats_counters WHERE substr(key, 1, ?) = ? AND length(key) > ?"
            params: list = [len(search), search, len(search)]
        else:
            query = "SELECT key, day, count FROM stats_counters WHERE key = ?"
            params = [search]

        if req.start:
            query += " AND day >= ?"
            params.append(req.start.isoformat())
        if req.stop:
            query += " AND day <= ?"
            params.append(req.stop.isoformat())

        rows = await self.db.fetch_all(query, tuple(params))

        totals: dict[tuple[str, Optional[date]], int] = {}
        for row in rows:
            stored = row["key"]
            if req.list and req.prefix:
                end = stored.index(":", len(search)) + 1
                emitted = stored[:end] + "*" if len(stored) > end else stored
            else:
                emitted = search + "*" if req.prefix else search
            bucket = _bucket(date.fromisoformat(row["day"]), req.by)
            totals[(emitted, bucket)] = totals.get((emitted, bucket), 0) + row["count"]

        result = []
        for (emitted, bucket), count in totals.items():
            tokens = emitted.split(":")
            result.append(Counter(
                key=tokens[:-1],
                prefix=tokens[-1] == "*",
                count=count,
                time=bucket,
            ))

        if not req.list and not result:
            return [Counter(key=list(req.key), prefix=req.prefix, count=0)]

        result.sort(key=lambda c: (c.time or date.min, -c.count, c.key))
        return result

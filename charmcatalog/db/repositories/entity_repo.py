"""Entity repository for database operations."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from charmcatalog.db.database import Database
from charmcatalog.exceptions import BadRequestError, NotFoundError, no_matching_entity
from charmcatalog.models.entity import EVERYONE, BaseEntity, Entity
from charmcatalog.models.reference import Reference

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_time(value: str) -> datetime:
    return _as_utc(datetime.fromisoformat(value))


class EntityRepository:
    """Repository for charm and bundle entities.

    Also serves as the candidate set provider for reference resolution.

    Attributes:
        db: Database instance.
    """

    def __init__(self, db: Database) -> None:
        """Initialize the repository.

        Args:
            db: Database instance.
        """
        self.db = db

    async def expand_url(self, base: Reference) -> list[Reference]:
        """Return every stored reference sharing base's user and name.

        Series and revision of the argument are ignored.

        Args:
            base: Reference whose base identity is looked up.

        Returns:
            Matching references, empty if none are stored.
        """
        rows = await self.db.fetch_all(
            "SELECT user, name, series, revision FROM entities WHERE user = ? AND name = ?",
            (base.user, base.name),
        )
        return [
            Reference(name=row["name"], user=row["user"], series=row["series"], revision=row["revision"])
            for row in rows
        ]

    async def find_entity(self, ref: Reference) -> Entity:
        """Get an entity by fully qualified reference.

        Args:
            ref: Fully qualified reference.

        Returns:
            The stored entity.

        Raises:
            NotFoundError: If no such entity is stored.
        """
        row = await self.db.fetch_one(
            "SELECT * FROM entities WHERE user = ? AND name = ? AND series = ? AND revision = ?",
            (ref.user, ref.name, ref.series, ref.revision),
        )
        if not row:
            raise no_matching_entity(ref)
        return self._row_to_entity(row)

    async def get_entity(self, ref: Reference) -> Optional[Entity]:
        """Get an entity or None if it is not stored."""
        try:
            return await self.find_entity(ref)
        except NotFoundError:
            return None

    def _row_to_entity(self, row) -> Entity:
        """Convert a database row to an Entity object.

        Args:
            row: Database row.

        Returns:
            Entity object.
        """
        return Entity(
            ref=Reference(
                name=row["name"],
                user=row["user"],
                series=row["series"],
                revision=row["revision"],
            ),
            size=row["size"],
            blob_hash=row["blob_hash"],
            blob_hash256=row["blob_hash256"],
            upload_time=_parse_time(row["upload_time"]),
            extra_info=json.loads(row["extra_info"]) if row["extra_info"] else {},
        )

    async def find_base_entity(self, ref: Reference) -> BaseEntity:
        """Get the base entity shared by every revision of ref.

        Args:
            ref: Any reference with the wanted base identity.

        Returns:
            The base entity.

        Raises:
            NotFoundError: If the base entity does not exist.
        """
        row = await self.db.fetch_one(
            "SELECT * FROM base_entities WHERE user = ? AND name = ?",
            (ref.user, ref.name),
        )
        if not row:
            raise no_matching_entity(ref)
        return BaseEntity(
            ref=Reference(name=row["name"], user=row["user"]),
            acl_read=json.loads(row["acl_read"]),
            acl_write=json.loads(row["acl_write"]),
        )

    async def add_entity(
        self,
        entity: Entity,
        acl_read: Optional[list[str]] = None,
        acl_write: Optional[list[str]] = None,
    ) -> Entity:
        """Add a new entity, creating its base entity on first publish.

        ACL arguments only apply when the base entity is created.

        Args:
            entity: Entity to store; its reference must be fully qualified.
            acl_read: Initial read ACL (default: everyone).
            acl_write: Initial write ACL (default: the owner, if any).

        Returns:
            Stored entity.

        Raises:
            BadRequestError: If the reference is partial or already stored.
        """
        ref = entity.ref
        if not ref.is_fully_qualified:
            raise BadRequestError(f'cannot add partial reference "{ref}"', reference=str(ref))
        if await self.get_entity(ref):
            raise BadRequestError(f'entity "{ref}" already exists', reference=str(ref))

        base = await self.db.fetch_one(
            "SELECT 1 FROM base_entities WHERE user = ? AND name = ?",
            (ref.user, ref.name),
        )
        if not base:
            if acl_read is None:
                acl_read = [EVERYONE]
            if acl_write is None:
                acl_write = [ref.user] if ref.user else []
            await self.db.execute(
                "INSERT INTO base_entities (user, name, acl_read, acl_write) VALUES (?, ?, ?, ?)",
                (ref.user, ref.name, json.dumps(acl_read), json.dumps(acl_write)),
            )

        await self.db.execute(
            """
            INSERT INTO entities (
                user, name, series, revision, size,
                blob_hash, blob_hash256, upload_time, extra_info
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                ref.user,
                ref.name,
                ref.series,
                ref.revision,
                entity.size,
                entity.blob_hash,
                entity.blob_hash256,
                _as_utc(entity.upload_time).isoformat(),
                json.dumps(entity.extra_info),
            ),
        )
        await self.db.commit()

        logger.info(f"Added entity {ref}")
        return entity

    async def update_extra_info(self, ref: Reference, values: dict[str, Any]) -> Entity:
        """Merge values into an entity's extra-info.

        Args:
            ref: Fully qualified reference.
            values: Keys to set.

        Returns:
            Updated entity.
        """
        entity = await self.find_entity(ref)
        entity.extra_info.update(values)
        await self.db.execute(
            "UPDATE entities SET extra_info = ? WHERE user = ? AND name = ? AND series = ? AND revision = ?",
            (json.dumps(entity.extra_info), ref.user, ref.name, ref.series, ref.revision),
        )
        await self.db.commit()
        return entity

    async def set_perms(
        self,
        ref: Reference,
        read: Optional[list[str]] = None,
        write: Optional[list[str]] = None,
    ) -> BaseEntity:
        """Replace the ACLs of ref's base entity.

        Args:
            ref: Any reference with the wanted base identity.
            read: New read ACL, unchanged if None.
            write: New write ACL, unchanged if None.

        Returns:
            Updated base entity.
        """
        base = await self.find_base_entity(ref)
        if read is not None:
            base.acl_read = list(read)
        if write is not None:
            base.acl_write = list(write)
        await self.db.execute(
            "UPDATE base_entities SET acl_read = ?, acl_write = ? WHERE user = ? AND name = ?",
            (json.dumps(base.acl_read), json.dumps(base.acl_write), ref.user, ref.name),
        )
        await self.db.commit()
        logger.info(f"Updated permissions of {ref.base()}")
        return base

    async def published(
        self,
        start: Optional[datetime] = None,
        stop: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Entity]:
        """List entities by upload time, newest first.

        Args:
            start: Earliest upload time included.
            stop: Latest upload time included.
            limit: Maximum number of entities.

        Returns:
            Matching entities.
        """
        query = "SELECT * FROM entities WHERE 1=1"
        params: list = []

        if start:
            query += " AND upload_time >= ?"
            params.append(_as_utc(start).isoformat())

        if stop:
            query += " AND upload_time <= ?"
            params.append(_as_utc(stop).isoformat())

        query += " ORDER BY upload_time DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        rows = await self.db.fetch_all(query, tuple(params))
        return [self._row_to_entity(row) for row in rows]

"""Entity service for business logic."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from charmcatalog.auth.token import TokenPayload, acl_admits
from charmcatalog.db.repositories.entity_repo import EntityRepository
from charmcatalog.db.repositories.stats_repo import (
    ARCHIVE_DOWNLOAD,
    CounterRequest,
    StatsRepository,
    entity_stats_key,
)
from charmcatalog.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from charmcatalog.models.entity import (
    ArchiveSizeResponse,
    ArchiveUploadTimeResponse,
    HashResponse,
    IdNameResponse,
    IdResponse,
    IdRevisionResponse,
    IdSeriesResponse,
    IdUserResponse,
    PermRequest,
    PermResponse,
    Published,
    RevisionInfoResponse,
    StatsCount,
    StatsResponse,
)
from charmcatalog.models.reference import Reference
from charmcatalog.resolver.url import URLResolver

logger = logging.getLogger(__name__)

# Characters not allowed in extra-info keys.
_INVALID_EXTRA_INFO_CHARS = (".", "/", "$")

PERM_KEYS = ("read", "write")

# Metadata names accepting a sub-path.
_PATH_METADATA = ("extra-info", "perm")


def _check_extra_info_key(key: str) -> None:
    if not key or any(c in key for c in _INVALID_EXTRA_INFO_CHARS):
        raise BadRequestError(f'bad key for extra-info: "{key}"')


class EntityService:
    """Service for charm and bundle lookups.

    Every operation taking an id expects it already resolved through
    resolve(); ACL checks are separate calls made by the HTTP layer.

    Attributes:
        repo: Entity repository.
        stats_repo: Statistics repository.
        resolver: Reference resolver.
        admin_group: Group admitted by every ACL.
    """

    def __init__(
        self,
        repo: EntityRepository,
        stats_repo: StatsRepository,
        resolver: URLResolver,
        admin_group: str = "",
    ) -> None:
        """Initialize the service.

        Args:
            repo: Entity repository.
            stats_repo: Statistics repository.
            resolver: Reference resolver.
            admin_group: Group admitted by every ACL.
        """
        self.repo = repo
        self.stats_repo = stats_repo
        self.resolver = resolver
        self.admin_group = admin_group

        self._getters: dict[str, Callable[[Reference, str], Awaitable[Any]]] = {
            "id": self._meta_id,
            "id-name": self._meta_id_name,
            "id-user": self._meta_id_user,
            "id-series": self._meta_id_series,
            "id-revision": self._meta_id_revision,
            "revision-info": self._meta_revision_info,
            "archive-size": self._meta_archive_size,
            "hash": self._meta_hash,
            "hash256": self._meta_hash256,
            "archive-upload-time": self._meta_archive_upload_time,
            "extra-info": self._meta_extra_info,
            "perm": self._meta_perm,
            "stats": self._meta_stats,
        }
        self._putters: dict[str, Callable[[Reference, str, Any], Awaitable[None]]] = {
            "extra-info": self._put_extra_info,
            "perm": self._put_perm,
        }

    async def resolve(self, ref: Reference) -> Reference:
        """Resolve a possibly partial reference."""
        return await self.resolver.resolve(ref)

    async def authorize_read(self, ref: Reference, user: Optional[TokenPayload]) -> None:
        """Check the caller may read ref.

        Raises:
            UnauthorizedError: If the read ACL does not admit the caller.
        """
        base = await self.repo.find_base_entity(ref)
        if not acl_admits(base.acl_read, user, self.admin_group):
            raise UnauthorizedError(f'access denied to "{ref}"', reference=str(ref))

    async def authorize_write(self, ref: Reference, user: Optional[TokenPayload]) -> None:
        """Check the caller may modify ref.

        Raises:
            UnauthorizedError: If the write ACL does not admit the caller.
        """
        base = await self.repo.find_base_entity(ref)
        if not acl_admits(base.acl_write, user, self.admin_group):
            raise UnauthorizedError(f'write access denied to "{ref}"', reference=str(ref))

    async def expand_id(self, ref: Reference) -> list[Reference]:
        """List every stored reference sharing ref's base identity."""
        return await self.resolver.expand_id(ref)

    async def meta(self, id: Reference, name: str, path: str = "") -> Any:
        """Get a metadata value of a resolved entity.

        Args:
            id: Fully qualified reference.
            name: Metadata name, e.g. "archive-size".
            path: Remainder of the metadata path, e.g. the extra-info key.

        Returns:
            A response model or a plain JSON value.

        Raises:
            NotFoundError: If the metadata name or the entity is unknown.
        """
        getter = self._getters.get(name)
        if getter is None:
            raise NotFoundError(f'unknown metadata "{name}"')
        if path and name not in _PATH_METADATA:
            raise NotFoundError(f'unknown metadata "{name}/{path}"')
        return await getter(id, path)

    async def put_meta(self, id: Reference, name: str, path: str, value: Any) -> None:
        """Update a metadata value of a resolved entity.

        Args:
            id: Fully qualified reference.
            name: Metadata name, "extra-info" or "perm".
            path: Remainder of the metadata path.
            value: Decoded JSON body.

        Raises:
            NotFoundError: If the metadata name is unknown.
            BadRequestError: If the metadata is read-only or the value is invalid.
        """
        putter = self._putters.get(name)
        if putter is None:
            if name in self._getters:
                raise BadRequestError(f'metadata "{name}" cannot be updated')
            raise NotFoundError(f'unknown metadata "{name}"')
        await putter(id, path, value)
        logger.info(f"Updated {name} of {id}")

    async def changes_published(
        self,
        user: Optional[TokenPayload],
        start: Optional[date] = None,
        stop: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[Published]:
        """List readable entities by publish time, newest first.

        Args:
            user: Caller; unreadable entities are skipped.
            start: First day included.
            stop: Last day included.
            limit: Maximum number of results.

        Returns:
            Publication records.
        """
        start_time = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
        stop_time = datetime.combine(stop, time.max, tzinfo=timezone.utc) if stop else None

        results = []
        acls: dict[Reference, bool] = {}
        for entity in await self.repo.published(start_time, stop_time):
            base = entity.ref.base()
            if base not in acls:
                base_entity = await self.repo.find_base_entity(base)
                acls[base] = acl_admits(base_entity.acl_read, user, self.admin_group)
            if not acls[base]:
                continue
            results.append(Published(id=str(entity.ref), publish_time=entity.upload_time))
            if limit is not None and len(results) >= limit:
                break
        return results

    # Metadata getters

    async def _meta_id(self, id: Reference, path: str) -> IdResponse:
        return IdResponse(
            id=str(id),
            user=id.user,
            series=id.series,
            name=id.name,
            revision=id.revision,
        )

    async def _meta_id_name(self, id: Reference, path: str) -> IdNameResponse:
        return IdNameResponse(name=id.name)

    async def _meta_id_user(self, id: Reference, path: str) -> IdUserResponse:
        return IdUserResponse(user=id.user)

    async def _meta_id_series(self, id: Reference, path: str) -> IdSeriesResponse:
        return IdSeriesResponse(series=id.series)

    async def _meta_id_revision(self, id: Reference, path: str) -> IdRevisionResponse:
        return IdRevisionResponse(revision=id.revision)

    async def _meta_revision_info(self, id: Reference, path: str) -> RevisionInfoResponse:
        revisions = await self.resolver.revision_info(id)
        return RevisionInfoResponse(revisions=[str(r) for r in revisions])

    async def _meta_archive_size(self, id: Reference, path: str) -> ArchiveSizeResponse:
        entity = await self.repo.find_entity(id)
        return ArchiveSizeResponse(size=entity.size)

    async def _meta_hash(self, id: Reference, path: str) -> HashResponse:
        entity = await self.repo.find_entity(id)
        return HashResponse(sum=entity.blob_hash)

    async def _meta_hash256(self, id: Reference, path: str) -> HashResponse:
        entity = await self.repo.find_entity(id)
        return HashResponse(sum=entity.blob_hash256)

    async def _meta_archive_upload_time(self, id: Reference, path: str) -> ArchiveUploadTimeResponse:
        entity = await self.repo.find_entity(id)
        return ArchiveUploadTimeResponse(upload_time=entity.upload_time)

    async def _meta_extra_info(self, id: Reference, path: str) -> Any:
        entity = await self.repo.find_entity(id)
        if not path:
            return entity.extra_info
        if path not in entity.extra_info:
            raise NotFoundError(f'extra-info "{path}" not found for "{id}"', reference=str(id))
        return entity.extra_info[path]

    async def _meta_perm(self, id: Reference, path: str) -> Any:
        base = await self.repo.find_base_entity(id)
        if path == "read":
            return base.acl_read
        if path == "write":
            return base.acl_write
        if path:
            raise NotFoundError(f'unknown permission "{path}"')
        return PermResponse(read=base.acl_read, write=base.acl_write)

    async def _meta_stats(self, id: Reference, path: str) -> StatsResponse:
        revision_key = entity_stats_key(id.series, id.name, id.user, id.revision, ARCHIVE_DOWNLOAD)
        all_key = entity_stats_key(id.series, id.name, id.user, -1, ARCHIVE_DOWNLOAD)
        counts = await self._download_counts(revision_key)
        return StatsResponse(
            archive_download_count=counts.total,
            archive_download=counts,
            archive_download_all_revisions=await self._download_counts(all_key),
        )

    async def _download_counts(self, key: list[str]) -> StatsCount:
        today = datetime.now(timezone.utc).date()

        async def since(days: Optional[int]) -> int:
            start = today - timedelta(days=days - 1) if days else None
            counters = await self.stats_repo.counters(CounterRequest(key=key, start=start))
            return sum(c.count for c in counters)

        return StatsCount(
            total=await since(None),
            day=await since(1),
            week=await since(7),
            month=await since(30),
        )

    # Metadata setters

    async def _put_extra_info(self, id: Reference, path: str, value: Any) -> None:
        if path:
            _check_extra_info_key(path)
            await self.repo.update_extra_info(id, {path: value})
            return
        if not isinstance(value, dict):
            raise BadRequestError("extra-info must be a JSON object")
        for key in value:
            _check_extra_info_key(key)
        await self.repo.update_extra_info(id, value)

    async def _put_perm(self, id: Reference, path: str, value: Any) -> None:
        if path:
            if path not in PERM_KEYS:
                raise NotFoundError(f'unknown permission "{path}"')
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise BadRequestError(f"perm/{path} must be a list of strings")
            await self.repo.set_perms(id, **{path: value})
            return
        try:
            perms = PermRequest.model_validate(value)
        except ValidationError as e:
            raise BadRequestError(f"invalid permissions: {e}") from e
        await self.repo.set_perms(id, read=perms.read, write=perms.write)

"""Entity data models and API response shapes."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from charmcatalog.models.reference import Reference

# ACL entry that admits every caller.
EVERYONE = "everyone"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Entity:
    """A single published charm or bundle revision.

    Attributes:
        ref: Fully qualified reference.
        size: Archive size in bytes.
        blob_hash: SHA384 hash of the archive.
        blob_hash256: SHA256 hash of the archive.
        upload_time: When the archive was published.
        extra_info: Arbitrary JSON values attached by clients.
    """

    ref: Reference
    size: int = 0
    blob_hash: str = ""
    blob_hash256: str = ""
    upload_time: datetime = field(default_factory=_utcnow)
    extra_info: dict[str, Any] = field(default_factory=dict)


@dataclass
class BaseEntity:
    """Data shared by every revision and series of a charm or bundle.

    Attributes:
        ref: Base reference (no series, no revision).
        acl_read: Users or groups allowed to read.
        acl_write: Users or groups allowed to write.
    """

    ref: Reference
    acl_read: list[str] = field(default_factory=lambda: [EVERYONE])
    acl_write: list[str] = field(default_factory=list)


# Pydantic Models for API


class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class IdResponse(_Response):
    """Response for id/meta/id."""

    id: str = Field(alias="Id")
    user: str = Field(alias="User")
    series: str = Field(alias="Series")
    name: str = Field(alias="Name")
    revision: int = Field(alias="Revision")


class IdNameResponse(_Response):
    name: str = Field(alias="Name")


class IdUserResponse(_Response):
    user: str = Field(alias="User")


class IdSeriesResponse(_Response):
    series: str = Field(alias="Series")


class IdRevisionResponse(_Response):
    revision: int = Field(alias="Revision")


class RevisionInfoResponse(_Response):
    """Response for id/meta/revision-info: same-series revisions, newest first."""

    revisions: list[str] = Field(alias="Revisions")


class ExpandedId(_Response):
    id: str = Field(alias="Id")


class ArchiveSizeResponse(_Response):
    size: int = Field(alias="Size")


class HashResponse(_Response):
    sum: str = Field(alias="Sum")


class ArchiveUploadTimeResponse(_Response):
    upload_time: datetime = Field(alias="UploadTime")


class PermResponse(_Response):
    read: list[str] = Field(alias="Read")
    write: list[str] = Field(alias="Write")


class PermRequest(_Response):
    read: list[str] = Field(default_factory=list, alias="Read")
    write: list[str] = Field(default_factory=list, alias="Write")


class StatsCount(_Response):
    total: int = Field(alias="Total")
    day: int = Field(alias="Day")
    week: int = Field(alias="Week")
    month: int = Field(alias="Month")


class StatsResponse(_Response):
    """Response for id/meta/stats."""

    archive_download_count: int = Field(alias="ArchiveDownloadCount")
    archive_download: StatsCount = Field(alias="ArchiveDownload")
    archive_download_all_revisions: StatsCount = Field(alias="ArchiveDownloadAllRevisions")


class Published(_Response):
    id: str = Field(alias="Id")
    publish_time: datetime = Field(alias="PublishTime")


class Statistic(_Response):
    """One element of a stats/counter response."""

    key: Optional[str] = Field(default=None, alias="Key")
    day: Optional[date] = Field(default=None, alias="Date")
    count: int = Field(alias="Count")


class StatsUpdateEntry(_Response):
    timestamp: datetime = Field(alias="Timestamp")
    charm_reference: str = Field(alias="CharmReference")


class StatsUpdateRequest(_Response):
    entries: list[StatsUpdateEntry] = Field(default_factory=list, alias="Entries")


class WhoAmIResponse(_Response):
    user: str = Field(alias="User")
    groups: list[str] = Field(alias="Groups")

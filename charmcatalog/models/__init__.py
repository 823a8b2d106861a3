"""Data models for the charm catalog."""

from charmcatalog.models.entity import (
    EVERYONE,
    ArchiveSizeResponse,
    ArchiveUploadTimeResponse,
    BaseEntity,
    Entity,
    ExpandedId,
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
    Statistic,
    StatsCount,
    StatsResponse,
    StatsUpdateEntry,
    StatsUpdateRequest,
    WhoAmIResponse,
)
from charmcatalog.models.reference import BUNDLE_SERIES, Reference

__all__ = [
    # Reference
    "BUNDLE_SERIES",
    "Reference",
    # Entities
    "EVERYONE",
    "BaseEntity",
    "Entity",
    # Responses
    "ArchiveSizeResponse",
    "ArchiveUploadTimeResponse",
    "ExpandedId",
    "HashResponse",
    "IdNameResponse",
    "IdResponse",
    "IdRevisionResponse",
    "IdSeriesResponse",
    "IdUserResponse",
    "PermRequest",
    "PermResponse",
    "Published",
    "RevisionInfoResponse",
    "Statistic",
    "StatsCount",
    "StatsResponse",
    "StatsUpdateEntry",
    "StatsUpdateRequest",
    "WhoAmIResponse",
]

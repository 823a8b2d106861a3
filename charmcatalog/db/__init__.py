"""Persistence layer."""

from charmcatalog.db.database import Database

__all__ = ["Database"]

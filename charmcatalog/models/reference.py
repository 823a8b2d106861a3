"""Charm and bundle references."""

import re
import dataclasses
from dataclasses import dataclass
from typing import Any

from charmcatalog.exceptions import BadRequestError

SCHEMA = "cs"

# Pseudo-series used by bundles.
BUNDLE_SERIES = "bundle"

_VALID_USER = re.compile(r"[a-z0-9][a-zA-Z0-9+.-]+")
_VALID_SERIES = re.compile(r"[a-z]+([a-z0-9]+)?")
_VALID_NAME = re.compile(r"[a-z][a-z0-9]*(-[a-z0-9]*[a-z][a-z0-9]*)*")
_VALID_REVISION = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Reference:
    """A possibly partial charm or bundle identifier.

    Attributes:
        name: Charm or bundle name.
        user: Owner namespace, empty when absent.
        series: Target series or "bundle", empty when unspecified.
        revision: Revision number, -1 when unspecified.
    """

    name: str
    user: str = ""
    series: str = ""
    revision: int = -1

    @classmethod
    def parse(cls, text: str) -> "Reference":
        """Parse a reference of the form [cs:][~user/][series/]name[-revision].

        Args:
            text: Reference string.

        Returns:
            Parsed reference.

        Raises:
            BadRequestError: If the string is not a valid reference.
        """
        rest = text.strip()
        if ":" in rest:
            schema, rest = rest.split(":", 1)
            if schema != SCHEMA:
                raise BadRequestError(f'charm or bundle URL has invalid schema: "{text}"', reference=text)

        parts = rest.split("/")
        user = ""
        if parts[0].startswith("~"):
            user = parts[0][1:]
            if not _VALID_USER.fullmatch(user):
                raise BadRequestError(f'charm or bundle URL has invalid user name: "{text}"', reference=text)
            parts = parts[1:]

        if len(parts) == 0 or len(parts) > 2:
            raise BadRequestError(f'charm or bundle URL has invalid form: "{text}"', reference=text)

        series = ""
        if len(parts) == 2:
            series = parts[0]
            if not _VALID_SERIES.fullmatch(series):
                raise BadRequestError(f'charm or bundle URL has invalid series: "{text}"', reference=text)

        name = parts[-1]
        revision = -1
        head, sep, tail = name.rpartition("-")
        if sep and _VALID_REVISION.fullmatch(tail):
            name, revision = head, int(tail)

        if not _VALID_NAME.fullmatch(name):
            raise BadRequestError(f'URL has invalid charm or bundle name: "{text}"', reference=text)

        return cls(name=name, user=user, series=series, revision=revision)

    @property
    def is_fully_qualified(self) -> bool:
        """Whether both series and revision are set."""
        return self.series != "" and self.revision != -1

    @property
    def is_bundle(self) -> bool:
        return self.series == BUNDLE_SERIES

    def base(self) -> "Reference":
        """Return the base identity: this reference without series or revision."""
        return dataclasses.replace(self, series="", revision=-1)

    def replace(self, **changes: Any) -> "Reference":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def path(self) -> str:
        """Return the reference without its schema, as used in URL paths."""
        parts = []
        if self.user:
            parts.append(f"~{self.user}")
        if self.series:
            parts.append(self.series)
        name = self.name
        if self.revision != -1:
            name = f"{name}-{self.revision}"
        parts.append(name)
        return "/".join(parts)

    def __str__(self) -> str:
        return f"{SCHEMA}:{self.path()}"

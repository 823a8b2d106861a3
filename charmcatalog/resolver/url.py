"""Resolution of partial charm and bundle references."""

import logging
from typing import Protocol

from charmcatalog.exceptions import CatalogError, InternalError, NotFoundError, no_matching_entity
from charmcatalog.models.reference import Reference
from charmcatalog.resolver.preference import SeriesPreference

logger = logging.getLogger(__name__)


class CandidateProvider(Protocol):
    """Source of stored references sharing a base identity."""

    async def expand_url(self, base: Reference) -> list[Reference]:
        """Return every stored reference with the same user and name as base.

        An empty list means nothing is stored; errors are for
        infrastructure failures only.
        """
        ...


class URLResolver:
    """Resolves partial references against the candidate provider.

    Attributes:
        provider: Candidate set provider.
        preference: Ordering used to pick among candidates.
    """

    def __init__(
        self,
        provider: CandidateProvider,
        preference: SeriesPreference | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            provider: Candidate set provider.
            preference: Candidate ordering (default LTS table when omitted).
        """
        self.provider = provider
        self.preference = preference or SeriesPreference()

    async def _candidates(self, ref: Reference) -> list[Reference]:
        try:
            return await self.provider.expand_url(ref.base())
        except CatalogError:
            raise
        except Exception as e:
            logger.error(f"Cannot expand {ref}: {e}")
            raise InternalError(f"cannot expand {ref}: {e}", reference=str(ref)) from e

    async def resolve(self, ref: Reference) -> Reference:
        """Fill in a missing series and/or revision.

        Fully qualified references are returned unchanged without
        consulting the store, even if nothing is stored under them.

        Args:
            ref: Reference as given by the client.

        Returns:
            Fully qualified reference.

        Raises:
            NotFoundError: If nothing shares the reference's base identity.
            InternalError: If the candidate lookup fails.
        """
        if ref.is_fully_qualified:
            return ref

        candidates = await self._candidates(ref)
        if ref.series:
            candidates = [c for c in candidates if c.series == ref.series]
        if ref.revision != -1:
            candidates = [c for c in candidates if c.revision == ref.revision]
        if not candidates:
            raise no_matching_entity(ref)

        resolved = self.preference.select_best(candidates)
        logger.debug(f"Resolved {ref} to {resolved}")
        return resolved

    async def revision_info(self, id: Reference) -> list[Reference]:
        """List the revisions sharing id's exact series, newest first.

        Args:
            id: Fully qualified reference.

        Returns:
            References ordered by descending revision.

        Raises:
            NotFoundError: If the base identity or the series has no entities.
        """
        candidates = await self._candidates(id)
        if not candidates:
            raise no_matching_entity(id)

        siblings = sorted(
            (c for c in candidates if c.series == id.series),
            key=lambda c: c.revision,
            reverse=True,
        )
        if not siblings:
            raise NotFoundError(
                f'no revisions of "{id}" found in series "{id.series}"',
                reference=str(id),
            )
        return siblings

    async def expand_id(self, id: Reference) -> list[Reference]:
        """List every reference sharing id's base identity.

        Args:
            id: Reference whose base identity is expanded.

        Returns:
            References ordered by series then revision, both descending.

        Raises:
            NotFoundError: If nothing shares the base identity.
        """
        candidates = await self._candidates(id)
        if not candidates:
            raise no_matching_entity(id)
        return sorted(candidates, key=lambda c: (c.series, c.revision), reverse=True)

"""Preference ordering between candidate references."""

from typing import Iterable

from charmcatalog.models.reference import Reference

DEFAULT_LTS_SERIES = frozenset({"lucid", "precise", "trusty"})


class SeriesPreference:
    """Orders references sharing a base identity.

    Rules, first decisive one wins:

    1. In the same series, the higher revision wins.
    2. Any real series wins over the "bundle" pseudo-series, so a bare
       name that matches both a charm and a bundle picks the charm.
    3. An LTS series wins over a non-LTS series.
    4. Otherwise the lexically greater series wins. This is only a stable
       tie-break and carries no meaning.

    Attributes:
        lts_series: Series names classified as LTS.
    """

    def __init__(self, lts_series: Iterable[str] = DEFAULT_LTS_SERIES) -> None:
        """Initialize the preference.

        Args:
            lts_series: Series names classified as LTS.
        """
        self.lts_series = frozenset(lts_series)

    def is_lts(self, series: str) -> bool:
        return series in self.lts_series

    def is_preferred(self, a: Reference, b: Reference) -> bool:
        """Report whether a should be chosen over b.

        Args:
            a: Candidate reference.
            b: Reference to compare against.

        Returns:
            True if a is preferred to b.
        """
        if a.series == b.series:
            return a.revision > b.revision
        if a.is_bundle or b.is_bundle:
            return b.is_bundle
        if self.is_lts(a.series) != self.is_lts(b.series):
            return self.is_lts(a.series)
        return a.series > b.series

    def select_best(self, candidates: Iterable[Reference]) -> Reference:
        """Select the most preferred reference.

        Args:
            candidates: Non-empty collection of references.

        Returns:
            The preferred reference.

        Raises:
            ValueError: If candidates is empty.
        """
        best = None
        for candidate in candidates:
            if best is None or self.is_preferred(candidate, best):
                best = candidate
        if best is None:
            raise ValueError("select_best requires at least one candidate")
        return best

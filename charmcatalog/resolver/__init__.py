"""Reference resolution module for the charm catalog."""

from charmcatalog.resolver.preference import DEFAULT_LTS_SERIES, SeriesPreference
from charmcatalog.resolver.url import CandidateProvider, URLResolver

__all__ = [
    "DEFAULT_LTS_SERIES",
    "SeriesPreference",
    "CandidateProvider",
    "URLResolver",
]

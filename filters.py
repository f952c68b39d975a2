"""Search, filtering, facets and summary statistics over loaded publications.

Every function here is a pure function of the record set it is given.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from models import Publication


@dataclass(frozen=True, slots=True)
class Filters:
    """Discrete filter selections; None means "any"."""

    domain: str | None = None
    system: str | None = None
    year: int | None = None

    def is_empty(self) -> bool:
        return self.domain is None and self.system is None and self.year is None


@dataclass(frozen=True, slots=True)
class Facets:
    """Distinct selectable values across the full record set."""

    domains: tuple[str, ...]
    systems: tuple[str, ...]
    years: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Stats:
    total: int
    domain_count: int
    avg_duration_days: int


def searchable_text(publication: Publication) -> str:
    """Return the lower-cased text a search term is matched against."""
    parts = [publication.title or "", publication.abstract or "", " ".join(publication.key_findings)]
    return " ".join(parts).lower()


def search(publications: Sequence[Publication], term: str) -> list[Publication]:
    """Return publications whose title, abstract or findings contain term.

    Matching is a case-insensitive substring test. An empty (or blank) term
    returns every publication. Input order is preserved.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return list(publications)
    return [pub for pub in publications if needle in searchable_text(pub)]


def matches_filters(publication: Publication, filters: Filters) -> bool:
    """Return True if the publication satisfies every active criterion."""
    if filters.domain is not None and filters.domain not in publication.research_domains:
        return False
    if filters.system is not None and filters.system not in publication.biological_systems:
        return False
    if filters.year is not None and publication.publication_year != filters.year:
        return False
    return True


def filter_publications(publications: Sequence[Publication], filters: Filters) -> list[Publication]:
    """Return publications passing all active filters, in input order."""
    if filters.is_empty():
        return list(publications)
    return [pub for pub in publications if matches_filters(pub, filters)]


def facets(publications: Iterable[Publication]) -> Facets:
    domains: set[str] = set()
    systems: set[str] = set()
    years: set[int] = set()

    for pub in publications:
        domains.update(pub.research_domains)
        systems.update(pub.biological_systems)
        if pub.publication_year is not None:
            years.add(pub.publication_year)

    return Facets(
        domains=tuple(sorted(domains)),
        systems=tuple(sorted(systems)),
        years=tuple(sorted(years, reverse=True)),
    )


def stats(publications: Sequence[Publication]) -> Stats:
    """Compute the summary counters shown above the results."""
    domains: set[str] = set()
    for pub in publications:
        domains.update(pub.research_domains)

    durations = [
        pub.experiment_duration_days
        for pub in publications
        if pub.experiment_duration_days is not None
    ]
    avg = _round_half_up(sum(durations) / len(durations)) if durations else 0

    return Stats(total=len(publications), domain_count=len(domains), avg_duration_days=avg)


def _round_half_up(value: float) -> int:
    # round() would round 2.5 down to 2.
    return math.floor(value + 0.5)

"""HTML rendering and pagination for the catalog page."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from html import escape
from typing import TYPE_CHECKING, Sequence

from filters import Facets, Filters, Stats, facets, stats
from models import STATUS_ERROR, STATUS_LOADING, Publication

if TYPE_CHECKING:
    from app_state import AppState

ITEMS_PER_PAGE = 10
ABSTRACT_PREVIEW_CHARS = 300

UNTITLED = "Untitled Publication"
NO_ABSTRACT = "No abstract available."
NO_RESULTS = "No publications found matching your criteria."
LOADING_MESSAGE = "Loading publications..."
LOAD_ERROR_MESSAGE = "Error loading publications."

_WORD_START = re.compile(r"\b\w")


@dataclass(frozen=True, slots=True)
class Page:
    """One page-sized window of matches plus pager metadata."""

    items: tuple[Publication, ...]
    number: int
    page_count: int
    total: int

    @property
    def is_first_page(self) -> bool:
        return self.number <= 1

    @property
    def is_last_page(self) -> bool:
        return self.number >= self.page_count

    @property
    def is_empty(self) -> bool:
        return not self.items


def page_count(total: int, page_size: int = ITEMS_PER_PAGE) -> int:
    """Number of pages for total matches; never less than 1."""
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(total / page_size))


def paginate(
    matches: Sequence[Publication],
    page_number: int,
    page_size: int = ITEMS_PER_PAGE,
) -> Page:
    """Slice out one page of matches.

    Out-of-range page numbers are clamped to the first or last page.
    """
    pages = page_count(len(matches), page_size)
    number = min(max(page_number, 1), pages)
    start = (number - 1) * page_size
    return Page(
        items=tuple(matches[start:start + page_size]),
        number=number,
        page_count=pages,
        total=len(matches),
    )


def format_tag(tag: str) -> str:
    """Turn a stored tag like "plant_biology" into "Plant Biology"."""
    return _WORD_START.sub(lambda m: m.group().upper(), tag.replace("_", " "))


def truncate_abstract(abstract: str, limit: int = ABSTRACT_PREVIEW_CHARS) -> str:
    if len(abstract) <= limit:
        return abstract
    return f"{abstract[:limit]}..."


def render_card(publication: Publication) -> str:
    """Render one publication as a self-contained card."""
    badges = [
        *(_badge("badge-domain", format_tag(tag)) for tag in publication.research_domains),
        *(_badge("badge-system", format_tag(tag)) for tag in publication.biological_systems),
    ]
    if publication.publication_year is not None:
        badges.append(_badge("badge-year", str(publication.publication_year)))
    if publication.experiment_duration_days is not None:
        badges.append(_badge("badge-duration", f"{publication.experiment_duration_days} days"))

    abstract = truncate_abstract(publication.abstract) if publication.abstract else NO_ABSTRACT

    findings = ""
    if publication.key_findings:
        items = "".join(f"<li>{escape(finding)}</li>" for finding in publication.key_findings)
        findings = f'<div class="findings"><h4>Key Findings:</h4><ul>{items}</ul></div>'

    return (
        '<article class="publication-card">'
        '<div class="publication-header"><h2 class="publication-title">'
        f'<a href="{escape(publication.link or "#")}" target="_blank" rel="noopener noreferrer">'
        f"{escape(publication.title or UNTITLED)}</a>"
        "</h2></div>"
        f'<div class="badges">{"".join(badges)}</div>'
        f'<p class="publication-abstract">{escape(abstract)}</p>'
        f"{findings}"
        "</article>"
    )


def render_results(page: Page) -> str:
    """Render the cards of a page, or the empty-state message."""
    if page.is_empty:
        return f'<div id="results" class="results"><div class="empty-state">{NO_RESULTS}</div></div>'
    cards = "".join(render_card(pub) for pub in page.items)
    return f'<div id="results" class="results">{cards}</div>'


def render_pager(page: Page) -> str:
    prev_disabled = " disabled" if page.is_first_page else ""
    next_disabled = " disabled" if page.is_last_page else ""
    return (
        '<nav class="pagination">'
        f'<button id="prevBtn" type="button"{prev_disabled}>Previous</button>'
        f'<span id="pageInfo">Page {page.number} of {page.page_count}</span>'
        f'<button id="nextBtn" type="button"{next_disabled}>Next</button>'
        f'<span id="resultCount">{page.total} {"result" if page.total == 1 else "results"}</span>'
        "</nav>"
    )


def render_filters(facet_values: Facets, filters: Filters) -> str:
    """Render the domain, system and year selectors."""
    return "".join([
        _select("domainFilter", "All Domains", facet_values.domains, filters.domain, format_tag),
        _select("systemFilter", "All Systems", facet_values.systems, filters.system, format_tag),
        _select("yearFilter", "All Years", facet_values.years, filters.year, str),
    ])


def render_stats(summary: Stats) -> str:
    return (
        '<div class="stats">'
        f'<div class="stat"><span id="totalCount">{summary.total}</span> Publications</div>'
        f'<div class="stat"><span id="domainCount">{summary.domain_count}</span> Research Domains</div>'
        f'<div class="stat"><span id="avgDuration">{summary.avg_duration_days}</span> Avg. Duration (days)</div>'
        "</div>"
    )


def render_document(state: AppState) -> str:
    """Render the whole catalog page for an AppState."""
    controls = (
        '<div class="controls">'
        f'<input id="searchInput" type="search" placeholder="Search publications..." '
        f'value="{escape(state.search_term)}">'
        '<button id="searchBtn" type="button">Search</button>'
        f"{render_filters(facets(state.publications), state.filters)}"
        '<button id="resetFilters" type="button">Reset</button>'
        "</div>"
    )

    if state.status == STATUS_LOADING:
        body = f'<div id="loading" class="loading">{LOADING_MESSAGE}</div>'
    elif state.status == STATUS_ERROR:
        detail = f" {escape(state.error)}" if state.error else ""
        body = f'<div id="loading" class="loading error"><p>{LOAD_ERROR_MESSAGE}{detail}</p></div>'
    else:
        page = paginate(state.matches, state.page)
        body = render_results(page) + render_pager(page)

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en"><head><meta charset="utf-8">'
        "<title>Publication Catalog</title></head><body>"
        '<header><h1>Publication Catalog</h1></header>'
        f"{render_stats(stats(state.publications))}"
        f"{controls}"
        f"<main>{body}</main>"
        "</body></html>\n"
    )


def _badge(css_class: str, text: str) -> str:
    return f'<span class="badge {css_class}">{escape(text)}</span>'


def _select(element_id: str, any_label: str, options, selected, label) -> str:
    rendered = [f'<option value="">{any_label}</option>']
    for option in options:
        marker = " selected" if option == selected else ""
        rendered.append(
            f'<option value="{escape(str(option))}"{marker}>{escape(label(option))}</option>'
        )
    return f'<select id="{element_id}">{"".join(rendered)}</select>'

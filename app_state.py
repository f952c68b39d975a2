"""Application state and the single update function driving it.

User interactions are expressed as action values and folded through
update(). Search and filter selections are independent interactions: each
recomputes the matches from the full record set using only its own inputs.
A search leaves the filter selections in place, so the next filter change
reads all of them again; a filter change clears the search term.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from filters import Filters, filter_publications, search
from models import STATUS_ERROR, STATUS_LOADING, STATUS_READY, Publication
from presenter import page_count

LOGGER = logging.getLogger(__name__)

FILTER_FIELDS: frozenset[str] = frozenset({"domain", "system", "year"})


@dataclass(frozen=True, slots=True)
class AppState:
    status: str = STATUS_LOADING
    error: str | None = None
    publications: tuple[Publication, ...] = ()
    matches: tuple[Publication, ...] = ()
    search_term: str = ""
    filters: Filters = field(default_factory=Filters)
    page: int = 1


@dataclass(frozen=True, slots=True)
class Loaded:
    publications: tuple[Publication, ...]


@dataclass(frozen=True, slots=True)
class LoadFailed:
    message: str


@dataclass(frozen=True, slots=True)
class Search:
    term: str


@dataclass(frozen=True, slots=True)
class SetFilter:
    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class Reset:
    pass


@dataclass(frozen=True, slots=True)
class ChangePage:
    delta: int


Action = Loaded | LoadFailed | Search | SetFilter | Reset | ChangePage


def update(state: AppState, action: Action) -> AppState:
    """Return the state after applying one action."""
    if isinstance(action, Loaded):
        publications = tuple(action.publications)
        return AppState(status=STATUS_READY, publications=publications, matches=publications)

    if isinstance(action, LoadFailed):
        return AppState(status=STATUS_ERROR, error=action.message)

    if not isinstance(action, (Search, SetFilter, Reset, ChangePage)):
        raise TypeError(f"Unknown action: {action!r}")

    if state.status != STATUS_READY:
        LOGGER.debug("Ignoring %r while status=%s", action, state.status)
        return state

    if isinstance(action, Search):
        term = action.term.strip()
        return dataclasses.replace(
            state,
            search_term=term,
            matches=tuple(search(state.publications, term)),
            page=1,
        )

    if isinstance(action, SetFilter):
        filters = dataclasses.replace(state.filters, **{action.field: _filter_value(action.field, action.value)})
        return dataclasses.replace(
            state,
            search_term="",
            filters=filters,
            matches=tuple(filter_publications(state.publications, filters)),
            page=1,
        )

    if isinstance(action, Reset):
        return dataclasses.replace(
            state,
            search_term="",
            filters=Filters(),
            matches=state.publications,
            page=1,
        )

    target = state.page + action.delta
    if target < 1 or target > page_count(len(state.matches)):
        return state
    return dataclasses.replace(state, page=target)


def dispatch(state: AppState, actions: Iterable[Action]) -> AppState:
    """Fold a sequence of actions through update()."""
    for action in actions:
        state = update(state, action)
    return state


def _filter_value(name: str, value: Any) -> Any:
    if name not in FILTER_FIELDS:
        raise ValueError(f"Unknown filter field: {name!r}")
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if name == "year":
        return int(value)
    return str(value).strip()

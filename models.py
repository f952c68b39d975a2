"""Shared typed models for the catalog browser."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

STATUS_LOADING = "loading"
STATUS_READY = "ready"
STATUS_ERROR = "error"


@dataclass(frozen=True, slots=True)
class Publication:
    """Normalized publication record, resolved once at load time."""

    publication_id: str
    title: str | None = None
    abstract: str | None = None
    link: str | None = None
    publication_year: int | None = None
    experiment_duration_days: int | float | None = None
    research_domains: tuple[str, ...] = ()
    biological_systems: tuple[str, ...] = ()
    key_findings: tuple[str, ...] = ()
    created_at: datetime | None = None
    # Remaining stored fields, kept verbatim.
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

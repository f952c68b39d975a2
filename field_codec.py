"""Normalization of stored publication fields.

Three fields (research_domains, biological_systems, key_findings) may be
stored either as arrays or as JSON-encoded strings. Each one is classified
into a small sum type and resolved once, so the query and rendering code only
ever sees tuples of strings.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from json import JSONDecodeError
from typing import Any, Mapping

from errors import DecodeError
from models import Publication

LOGGER = logging.getLogger(__name__)

SEQUENCE_FIELDS: tuple[str, ...] = ("research_domains", "biological_systems", "key_findings")
_KNOWN_FIELDS: frozenset[str] = frozenset({
    "title",
    "abstract",
    "link",
    "publication_year",
    "experiment_duration_days",
    "created_at",
    *SEQUENCE_FIELDS,
})


@dataclass(frozen=True, slots=True)
class Decoded:
    """Field already stored as a sequence."""

    values: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Raw:
    """Field stored as a string that still needs decoding."""

    text: str


@dataclass(frozen=True, slots=True)
class Absent:
    """Field not stored at all."""


EncodedField = Decoded | Raw | Absent


def classify(value: Any) -> EncodedField:
    """Classify a stored value into Decoded, Raw or Absent."""
    if value is None:
        return Absent()
    if isinstance(value, str):
        return Raw(value)
    if isinstance(value, (list, tuple)):
        return Decoded(tuple(value))
    raise DecodeError(f"unsupported encoded field type: {type(value).__name__}")


def decode_raw(text: str) -> tuple[str, ...]:
    """Decode a JSON-encoded array of strings.

    A blank string decodes to an empty tuple. Invalid JSON, or JSON that is
    not an array, raises DecodeError.
    """
    if not text.strip():
        return ()
    try:
        parsed = json.loads(text)
    except JSONDecodeError as exc:
        raise DecodeError(f"invalid JSON: {exc.msg}") from exc
    if not isinstance(parsed, list):
        raise DecodeError(f"expected a JSON array, got {type(parsed).__name__}")
    return _clean_items(parsed)


def resolve_sequence(field_name: str, value: Any) -> tuple[str, ...]:
    """Resolve one stored field to a tuple of strings, never raising.

    Decode failures are logged as warnings and fall back to an empty tuple.
    """
    try:
        encoded = classify(value)
        if isinstance(encoded, Absent):
            return ()
        if isinstance(encoded, Raw):
            return decode_raw(encoded.text)
        return _clean_items(encoded.values)
    except DecodeError as exc:
        LOGGER.warning("Invalid %s value, using empty fallback: %r (%s)", field_name, value, exc)
        return ()


def to_publication(publication_id: str, data: Mapping[str, Any]) -> Publication:
    """Build a Publication from a plain mapping of stored fields."""
    return Publication(
        publication_id=publication_id,
        title=_as_str(data.get("title")),
        abstract=_as_str(data.get("abstract")),
        link=_as_str(data.get("link")),
        publication_year=_as_int(data.get("publication_year")),
        experiment_duration_days=_as_number(data.get("experiment_duration_days")),
        research_domains=resolve_sequence("research_domains", data.get("research_domains")),
        biological_systems=resolve_sequence("biological_systems", data.get("biological_systems")),
        key_findings=resolve_sequence("key_findings", data.get("key_findings")),
        created_at=_as_datetime(data.get("created_at")),
        extra={key: value for key, value in data.items() if key not in _KNOWN_FIELDS},
    )


def _clean_items(values: Any) -> tuple[str, ...]:
    cleaned: list[str] = []
    for item in values:
        if isinstance(item, str) and item.strip():
            cleaned.append(item.strip())
        elif item is not None:
            LOGGER.debug("Dropping non-string sequence item: %r", item)
    return tuple(cleaned)


def _as_str(value: Any) -> str | None:
    # Stored text is kept as is; only blank strings count as absent.
    return value if isinstance(value, str) and value.strip() else None


def _as_int(value: Any) -> int | None:
    # Zero counts as absent, as do booleans.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value or None
    if isinstance(value, float) and value.is_integer():
        return int(value) or None
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip()) or None
    if value is not None:
        LOGGER.debug("Ignoring non-integer value: %r", value)
    return None


def _as_number(value: Any) -> int | float | None:
    # Fractional durations are kept; integral ones are normalized to int.
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return _as_int(value)
    if isinstance(value, float) and math.isfinite(value) and not value.is_integer():
        return value
    return _as_int(value)


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)

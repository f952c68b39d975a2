"""Cloud Firestore ingestion for the publications collection."""

from __future__ import annotations

import logging
import os
import time
from typing import Any

import requests

from errors import ConfigError, LoadError
from field_codec import to_publication
from models import Publication

FIRESTORE_BASE_URL = os.getenv("FIRESTORE_BASE_URL", "https://firestore.googleapis.com/v1")
DEFAULT_COLLECTION = os.getenv("FIRESTORE_COLLECTION", "publications")
ORDER_FIELD = "created_at"
REQUEST_TIMEOUT_SECONDS = 30
MAX_RETRIES = 3

LOGGER = logging.getLogger(__name__)


def fetch_publications(collection: str | None = None) -> list[Publication]:
    """Fetch every document of the collection, newest first.

    The whole collection is read with one runQuery call ordered by
    created_at descending. Documents repeating an already seen identifier
    are dropped.

    Raises:
        LoadError: the store was unreachable, rejected the query, or
            returned a payload that is not a runQuery result.
        ConfigError: FIRESTORE_PROJECT_ID is not set.
    """
    collection = collection or DEFAULT_COLLECTION
    url, params = _firestore_context()
    payload = {
        "structuredQuery": {
            "from": [{"collectionId": collection}],
            "orderBy": [{"field": {"fieldPath": ORDER_FIELD}, "direction": "DESCENDING"}],
        }
    }

    response = _request_with_backoff(url=url, params=params, json_payload=payload)
    try:
        body = response.json()
    except ValueError as exc:
        raise LoadError(f"Firestore returned a non-JSON body: {exc}") from exc

    documents = _parse_run_query_payload(body)

    publications: list[Publication] = []
    seen_ids: set[str] = set()
    for document in documents:
        publication_id = _document_id(document)
        if not publication_id:
            LOGGER.warning("Skipping document without a name: %r", document)
            continue
        if publication_id in seen_ids:
            LOGGER.warning("Skipping duplicate publication_id=%s", publication_id)
            continue
        seen_ids.add(publication_id)
        publications.append(to_publication(publication_id, decode_fields(document.get("fields") or {})))

    LOGGER.info(
        "Firestore fetch: collection=%s documents=%s returned=%s",
        collection,
        len(documents),
        len(publications),
    )
    return publications


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert a Firestore `fields` map into plain Python values."""
    return {name: decode_value(value) for name, value in fields.items()}


def decode_value(value: Any) -> Any:
    """Convert one Firestore typed value into a plain Python value."""
    if not isinstance(value, dict):
        return None
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        # REST encodes int64 as a decimal string.
        try:
            return int(value["integerValue"])
        except (TypeError, ValueError):
            return None
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "timestampValue" in value:
        return value["timestampValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "arrayValue" in value:
        return [decode_value(item) for item in (value["arrayValue"] or {}).get("values", [])]
    if "mapValue" in value:
        return decode_fields((value["mapValue"] or {}).get("fields", {}))
    return None


def _parse_run_query_payload(payload: Any) -> list[dict[str, Any]]:
    """Extract documents from a runQuery response."""
    if not isinstance(payload, list):
        raise LoadError("Unexpected runQuery payload shape: expected a list")

    documents: list[dict[str, Any]] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        if "error" in item:
            raise LoadError(f"Firestore query rejected: {item['error']}")
        document = item.get("document")
        # An empty result still carries one element with only readTime.
        if isinstance(document, dict):
            documents.append(document)
    return documents


def _document_id(document: dict[str, Any]) -> str | None:
    name = document.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    return name.rstrip("/").rsplit("/", 1)[-1]


def _firestore_context() -> tuple[str, dict[str, str]]:
    project_id = os.getenv("FIRESTORE_PROJECT_ID")
    if not project_id:
        raise ConfigError("FIRESTORE_PROJECT_ID environment variable is required")
    database_id = os.getenv("FIRESTORE_DATABASE_ID", "(default)")

    url = f"{FIRESTORE_BASE_URL}/projects/{project_id}/databases/{database_id}/documents:runQuery"
    params: dict[str, str] = {}
    api_key = os.getenv("FIRESTORE_API_KEY")
    if api_key:
        params["key"] = api_key
    return url, params


def _request_with_backoff(
    *,
    url: str,
    params: dict[str, str],
    json_payload: dict[str, Any],
) -> requests.Response:
    """POST the query, backing off only when the store rate-limits us."""
    delay_seconds = 1.0

    for attempt in range(1, MAX_RETRIES + 1):
        try:
            response = requests.post(
                url,
                params=params,
                json=json_payload,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            raise LoadError(f"Firestore request failed: {exc}") from exc

        if response.status_code == 429 and attempt < MAX_RETRIES:
            LOGGER.warning("Firestore rate limited (attempt %s), retrying in %.1fs", attempt, delay_seconds)
            time.sleep(delay_seconds)
            delay_seconds *= 2
            continue

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise LoadError(f"Firestore query failed: {exc} {_error_text(response)}".rstrip()) from exc
        return response

    raise LoadError("Firestore query failed: rate limited after retries")


def _error_text(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or ""
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", ""))
    return ""

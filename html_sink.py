"""HTML file sink for the rendered catalog page."""

from __future__ import annotations

import logging
import os
from pathlib import Path

CATALOG_OUTPUT_PATH = os.getenv("CATALOG_OUTPUT_PATH", "catalog.html")

LOGGER = logging.getLogger(__name__)


def write_page(document: str, output_path: str | Path | None = None) -> Path:
    """Write the rendered document, replacing any previous page.

    Args:
        document:    Full HTML document.
        output_path: Destination; defaults to CATALOG_OUTPUT_PATH.
    """
    path = Path(output_path or CATALOG_OUTPUT_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document, encoding="utf-8")

    LOGGER.info("Wrote catalog page (%s bytes) to %s", len(document.encode("utf-8")), path)
    return path

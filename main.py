"""CLI entrypoint for the publication catalog browser."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from app_state import Action, AppState, ChangePage, Loaded, LoadFailed, Search, SetFilter, dispatch
from errors import CatalogError
from firestore_feed import fetch_publications
from html_sink import write_page
from models import STATUS_ERROR
from presenter import render_document


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Render the Firestore publication catalog as HTML")
    parser.add_argument("--collection", default=None, help="Firestore collection to read (default: FIRESTORE_COLLECTION or 'publications')")
    parser.add_argument("--output", default=None, help="Where to write the HTML page (default: CATALOG_OUTPUT_PATH or catalog.html)")
    parser.add_argument("--page", type=int, default=1, help="Result page to render (1-based)")
    parser.add_argument("--search", default=None, help="Free-text search over title, abstract and key findings")
    parser.add_argument("--domain", default=None, help="Only show publications tagged with this research domain")
    parser.add_argument("--system", default=None, help="Only show publications tagged with this biological system")
    parser.add_argument("--year", type=int, default=None, help="Only show publications from this year")

    args = parser.parse_args(argv)
    # Search and filters are independent interactions; replaying both would drop the search.
    if args.search is not None and any(v is not None for v in (args.domain, args.system, args.year)):
        parser.error("--search cannot be combined with --domain, --system or --year")
    return args


def build_actions(args: argparse.Namespace) -> list[Action]:
    """Translate CLI flags into the interactions a user would perform."""
    actions: list[Action] = []
    if args.search is not None:
        actions.append(Search(args.search))
    for name in ("domain", "system", "year"):
        value = getattr(args, name)
        if value is not None:
            actions.append(SetFilter(name, value))
    # Paging is replayed as clicks on "next", so it stops at the last page.
    actions.extend(ChangePage(1) for _ in range(max(args.page, 1) - 1))
    return actions


def run(args: argparse.Namespace) -> int:
    """Load, apply interactions, render and write one catalog page."""
    state = AppState()
    logging.info("Loading publications...")
    try:
        publications = fetch_publications(collection=args.collection)
    except CatalogError as exc:
        logging.error("Error loading publications: %s", exc)
        state = dispatch(state, [LoadFailed(str(exc))])
    else:
        logging.info("Loaded %s publications", len(publications))
        state = dispatch(state, [Loaded(tuple(publications)), *build_actions(args)])
        logging.info(
            "Catalog view: matches=%s page=%s search=%r filters=%s",
            len(state.matches),
            state.page,
            state.search_term,
            state.filters,
        )

    write_page(render_document(state), args.output)
    return 1 if state.status == STATUS_ERROR else 0


def main(argv: list[str] | None = None) -> int:
    """Initialize config and render the catalog."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    return run(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())

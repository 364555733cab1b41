# src/main.py — v1
"""CLI entry point: work and search commands.

Usage:
    bookfinder work <work_id> [--json]
    bookfinder search <query> [--page N] [--limit N] [--language L] [--sort S]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from bookfinder.config.settings import ConfigurationError
from bookfinder.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _setup_logging(args.verbose)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="bookfinder",
        description=f"bookfinder v{__version__} - Open Library work details",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- work ---
    p_work = subparsers.add_parser(
        "work", help="Show a work with its resolved references",
    )
    p_work.add_argument("work_id", help="Work identifier, e.g. OL45804W")
    p_work.add_argument(
        "--json", action="store_true", dest="as_json",
        help="Print the work view as JSON",
    )
    p_work.set_defaults(func=_cmd_work)

    # --- search ---
    p_search = subparsers.add_parser(
        "search", help="Search the catalog",
    )
    p_search.add_argument("query", help="Search terms")
    p_search.add_argument("--page", type=int, default=1, help="Result page (default: 1)")
    p_search.add_argument(
        "--limit", type=int, default=None,
        help="Results per page (default: SEARCH_PAGE_SIZE)",
    )
    p_search.add_argument("--language", default=None, help="Language code, e.g. eng")
    p_search.add_argument(
        "--sort", default=None,
        help="Sort order: new, old, title, rating (default: relevance)",
    )
    p_search.set_defaults(func=_cmd_search)

    return parser


async def _cmd_work(args: argparse.Namespace) -> int:
    """Fetch and print one work."""
    from bookfinder.api.facade import describe_work

    view = await describe_work(args.work_id)
    if args.as_json:
        print(view.model_dump_json(indent=2))
        return 0

    print(f"\n{view.title}")
    print(f"  Key:        {view.key}")
    print(f"  Authors:    {view.author_display}")
    print(f"  Published:  {view.year_display}")
    if view.publisher:
        print(f"  Publisher:  {view.publisher}")
    if view.isbn:
        print(f"  ISBN:       {view.isbn}")
    for label, values in (
        ("Subjects", view.subjects),
        ("Places", view.places),
        ("People", view.people),
        ("Times", view.times),
    ):
        if values:
            print(f"  {label + ':':<11} {', '.join(values[:10])}")
    if view.description:
        preview = view.description[:200]
        if len(view.description) > 200:
            preview += "..."
        print(f"  Summary:    {preview}")
    return 0


async def _cmd_search(args: argparse.Namespace) -> int:
    """Run a catalog search and list the hits."""
    from bookfinder.api.facade import search_books

    books = await search_books(
        args.query,
        page=args.page,
        limit=args.limit,
        language=args.language,
        sort=args.sort,
    )
    if not books:
        print("No results.")
        return 0
    for book in books:
        authors = ", ".join(book.author_names) or "Unknown Author"
        year = book.first_published_year or "?"
        print(f"{book.key:<20} {book.title} - {authors} ({year})")
    return 0


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from settings, -v forcing DEBUG."""
    from bookfinder.config.settings import Settings
    from bookfinder.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())

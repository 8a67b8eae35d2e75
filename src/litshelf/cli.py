"""Command-line interface for the literature shelf."""

import argparse
import logging
import sys
from pathlib import Path

from .bibtex.document import parse_file
from .bibtex.entry import BibEntry
from .config import LibraryConfig
from .exceptions import LitshelfError
from .pdf import find_pdf, open_pdf
from .storage import add_entries, find_entry, init_library, load_library


def setup_logging(verbosity: int = 0) -> None:
    """Configure logging for the CLI application.

    Args:
        verbosity: Logging verbosity level (0=WARNING, 1=INFO, 2+=DEBUG)
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s:%(lineno)d – %(message)s",
    )


def format_entry(entry: BibEntry) -> str:
    """Render one listing line: citekey, year, lead author and title."""
    year = entry.year()
    authors = entry.authors() or ()
    if authors:
        author = authors[0].surname
        if len(authors) > 1:
            author = f"{author} et al."
    else:
        author = "-"
    title = entry.title() or "(untitled)"
    return f"{entry.citekey}\t{year if year is not None else '----'}\t{author}\t{title}"


def cmd_init(args: argparse.Namespace) -> None:
    """Initialize a library under the root directory."""
    config = LibraryConfig.from_root(Path(args.root))
    logger = logging.getLogger(__name__)

    try:
        if init_library(config):
            logger.info(f"✓ Initialized library at {config.db_path}")
        else:
            logger.warning(f"Library already exists at {config.db_path}")
        sys.exit(0)

    except LitshelfError as e:
        logger.error(f"Init error: {e}")
        sys.exit(1)


def cmd_add(args: argparse.Namespace) -> None:
    """Add every entry of a .bib file to the library."""
    config = LibraryConfig.from_root(Path(args.root))
    logger = logging.getLogger(__name__)

    try:
        entries = parse_file(Path(args.file))
        added = add_entries(config.db_path, entries)
        logger.info(f"✓ Added {len(added)} entries from {args.file}")
        sys.exit(0)

    except (FileNotFoundError, LitshelfError) as e:
        logger.error(f"Add error: {e}")
        sys.exit(1)


def cmd_list(args: argparse.Namespace) -> None:
    """List every paper in the library."""
    config = LibraryConfig.from_root(Path(args.root))
    logger = logging.getLogger(__name__)

    try:
        entries = load_library(config.db_path)
    except (FileNotFoundError, LitshelfError) as e:
        logger.error(f"List error: {e}")
        sys.exit(1)

    for entry in entries:
        print(format_entry(entry))
    logger.info(f"{len(entries)} entries in library")
    sys.exit(0)


def cmd_open(args: argparse.Namespace) -> None:
    """Open the PDF of one paper."""
    config = LibraryConfig.from_root(Path(args.root))
    logger = logging.getLogger(__name__)

    try:
        entry = find_entry(load_library(config.db_path), args.citekey)
        if entry is None:
            logger.error(f"No entry with citekey '{args.citekey}' in library")
            sys.exit(1)
        open_pdf(find_pdf(config, entry))
        sys.exit(0)

    except (FileNotFoundError, LitshelfError) as e:
        logger.error(f"Open error: {e}")
        sys.exit(1)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="shelf",
        description="Keep a library of papers from BibTeX files: init, add, list, open.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (use -v for INFO, -vv for DEBUG)",
    )

    parser.add_argument(
        "--root",
        type=str,
        default=".",
        help="Directory holding the 'literature' folder (default: current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Create an empty library")
    init_parser.set_defaults(func=cmd_init)

    add_parser = subparsers.add_parser("add", help="Add the entries of a .bib file")
    add_parser.add_argument("file", type=str, help="Path to the .bib file")
    add_parser.set_defaults(func=cmd_add)

    list_parser = subparsers.add_parser("list", help="List all papers in the library")
    list_parser.set_defaults(func=cmd_list)

    open_parser = subparsers.add_parser("open", help="Open the PDF of a paper")
    open_parser.add_argument("citekey", type=str, help="Citekey of the paper")
    open_parser.set_defaults(func=cmd_open)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the shelf CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Setup logging based on verbosity
    setup_logging(args.verbose)

    # Handle case where no subcommand is provided
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    # Execute the subcommand
    args.func(args)


if __name__ == "__main__":
    main()

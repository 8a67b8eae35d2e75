"""Locate and open the PDF that belongs to a library entry."""

import logging
import os
import subprocess
import sys
from pathlib import Path

from .bibtex.entry import BibEntry
from .config import LibraryConfig
from .exceptions import FileOperationError

logger = logging.getLogger(__name__)

# Non-standard fields reference managers use for attached files
PDF_FIELD_KEYS = ("file", "pdf")


def _field_path(value: str) -> str:
    """Unwrap JabRef's ``description:path:type`` file syntax."""
    parts = value.split(";")[0].split(":")
    if len(parts) == 3:
        return parts[1]
    return value.strip()


def find_pdf(config: LibraryConfig, entry: BibEntry) -> Path:
    """Find the PDF for ``entry``.

    An explicit ``file`` or ``pdf`` field wins and is resolved relative to the
    library root. Otherwise ``<pdf_dir>/<citekey>.pdf`` is used.

    Raises:
        FileOperationError: If no PDF exists at the resolved location
    """
    for key in PDF_FIELD_KEYS:
        value = entry.non_standard_field(key)
        if value:
            candidate = Path(_field_path(value)).expanduser()
            if not candidate.is_absolute():
                candidate = config.root / candidate
            break
    else:
        candidate = config.pdf_dir / f"{entry.citekey}.pdf"

    if not candidate.is_file():
        raise FileOperationError(f"No PDF found for {entry.citekey} at {candidate}")

    logger.debug(f"Resolved PDF for {entry.citekey}: {candidate}")
    return candidate


def open_pdf(pdf_path: Path) -> None:
    """Open ``pdf_path`` in the platform's default viewer.

    Raises:
        FileOperationError: If the viewer cannot be launched
    """
    logger.info(f"Opening {pdf_path}")

    try:
        if sys.platform == "win32":
            os.startfile(pdf_path)  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.Popen(["open", str(pdf_path)])
        else:
            subprocess.Popen(["xdg-open", str(pdf_path)])
    except OSError as e:
        raise FileOperationError(f"Failed to open {pdf_path}: {e}") from e

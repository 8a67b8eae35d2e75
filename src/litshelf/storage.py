"""JSON persistence for the paper library."""

import logging
import tempfile
from collections.abc import Iterable
from pathlib import Path

import msgspec

from .bibtex.document import build_entry
from .bibtex.entry import BibEntry
from .bibtex.parser import RawEntry, RawField
from .config import LibraryConfig
from .exceptions import FileOperationError, InvalidDataError

logger = logging.getLogger(__name__)

LIBRARY_FORMAT_VERSION = 1


class StoredField(msgspec.Struct):
    """A field as stored on disk: key and raw text."""

    key: str
    value: str


class StoredEntry(msgspec.Struct):
    """An entry as stored on disk."""

    kind: str
    citekey: str
    fields: list[StoredField] = msgspec.field(default_factory=list)


class StoredLibrary(msgspec.Struct):
    """Top-level layout of ``papers.json``."""

    version: int = LIBRARY_FORMAT_VERSION
    entries: list[StoredEntry] = msgspec.field(default_factory=list)


def init_library(config: LibraryConfig) -> bool:
    """Create the library directories and an empty ``papers.json``.

    Args:
        config: Library layout to initialize

    Returns:
        ``True`` if a new library file was written, ``False`` if one already existed

    Raises:
        FileOperationError: If the directories or file cannot be created
    """
    try:
        config.literature_dir.mkdir(parents=True, exist_ok=True)
        config.pdf_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(f"Failed to create {config.literature_dir}: {e}") from e

    if config.db_path.exists():
        logger.info(f"Library already initialized at {config.db_path}")
        return False

    save_library(config.db_path, [])
    return True


def _to_stored(entry: BibEntry) -> StoredEntry:
    return StoredEntry(
        kind=entry.kind_name,
        citekey=entry.citekey,
        fields=[StoredField(key=field.key, value=field.raw) for field in entry.fields],
    )


def _from_stored(stored: StoredEntry) -> BibEntry:
    raw = RawEntry(
        kind=stored.kind,
        citekey=stored.citekey,
        fields=tuple(RawField(field.key, field.value) for field in stored.fields),
    )
    return build_entry(raw)


def load_library(db_path: Path) -> list[BibEntry]:
    """Load and re-validate every entry stored in ``db_path``.

    Raises:
        FileNotFoundError: If the library file doesn't exist
        InvalidDataError: If the file is not a valid library document
        ParseError: If a stored field value no longer validates
    """
    if not db_path.exists():
        raise FileNotFoundError(f"Library file not found: {db_path}")

    logger.debug(f"Reading library file: {db_path}")

    try:
        stored = msgspec.json.decode(db_path.read_bytes(), type=StoredLibrary)
    except msgspec.ValidationError as e:
        raise InvalidDataError(f"Invalid library data in {db_path}: {e}") from e
    except msgspec.DecodeError as e:
        raise InvalidDataError(f"Invalid JSON in {db_path}: {e}") from e
    except OSError as e:
        raise FileOperationError(f"Failed to read {db_path}: {e}") from e

    if stored.version != LIBRARY_FORMAT_VERSION:
        raise InvalidDataError(
            f"Unsupported library version {stored.version} in {db_path} "
            f"(expected {LIBRARY_FORMAT_VERSION})"
        )

    entries = [_from_stored(entry) for entry in stored.entries]
    logger.debug(f"Loaded {len(entries)} entries from {db_path.name}")
    return entries


def save_library(db_path: Path, entries: Iterable[BibEntry]) -> None:
    """Write ``entries`` to ``db_path``, replacing the file atomically.

    Raises:
        FileOperationError: If the file cannot be written
    """
    document = StoredLibrary(entries=[_to_stored(entry) for entry in entries])
    payload = msgspec.json.format(msgspec.json.encode(document), indent=2)

    temp_path: Path | None = None
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb", dir=db_path.parent, suffix=".json.tmp", delete=False
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(payload)
        temp_path.replace(db_path)
    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise FileOperationError(f"Failed to write {db_path}: {e}") from e

    logger.info(f"Wrote {len(document.entries)} entries to {db_path}")


def add_entries(db_path: Path, new_entries: Iterable[BibEntry]) -> list[str]:
    """Append entries to the library, rejecting any citekey already present.

    Nothing is written when a duplicate is found.

    Args:
        db_path: Path to ``papers.json``
        new_entries: Entries to append, in order

    Returns:
        Citekeys that were added

    Raises:
        FileNotFoundError: If the library has not been initialized
        InvalidDataError: If a citekey is already in the library or repeated
    """
    entries = load_library(db_path)
    existing_keys = {entry.citekey for entry in entries}

    added: list[str] = []
    duplicates: list[str] = []
    for entry in new_entries:
        if entry.citekey in existing_keys:
            duplicates.append(entry.citekey)
            continue
        existing_keys.add(entry.citekey)
        entries.append(entry)
        added.append(entry.citekey)

    if duplicates:
        raise InvalidDataError(f"Citekeys already in the library: {sorted(set(duplicates))}")

    if added:
        save_library(db_path, entries)
        logger.info(f"Added {len(added)} entries: {', '.join(added)}")
    else:
        logger.info("No entries to add")

    return added


def find_entry(entries: Iterable[BibEntry], citekey: str) -> BibEntry | None:
    """Return the entry with ``citekey``, or ``None``."""
    for entry in entries:
        if entry.citekey == citekey:
            return entry
    return None

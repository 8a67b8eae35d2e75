"""Library layout configuration."""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class LibraryConfig:
    """Configuration for library file paths."""

    root: Path
    literature_dir: Path
    db_path: Path
    pdf_dir: Path

    @classmethod
    def from_root(cls, root: Path) -> "LibraryConfig":
        """Create configuration from the library root path.

        Args:
            root: Path to the directory holding the ``literature`` folder

        Returns:
            LibraryConfig with standard file paths
        """
        literature_dir = root / "literature"
        return cls(
            root=root,
            literature_dir=literature_dir,
            db_path=literature_dir / "papers.json",
            pdf_dir=literature_dir / "pdfs",
        )

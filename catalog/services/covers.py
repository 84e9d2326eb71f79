"""
Cover Image Storage

Stores book covers on the local filesystem in a flat directory keyed by
"<isbn>.<ext>", e.g. uploads/covers/9780307474728.jpg. The same directory
is served read-only under /covers by main.py.

The store knows nothing about the books table; the CatalogService decides
when covers are written, re-keyed or removed.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jpg"


@dataclass(frozen=True)
class CoverUpload:
    """An accepted cover image, already read into memory."""

    filename: str
    data: bytes


class CoverStore:
    """
    Flat-keyspace blob store for cover images.

    Args:
        root: Directory holding the cover files (created if missing)
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def key_for(isbn: int, filename: str | None = None) -> str:
        """
        Build the storage key for a book's cover.

        The extension comes from the uploaded filename, lower-cased.

        Example:
            >>> CoverStore.key_for(9780307474728, "Portada.JPG")
            '9780307474728.jpg'
        """
        extension = Path(filename).suffix.lower() if filename else ""
        return f"{isbn}{extension or DEFAULT_EXTENSION}"

    def path_for(self, key: str) -> Path:
        return self.root / key

    def save(self, key: str, data: bytes) -> Path:
        """Write (or overwrite) a cover. Raises OSError on failure."""
        path = self.path_for(key)
        path.write_bytes(data)
        logger.debug(f"Stored cover {key} ({len(data)} bytes)")
        return path

    def find(self, isbn: int) -> list[Path]:
        """Every stored cover for an ISBN, whatever its extension."""
        prefix = f"{isbn}."
        return sorted(
            path for path in self.root.iterdir()
            if path.is_file() and path.name.startswith(prefix)
        )

    def delete(self, isbn: int) -> int:
        """
        Remove every cover stored for an ISBN.

        Returns:
            Number of files removed (0 if the book had no cover)
        """
        removed = 0
        for path in self.find(isbn):
            path.unlink()
            removed += 1
        return removed

    def rename(self, old_isbn: int, new_isbn: int) -> int:
        """
        Re-key the covers of a book whose ISBN changed.

        Returns:
            Number of files moved
        """
        moved = 0
        for path in self.find(old_isbn):
            path.rename(self.path_for(f"{new_isbn}{path.suffix}"))
            moved += 1
        return moved

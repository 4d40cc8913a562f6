# ABOUTME: Directory scanner that inventories ebook files and their formats.
# ABOUTME: Groups files per book directory, Calibre layout aware, and counts formats.

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

from bookmeta.core.detect import EXTENSION_FORMATS, BookFormat, detect_format

logger = logging.getLogger(__name__)

EBOOK_EXTENSIONS: frozenset[str] = frozenset(EXTENSION_FORMATS)

# Matches a trailing parenthesized Calibre ID like " (2739)" at end of string
_CALIBRE_ID_RE = re.compile(r"\s+\(\d+\)$")


@dataclass
class BookEntry:
    """A single book directory and the ebook files found in it."""

    directory: Path
    author: str | None
    title: str | None
    files: dict[Path, BookFormat] = field(default_factory=dict)

    @property
    def name(self) -> str:
        """Human-readable name: 'Title - Author' or directory name fallback."""
        if self.title and self.author:
            return f"{self.title} - {self.author}"
        return self.title or self.directory.name

    @property
    def formats(self) -> set[BookFormat]:
        return set(self.files.values())

    def has_format(self, book_format: BookFormat | str) -> bool:
        """Check for a format given as a BookFormat, a name ("epub") or an extension."""
        if isinstance(book_format, str):
            key = book_format.lower()
            ext = key if key.startswith(".") else f".{key}"
            resolved = EXTENSION_FORMATS.get(ext)
            if resolved is None:
                try:
                    resolved = BookFormat(key.lstrip("."))
                except ValueError:
                    return False
            book_format = resolved
        return book_format in self.formats


@dataclass
class ScanResult:
    """Aggregated results from scanning a directory tree for ebooks."""

    books: list[BookEntry]
    format_counts: dict[BookFormat, int]
    scan_root: Path

    @property
    def total_books(self) -> int:
        return len(self.books)

    @property
    def total_files(self) -> int:
        return sum(len(book.files) for book in self.books)

    def missing_format(self, book_format: BookFormat | str) -> list[BookEntry]:
        """Return books that do not have the given format."""
        return [book for book in self.books if not book.has_format(book_format)]


def _parse_calibre_dir(book_dir: Path, scan_root: Path) -> tuple[str | None, str | None]:
    """Extract (author, title) from a Calibre-style ``Author/Title (id)/`` path.

    Author is None when the book directory sits directly under ``scan_root``.
    """
    title = _CALIBRE_ID_RE.sub("", book_dir.name) or book_dir.name
    parent = book_dir.parent
    author = parent.name if book_dir != scan_root and parent != scan_root else None
    return author, title


def _classify(path: Path, sniff: bool) -> BookFormat:
    if sniff:
        try:
            return detect_format(path)
        except OSError as exc:
            logger.warning("Could not sniff %s: %s", path, exc)
    return EXTENSION_FORMATS.get(path.suffix.lower(), BookFormat.UNKNOWN)


def scan_directory(root: Path, *, sniff: bool = False) -> ScanResult:
    """Walk a directory tree and group ebook files by leaf directory.

    Args:
        root: The top-level directory to scan.
        sniff: Identify formats by content instead of by extension alone.

    Returns:
        A ScanResult with all discovered books and per-format file counts.
    """
    dir_files: dict[Path, dict[Path, BookFormat]] = defaultdict(dict)
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in EBOOK_EXTENSIONS:
            dir_files[path.parent][path] = _classify(path, sniff)

    books: list[BookEntry] = []
    format_counts: dict[BookFormat, int] = defaultdict(int)
    for book_dir in sorted(dir_files):
        files = dir_files[book_dir]
        author, title = _parse_calibre_dir(book_dir, root)
        books.append(BookEntry(directory=book_dir, author=author, title=title, files=files))
        for book_format in files.values():
            format_counts[book_format] += 1

    logger.debug("Scanned %s: %d books", root, len(books))
    return ScanResult(books=books, format_counts=dict(format_counts), scan_root=root)

# ABOUTME: Single entry point that reads metadata from any supported ebook file.
# ABOUTME: Detects the container format and dispatches to the matching format reader.

import logging
from collections.abc import Callable
from pathlib import Path

from bookmeta.core.detect import BookFormat, detect_format
from bookmeta.formats.comic import ComicReadError, read_comic_metadata
from bookmeta.formats.epub import EpubReadError, read_epub_metadata
from bookmeta.formats.mobi import MobiReadError, read_mobi_metadata
from bookmeta.formats.pdf import PdfReadError, read_pdf_metadata
from bookmeta.metadata.normalizer import normalize_metadata
from bookmeta.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class EbookReadError(Exception):
    """Raised when an ebook file cannot be read or parsed."""


class UnsupportedFormatError(EbookReadError):
    """Raised for files whose format is recognized but has no metadata reader."""


READERS: dict[BookFormat, Callable[[Path], BookMetadata]] = {
    BookFormat.EPUB: read_epub_metadata,
    BookFormat.MOBI: read_mobi_metadata,
    BookFormat.PDF: read_pdf_metadata,
    BookFormat.CBZ: read_comic_metadata,
}

_READ_ERRORS = (EpubReadError, MobiReadError, PdfReadError, ComicReadError)


def read_metadata(path: Path, *, normalize: bool = False) -> BookMetadata:
    """Extract metadata from an ebook file of any supported format.

    Args:
        path: Path to the ebook file.
        normalize: Clean up mangled titles and placeholder authors.

    Returns:
        BookMetadata populated by the matching format reader.

    Raises:
        UnsupportedFormatError: If the format is known but not readable.
        EbookReadError: If the file is missing or its reader fails.
    """
    if not path.exists():
        raise EbookReadError(f"File not found: {path}")

    try:
        book_format = detect_format(path)
    except OSError as exc:
        raise EbookReadError(f"Failed to open {path}: {exc}") from exc

    reader = READERS.get(book_format)
    if reader is None:
        raise UnsupportedFormatError(
            f"No metadata reader for {book_format.value} files: {path}"
        )

    logger.debug("Reading %s as %s", path, book_format.value)
    try:
        metadata = reader(path)
    except _READ_ERRORS as exc:
        raise EbookReadError(str(exc)) from exc

    if normalize:
        metadata = normalize_metadata(metadata).normalized
    return metadata

# ABOUTME: PDF metadata extraction using pypdf's document information dictionary.
# ABOUTME: Maps /Title, /Author, /Subject, /Keywords and dates onto BookMetadata.

import logging
import re
from datetime import datetime
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from bookmeta.metadata.normalizer import title_from_filename
from bookmeta.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

_AUTHOR_SPLIT_RE = re.compile(r"\s*(?:;|&|,|\band\b)\s*")
_KEYWORD_SPLIT_RE = re.compile(r"\s*[;,]\s*")


class PdfReadError(Exception):
    """Raised when a PDF file cannot be read or parsed."""


def _info_value(info, key: str) -> str | None:
    if not info:
        return None
    value = info.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _split_authors(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [name for name in _AUTHOR_SPLIT_RE.split(raw) if name]


def _creation_date(info, path: Path) -> datetime | None:
    """The /CreationDate as pypdf parses it, keeping any UTC offset."""
    if not info:
        return None
    try:
        return info.creation_date
    except ValueError:
        logger.warning("Unparseable PDF creation date %r in %s", info.get("/CreationDate"), path)
        return None


def read_pdf_metadata(path: Path) -> BookMetadata:
    """Extract metadata from a PDF file.

    Raises:
        PdfReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise PdfReadError(f"File not found: {path}")

    try:
        reader = PdfReader(str(path))
        info = reader.metadata
        page_count = len(reader.pages)
    except (PyPdfError, OSError, ValueError) as exc:
        raise PdfReadError(f"Failed to read PDF: {path}: {exc}") from exc

    authors = _split_authors(_info_value(info, "/Author"))
    title = _info_value(info, "/Title")
    if not title:
        title, detected_author = title_from_filename(path.stem)
        if detected_author and not authors:
            authors = [detected_author]

    keywords = _info_value(info, "/Keywords")
    subjects = [k for k in _KEYWORD_SPLIT_RE.split(keywords) if k] if keywords else []

    publish_date = _creation_date(info, path)

    extras: dict[str, object] = {"page_count": page_count}
    for key, name in (("/Creator", "creator"), ("/Producer", "producer")):
        value = _info_value(info, key)
        if value:
            extras[name] = value

    logger.debug("Read PDF %s: %d pages", path, page_count)
    return BookMetadata(
        title=title,
        authors=authors,
        publisher=_info_value(info, "/Publisher"),
        description=_info_value(info, "/Subject"),
        subjects=subjects,
        publish_date=publish_date,
        format="pdf",
        source_path=path,
        extras=extras,
    )

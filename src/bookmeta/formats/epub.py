# ABOUTME: EPUB metadata extraction using ebooklib.
# ABOUTME: Defensive wrapper that handles malformed files gracefully.

import logging
from pathlib import Path

import ebooklib
from ebooklib import epub

from bookmeta.metadata.dates import parse_date
from bookmeta.metadata.normalizer import title_from_filename
from bookmeta.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_all_values(book: epub.EpubBook, namespace: str, name: str) -> list[str]:
    """Extract every non-empty value of a repeatable metadata element."""
    return [
        str(value).strip()
        for value, _attrs in book.get_metadata(namespace, name)
        if value and str(value).strip()
    ]


def _get_identifiers(book: epub.EpubBook) -> dict[str, str]:
    """Extract all identifiers (ISBN, UUID, etc.) from an EpubBook."""
    identifiers = {}
    for value, attrs in book.get_metadata("DC", "identifier"):
        if not value:
            continue
        scheme = attrs.get("opf:scheme", attrs.get("scheme", "id"))
        identifiers[scheme.lower()] = str(value).strip()
    return identifiers


def _detect_isbn(identifiers: dict[str, str]) -> str | None:
    """Try to find an ISBN among the identifiers."""
    for key in ("isbn", "isbn13", "isbn-13", "isbn10", "isbn-10"):
        if key in identifiers:
            return identifiers[key]
    for value in identifiers.values():
        cleaned = value.replace("-", "").replace(" ", "")
        if cleaned.lower().startswith("urn:isbn:"):
            return cleaned[9:]
        if len(cleaned) in (10, 13) and cleaned.replace("X", "").isdigit():
            return value
    return None


def _get_named_meta(book: epub.EpubBook, name: str) -> str | None:
    """Read an OPF <meta name="..." content="..."/> value.

    ebooklib files these under different namespaces depending on whether the
    name carries a prefix, so every namespace is searched.
    """
    for entries in book.metadata.values():
        for values in entries.values():
            for _value, attrs in values:
                if attrs and attrs.get("name") == name:
                    content = attrs.get("content")
                    return content.strip() if content else None
    return None


def _get_series(book: epub.EpubBook) -> tuple[str | None, float | None]:
    series = _get_named_meta(book, "calibre:series")
    raw_index = _get_named_meta(book, "calibre:series_index")
    series_index = None
    if raw_index:
        try:
            series_index = float(raw_index)
        except ValueError:
            logger.warning("Ignoring non-numeric series index %r", raw_index)
    return series, series_index


def _extract_cover_image(book: epub.EpubBook) -> bytes | None:
    """Extract cover image data from an EPUB, if present."""
    cover_id = _get_named_meta(book, "cover")

    if cover_id:
        cover_item = book.get_item_with_id(cover_id)
        if cover_item:
            return cover_item.get_content()

    # Fallback: look for items with "cover" in the id or filename
    for item in book.get_items():
        item_id = item.get_id() or ""
        item_name = item.get_name() or ""
        if "cover" in item_id.lower() or "cover" in item_name.lower():
            if item.get_type() in (ebooklib.ITEM_IMAGE, ebooklib.ITEM_COVER):
                return item.get_content()

    return None


def read_epub_metadata(path: Path) -> BookMetadata:
    """Extract metadata from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        BookMetadata populated with extracted fields.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    authors = _get_all_values(book, "DC", "creator")
    title = _get_metadata_value(book, "DC", "title")
    if not title:
        title, detected_author = title_from_filename(path.stem)
        if detected_author and not authors:
            authors = [detected_author]

    identifiers = _get_identifiers(book)
    series, series_index = _get_series(book)

    raw_date = _get_metadata_value(book, "DC", "date")
    publish_date = parse_date(raw_date)
    if raw_date and publish_date is None:
        logger.warning("Unparseable EPUB date %r in %s", raw_date, path)

    return BookMetadata(
        title=title,
        authors=authors,
        author_sort=_get_named_meta(book, "calibre:author_sort"),
        language=_get_metadata_value(book, "DC", "language"),
        publisher=_get_metadata_value(book, "DC", "publisher"),
        isbn=_detect_isbn(identifiers),
        description=_get_metadata_value(book, "DC", "description"),
        series=series,
        series_index=series_index,
        identifiers=identifiers,
        subjects=_get_all_values(book, "DC", "subject"),
        publish_date=publish_date,
        format="epub",
        cover_image=_extract_cover_image(book),
        source_path=path,
    )

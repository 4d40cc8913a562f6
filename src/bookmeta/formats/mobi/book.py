# ABOUTME: Maps a decoded MobiContainer onto the common BookMetadata model.
# ABOUTME: Entry point used by the format dispatcher for .mobi, .azw, .azw3 and .prc files.

import logging
from pathlib import Path

from bookmeta.formats.mobi.container import MobiContainer
from bookmeta.formats.mobi.errors import MobiError
from bookmeta.metadata.normalizer import title_from_filename
from bookmeta.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class MobiReadError(Exception):
    """Raised when a MOBI file cannot be read or parsed."""


def _first_isbn(isbns: list[str] | None) -> str | None:
    for value in isbns or []:
        cleaned = value.replace("-", "").replace(" ", "").strip()
        if cleaned:
            return cleaned
    return None


def container_to_metadata(container: MobiContainer, path: Path | None = None) -> BookMetadata:
    """Build BookMetadata from an already decoded container."""
    reader = container.metadata()

    title = reader.updated_title() or container.title
    authors = [a.strip() for a in reader.authors() or [] if a.strip()]
    if not title and path is not None:
        title, detected_author = title_from_filename(path.stem)
        if detected_author and not authors:
            authors = [detected_author]

    identifiers: dict[str, str] = {}
    isbn = _first_isbn(reader.isbns())
    if isbn:
        identifiers["isbn"] = isbn
    asin = reader.asin()
    if asin:
        identifiers["asin"] = asin.strip()

    extras: dict[str, object] = {
        "mobi_type": container.mobi_header.mobi_type,
        "file_version": container.mobi_header.file_version,
    }
    if container.exth_error:
        extras["exth_error"] = container.exth_error
    contributors = reader.contributors()
    if contributors:
        extras["contributors"] = contributors
    unknown = reader.extra()
    if unknown:
        extras["exth_unknown"] = unknown

    publishing_date = reader.publishing_date()
    published = reader.published()
    if publishing_date and published is None:
        logger.warning("Unparseable MOBI publishing date %r", publishing_date)

    return BookMetadata(
        title=title or "",
        authors=authors,
        language=reader.language(),
        publisher=reader.publisher(),
        isbn=isbn,
        description=reader.description(),
        identifiers=identifiers,
        subjects=list(reader.subjects() or []),
        publish_date=published,
        format="mobi",
        cover_image=container.cover_image(),
        source_path=path,
        extras=extras,
    )


def read_mobi_metadata(path: Path) -> BookMetadata:
    """Extract metadata from a MOBI/AZW file.

    Args:
        path: Path to the MOBI file.

    Returns:
        BookMetadata populated with extracted fields.

    Raises:
        MobiReadError: If the file cannot be read or is not a MOBI container.
    """
    if not path.exists():
        raise MobiReadError(f"File not found: {path}")

    try:
        container = MobiContainer.from_path(path)
    except (OSError, MobiError) as exc:
        raise MobiReadError(f"Failed to read MOBI: {path}: {exc}") from exc

    return container_to_metadata(container, path)

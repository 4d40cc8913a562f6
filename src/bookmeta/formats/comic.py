# ABOUTME: Comic book archive (CBZ) metadata from the ComicInfo.xml sidecar.
# ABOUTME: The first image in name order is taken as the cover.

import logging
import zipfile
from datetime import datetime
from pathlib import Path
from xml.etree import ElementTree as ET

from bookmeta.metadata.normalizer import title_from_filename
from bookmeta.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"})
COMIC_INFO = "comicinfo.xml"


class ComicReadError(Exception):
    """Raised when a comic archive cannot be read or parsed."""


def _text(root: ET.Element, tag: str) -> str | None:
    element = root.find(tag)
    if element is None or element.text is None:
        return None
    text = element.text.strip()
    return text or None


def _split_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _comic_date(root: ET.Element) -> datetime | None:
    year = _text(root, "Year")
    if not year or not year.isdigit():
        return None
    month = _text(root, "Month") or "1"
    day = _text(root, "Day") or "1"
    try:
        return datetime(int(year), int(month), int(day))
    except ValueError:
        logger.warning("Invalid ComicInfo date %s-%s-%s", year, month, day)
        return None


def _series_index(raw: str | None) -> float | None:
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def read_comic_metadata(path: Path) -> BookMetadata:
    """Extract metadata from a CBZ archive.

    Raises:
        ComicReadError: If the file is missing or not a readable ZIP archive.
    """
    if not path.exists():
        raise ComicReadError(f"File not found: {path}")

    try:
        with zipfile.ZipFile(path) as archive:
            names = archive.namelist()
            info_name = next((n for n in names if Path(n).name.lower() == COMIC_INFO), None)
            info_xml = archive.read(info_name) if info_name else None
            images = sorted(n for n in names if Path(n).suffix.lower() in IMAGE_EXTENSIONS)
            cover = archive.read(images[0]) if images else None
    except (zipfile.BadZipFile, OSError) as exc:
        raise ComicReadError(f"Failed to read comic archive: {path}: {exc}") from exc

    root = ET.Element("ComicInfo")
    if info_xml is not None:
        try:
            root = ET.fromstring(info_xml)
        except ET.ParseError as exc:
            logger.warning("Ignoring malformed ComicInfo.xml in %s: %s", path, exc)

    authors = _split_list(_text(root, "Writer"))
    title = _text(root, "Title")
    series = _text(root, "Series")
    if not title:
        title = series
    if not title:
        title, detected_author = title_from_filename(path.stem)
        if detected_author and not authors:
            authors = [detected_author]

    extras: dict[str, object] = {"page_count": len(images)}
    for tag in ("Penciller", "Inker", "Colorist", "Letterer", "CoverArtist", "Editor"):
        people = _split_list(_text(root, tag))
        if people:
            extras[tag.lower()] = people

    return BookMetadata(
        title=title,
        authors=authors,
        language=_text(root, "LanguageISO"),
        publisher=_text(root, "Publisher"),
        description=_text(root, "Summary"),
        series=series,
        series_index=_series_index(_text(root, "Number")),
        subjects=_split_list(_text(root, "Genre")),
        publish_date=_comic_date(root),
        format="cbz",
        cover_image=cover,
        source_path=path,
        extras=extras,
    )

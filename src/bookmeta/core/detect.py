# ABOUTME: Container format sniffing from magic bytes, with a file-extension fallback.
# ABOUTME: Decides which format reader the dispatcher hands a file to.

import logging
import zipfile
from enum import Enum
from pathlib import Path, PurePosixPath

from bookmeta.formats.comic import COMIC_INFO, IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

# Enough bytes to see the PDB type/creator at offset 60 and an MP4 ftyp box.
_SNIFF_LENGTH = 68


class BookFormat(Enum):
    EPUB = "epub"
    MOBI = "mobi"
    PALMDOC = "palmdoc"
    PDF = "pdf"
    CBZ = "cbz"
    CBR = "cbr"
    AUDIOBOOK = "audiobook"
    TEXT = "txt"
    UNKNOWN = "unknown"


EXTENSION_FORMATS: dict[str, BookFormat] = {
    ".epub": BookFormat.EPUB,
    ".mobi": BookFormat.MOBI,
    ".azw": BookFormat.MOBI,
    ".azw3": BookFormat.MOBI,
    ".prc": BookFormat.MOBI,
    ".pdb": BookFormat.PALMDOC,
    ".pdf": BookFormat.PDF,
    ".cbz": BookFormat.CBZ,
    ".cbr": BookFormat.CBR,
    ".m4b": BookFormat.AUDIOBOOK,
    ".m4a": BookFormat.AUDIOBOOK,
    ".mp3": BookFormat.AUDIOBOOK,
    ".txt": BookFormat.TEXT,
}


def _sniff_zip(path: Path) -> BookFormat:
    """Tell an EPUB from a comic archive; any other ZIP is UNKNOWN."""
    try:
        with zipfile.ZipFile(path) as archive:
            names = archive.namelist()
            if "mimetype" in names:
                mimetype = archive.read("mimetype").decode("ascii", errors="replace").strip()
                if mimetype == "application/epub+zip":
                    return BookFormat.EPUB
            if "META-INF/container.xml" in names:
                return BookFormat.EPUB
    except (zipfile.BadZipFile, OSError) as exc:
        logger.debug("Could not open %s as ZIP: %s", path, exc)
        return BookFormat.UNKNOWN

    for name in names:
        member = PurePosixPath(name)
        if member.name.lower() == COMIC_INFO or member.suffix.lower() in IMAGE_EXTENSIONS:
            return BookFormat.CBZ
    logger.debug("ZIP archive %s holds neither an EPUB nor comic pages", path)
    return BookFormat.UNKNOWN


def sniff_bytes(head: bytes) -> BookFormat | None:
    """Identify a format from the first bytes of a file, or None if unsure.

    ZIP containers are reported as CBZ here; only ``detect_format`` can look
    inside the archive to tell an EPUB, a comic and an unrelated ZIP apart.
    """
    if head.startswith(b"%PDF"):
        return BookFormat.PDF
    if head.startswith(b"PK\x03\x04"):
        return BookFormat.CBZ
    if head.startswith(b"Rar!"):
        return BookFormat.CBR
    if head.startswith(b"ID3") or head[4:8] == b"ftyp":
        return BookFormat.AUDIOBOOK
    ident = head[60:68]
    if ident == b"BOOKMOBI":
        return BookFormat.MOBI
    if ident == b"TEXtREAd":
        return BookFormat.PALMDOC
    return None


def detect_format(path: Path) -> BookFormat:
    """Detect the container format of the file at ``path``.

    Raises:
        OSError: If the file cannot be opened.
    """
    with open(path, "rb") as f:
        head = f.read(_SNIFF_LENGTH)

    sniffed = sniff_bytes(head)
    if sniffed is BookFormat.CBZ:
        return _sniff_zip(path)
    if sniffed is not None:
        return sniffed

    by_extension = EXTENSION_FORMATS.get(path.suffix.lower(), BookFormat.UNKNOWN)
    logger.debug("No magic match for %s, extension says %s", path, by_extension.value)
    return by_extension

# ABOUTME: Core metadata data structures shared by every format reader.
# ABOUTME: BookMetadata is the common model that EPUB, MOBI, PDF and comic readers produce.

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass
class BookMetadata:
    """Structured metadata for an ebook file.

    Every format reader normalizes into this structure. All fields are
    optional except title, since even a badly-formed file has a name we can
    fall back on.
    """

    title: str
    authors: list[str] = field(default_factory=list)
    author_sort: str | None = None
    language: str | None = None
    publisher: str | None = None
    isbn: str | None = None
    description: str | None = None
    series: str | None = None
    series_index: float | None = None
    identifiers: dict[str, str] = field(default_factory=dict)
    subjects: list[str] = field(default_factory=list)
    publish_date: datetime | None = None
    format: str | None = None
    cover_image: bytes | None = None
    source_path: Path | None = None
    extras: dict[str, object] = field(default_factory=dict)

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""

    @property
    def has_cover(self) -> bool:
        """Whether cover image data is present."""
        return self.cover_image is not None and len(self.cover_image) > 0

    @property
    def year(self) -> int | None:
        return self.publish_date.year if self.publish_date else None

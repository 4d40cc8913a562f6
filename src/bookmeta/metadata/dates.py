# ABOUTME: Tolerant parsing of the date strings found in ebook metadata.
# ABOUTME: Accepts ISO dates and datetimes, bare years, and common slash formats.

from datetime import datetime

# Tried in order after ISO 8601 parsing fails.
_DATE_FORMATS = (
    "%Y-%m",
    "%Y",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%d %b %Y",
)


def parse_date(text: str | None) -> datetime | None:
    """Parse a metadata date string, returning None if no format fits."""
    if not text:
        return None
    text = text.strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None

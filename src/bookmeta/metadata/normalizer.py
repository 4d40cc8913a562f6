# ABOUTME: Cleanup of mangled titles from embedded metadata and from file names.
# ABOUTME: Splits "SteveBerry-TheTemplarLegacy" style strings and detects embedded authors.

import re
from dataclasses import dataclass, replace

import wordninja

from bookmeta.metadata.types import BookMetadata

# Spaceless strings shorter than this ("Dune", "1984") are left alone.
_MIN_CONCAT_LENGTH = 8

_CAMEL_CASE_RE = re.compile(r"[a-z][A-Z]")
_CAMEL_LOWER_UPPER_RE = re.compile(r"([a-z\d])([A-Z])")
_CAMEL_UPPER_SEQUENCE_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_LETTER_DIGIT_RE = re.compile(r"([a-zA-Z])(\d)")
_DIGIT_LETTER_RE = re.compile(r"(\d)([a-zA-Z])")
_SEPARATOR_RE = re.compile(r"[-_]")
_WHITESPACE_RE = re.compile(r"\s+")

# Trailing " (1234)" library ids and "[retail]"-style tags in file names.
_FILENAME_NOISE_RE = re.compile(r"\s*(\(\d+\)|\[[^\]]*\])\s*$")

# "Author - Title"
_AUTHOR_DASH_TITLE_RE = re.compile(r"^(?P<author>.+?)\s+-\s+(?P<title>.+)$")

_TITLE_STOP_WORDS = frozenset(
    {"the", "a", "an", "of", "and", "in", "on", "at", "to", "for", "by", "with", "from"}
)

_UNKNOWN_AUTHORS = frozenset({"unknown", "various", "anonymous", ""})


def _needs_normalization(text: str) -> bool:
    """Whether a string looks like joined words rather than a spaced title."""
    text = text.strip()
    if not text:
        return False
    if "_" in text:
        return True
    if _CAMEL_CASE_RE.search(text):
        return True
    segments = text.split("-") if "-" in text else [text]
    return any(" " not in seg and len(seg) >= _MIN_CONCAT_LENGTH for seg in segments)


def _split_camel_case(text: str) -> list[str]:
    """Split "HTMLParser2Go" style text into ["HTML", "Parser", "2", "Go"]."""
    result = _CAMEL_LOWER_UPPER_RE.sub(r"\1_SPLIT_\2", text)
    result = _CAMEL_UPPER_SEQUENCE_RE.sub(r"\1_SPLIT_\2", result)
    result = _LETTER_DIGIT_RE.sub(r"\1_SPLIT_\2", result)
    result = _DIGIT_LETTER_RE.sub(r"\1_SPLIT_\2", result)
    parts = [p for p in result.split("_SPLIT_") if p]
    return parts if parts else [text]


def split_concatenated(text: str) -> str:
    """Turn a concatenated string into space-separated words.

    Hyphens and underscores separate segments, CamelCase boundaries split each
    segment, and long all-lowercase runs are segmented with wordninja.
    """
    if not _needs_normalization(text):
        return text

    words: list[str] = []
    for segment in _SEPARATOR_RE.split(text):
        segment = segment.strip()
        if not segment:
            continue
        for part in _split_camel_case(segment):
            if part.islower() and len(part) >= _MIN_CONCAT_LENGTH:
                words.append(" ".join(wordninja.split(part)) or part)
            else:
                words.append(part)
    return _WHITESPACE_RE.sub(" ", " ".join(words)).strip()


def _is_likely_person_name(text: str) -> bool:
    """Two or three capitalized words (initials allowed) with no stop words."""
    words = text.split()
    if len(words) < 2 or len(words) > 3:
        return False
    if not all(word[0].isupper() for word in words):
        return False
    return not any(w.lower() in _TITLE_STOP_WORDS for w in words)


def title_from_filename(stem: str) -> tuple[str, str | None]:
    """Derive a display title, and possibly an author, from a file stem.

    Returns:
        (title, author). Author is None unless the stem reads "Author - Title".
    """
    stem = _FILENAME_NOISE_RE.sub("", stem.strip())
    stem = stem.replace("_", " ").strip()

    m = _AUTHOR_DASH_TITLE_RE.match(stem)
    if m:
        author = split_concatenated(m.group("author").strip())
        if _is_likely_person_name(author):
            return split_concatenated(m.group("title").strip()), author

    return split_concatenated(stem) or stem, None


@dataclass
class NormalizationResult:
    """Result of normalizing a BookMetadata instance.

    Attributes:
        original: The unmodified input metadata.
        normalized: The cleaned metadata (same object as original if unmodified).
        was_modified: Whether any fields were changed.
    """

    original: BookMetadata
    normalized: BookMetadata
    was_modified: bool


def _has_valid_authors(meta: BookMetadata) -> bool:
    if not meta.authors:
        return False
    return not all(a.strip().lower() in _UNKNOWN_AUTHORS for a in meta.authors)


def normalize_metadata(metadata: BookMetadata) -> NormalizationResult:
    """Drop placeholder authors, collapse whitespace and split mangled titles."""
    title = _WHITESPACE_RE.sub(" ", metadata.title).strip()
    authors = [_WHITESPACE_RE.sub(" ", a).strip() for a in metadata.authors]

    if not _has_valid_authors(metadata):
        authors = []

    if _needs_normalization(title):
        title = split_concatenated(title)

    if title == metadata.title and authors == metadata.authors:
        return NormalizationResult(original=metadata, normalized=metadata, was_modified=False)

    normalized = replace(metadata, title=title, authors=authors)
    return NormalizationResult(original=metadata, normalized=normalized, was_modified=True)

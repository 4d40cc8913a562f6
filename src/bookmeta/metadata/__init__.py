# ABOUTME: Metadata package: the common book model and its normalization helpers.
# ABOUTME: Exports the BookMetadata dataclass used by every format reader.

from bookmeta.metadata.dates import parse_date
from bookmeta.metadata.normalizer import (
    NormalizationResult,
    normalize_metadata,
    title_from_filename,
)
from bookmeta.metadata.types import BookMetadata

__all__ = [
    "BookMetadata",
    "NormalizationResult",
    "normalize_metadata",
    "parse_date",
    "title_from_filename",
]

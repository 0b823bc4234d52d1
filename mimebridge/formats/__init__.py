"""Format descriptors, payloads, mime helpers and the format catalog."""

from mimebridge.formats.catalog import FormatCatalog
from mimebridge.formats.mime import (
    MIME_ALIASES,
    base_file_name,
    category_from_mime,
    normalize_mime_type,
    with_extension,
)
from mimebridge.formats.models import FileData, FormatCategory, FormatDescriptor

__all__ = [
    "FileData",
    "FormatCatalog",
    "FormatCategory",
    "FormatDescriptor",
    "MIME_ALIASES",
    "base_file_name",
    "category_from_mime",
    "normalize_mime_type",
    "with_extension",
]

"""Deduplicated catalog of every format the registered handlers declare."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from mimebridge.formats.mime import normalize_mime_type
from mimebridge.formats.models import CATEGORY_ORDER, FormatCategory, FormatDescriptor


class FormatCatalog:
    """Ordered, read-mostly collection of FormatDescriptors.

    Uniqueness is keyed on (canonical mime, format code): the first
    descriptor added for a key is kept and later ones are ignored.
    """

    def __init__(self, formats: Iterable[FormatDescriptor] = ()) -> None:
        self._formats: list[FormatDescriptor] = []
        self._keys: set[tuple[str, str]] = set()
        for fmt in formats:
            self.add(fmt)

    @staticmethod
    def _key(fmt: FormatDescriptor) -> tuple[str, str]:
        return (fmt.canonical_mime, fmt.format)

    def add(self, fmt: FormatDescriptor) -> bool:
        """Add *fmt* unless an equivalent entry exists. Returns True if added."""
        key = self._key(fmt)
        if key in self._keys:
            return False
        self._keys.add(key)
        self._formats.append(fmt)
        return True

    def sort(self) -> None:
        """Order by category (image first) then display name; stable for ties."""
        self._formats.sort(key=lambda f: (CATEGORY_ORDER.index(f.category), f.name))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def formats(self) -> tuple[FormatDescriptor, ...]:
        return tuple(self._formats)

    def input_formats(self) -> list[FormatDescriptor]:
        return [f for f in self._formats if f.supports_input]

    def output_formats(self) -> list[FormatDescriptor]:
        return [f for f in self._formats if f.supports_output]

    def find_by_mime(self, mime: str) -> FormatDescriptor | None:
        """Look up a format by mime, after alias normalization."""
        wanted = normalize_mime_type(mime)
        return next((f for f in self._formats if f.canonical_mime == wanted), None)

    def find_by_format(self, code: str) -> FormatDescriptor | None:
        wanted = code.strip().lower()
        return next((f for f in self._formats if f.format.lower() == wanted), None)

    def find_by_extension(self, extension: str) -> FormatDescriptor | None:
        wanted = extension.strip().lstrip(".").lower()
        return next((f for f in self._formats if f.extension.lower() == wanted), None)

    def search(self, query: str) -> list[FormatDescriptor]:
        """Case-insensitive substring match on name, code, extension and mime."""
        q = query.strip().lower()
        if not q:
            return list(self._formats)
        return [
            f
            for f in self._formats
            if q in f.name.lower()
            or q in f.format.lower()
            or q in f.extension.lower()
            or q in f.mime.lower()
        ]

    def by_category(self) -> dict[FormatCategory, list[FormatDescriptor]]:
        grouped: dict[FormatCategory, list[FormatDescriptor]] = {}
        for fmt in self._formats:
            grouped.setdefault(fmt.category, []).append(fmt)
        return grouped

    def __len__(self) -> int:
        return len(self._formats)

    def __iter__(self) -> Iterator[FormatDescriptor]:
        return iter(self._formats)

    def __contains__(self, fmt: object) -> bool:
        return isinstance(fmt, FormatDescriptor) and self._key(fmt) in self._keys

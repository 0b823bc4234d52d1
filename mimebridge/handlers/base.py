"""Abstract conversion handler interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Literal

from mimebridge.formats.mime import normalize_mime_type
from mimebridge.formats.models import FileData, FormatDescriptor

Direction = Literal["input", "output"]


class FormatHandler(ABC):
    """Codec-agnostic interface every conversion backend implements.

    The engine only ever calls ``initialize``, ``ready``,
    ``list_supported_formats`` and ``convert``; how a handler transforms
    bytes is its own business. Until ``initialize`` succeeds a handler
    declares no formats and is not ready.
    """

    name: str = "handler"

    def __init__(self) -> None:
        self.ready = False
        self._formats: list[FormatDescriptor] = []

    @abstractmethod
    async def initialize(self) -> None:
        """One-time setup: load codecs and declare supported formats."""
        ...

    @abstractmethod
    async def convert(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        """Return new payloads in *output_format*; never mutate *files*."""
        ...

    def list_supported_formats(self) -> list[FormatDescriptor]:
        return list(self._formats)

    def _declare(self, formats: Iterable[FormatDescriptor]) -> None:
        self._formats = list(formats)
        self.ready = True

    def find_format(self, mime: str, direction: Direction) -> FormatDescriptor | None:
        """This handler's own descriptor for *mime* in the given direction."""
        wanted = normalize_mime_type(mime)
        for fmt in self._formats:
            if fmt.canonical_mime != wanted:
                continue
            if direction == "input" and fmt.supports_input:
                return fmt
            if direction == "output" and fmt.supports_output:
                return fmt
        return None

    def can_read(self, mime: str) -> bool:
        return self.find_format(mime, "input") is not None

    def can_write(self, mime: str) -> bool:
        return self.find_format(mime, "output") is not None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} ready={self.ready}>"

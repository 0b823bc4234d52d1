"""Pass-through handler for ZIP-based containers: only the extension changes."""

from __future__ import annotations

from mimebridge.formats.mime import with_extension
from mimebridge.formats.models import FileData, FormatDescriptor
from mimebridge.handlers.base import FormatHandler


def _zip_based(name: str, fmt: str, mime: str, category: str, *, writable: bool = False) -> FormatDescriptor:
    return FormatDescriptor(
        name=name, format=fmt, extension=fmt, mime=mime,
        supports_input=True, supports_output=writable, internal=fmt, category=category,
    )


RENAME_FORMATS: tuple[FormatDescriptor, ...] = (
    _zip_based("ZIP Archive", "zip", "application/zip", "archive", writable=True),
    _zip_based(
        "Microsoft Word Document", "docx",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document", "document",
    ),
    _zip_based(
        "Microsoft Excel Workbook", "xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "document",
    ),
    _zip_based(
        "Microsoft PowerPoint", "pptx",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation", "document",
    ),
    _zip_based("OpenDocument Text", "odt", "application/vnd.oasis.opendocument.text", "document"),
    _zip_based("Java Archive", "jar", "application/x-java-archive", "archive"),
    _zip_based("Android Package", "apk", "application/vnd.android.package-archive", "archive"),
)


class RenameHandler(FormatHandler):
    """Exposes ZIP-container formats as plain ZIP archives."""

    name = "rename"

    async def initialize(self) -> None:
        self._declare(RENAME_FORMATS)

    async def convert(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        return [
            FileData(name=with_extension(f.name, output_format.extension), data=bytes(f.data))
            for f in files
        ]

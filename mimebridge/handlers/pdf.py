"""PDF page rasterization backed by PyMuPDF."""

from __future__ import annotations

import asyncio

from mimebridge.config.models import PdfConfig
from mimebridge.errors import ConversionError
from mimebridge.formats.mime import base_file_name
from mimebridge.formats.models import FileData, FormatDescriptor
from mimebridge.handlers._pymupdf import render_pages
from mimebridge.handlers.base import FormatHandler

PDF_FORMATS: tuple[FormatDescriptor, ...] = (
    FormatDescriptor(
        name="Portable Document Format", format="pdf", extension="pdf", mime="application/pdf",
        supports_input=True, internal="pdf", category="document",
    ),
    FormatDescriptor(
        name="Portable Network Graphics", format="png", extension="png", mime="image/png",
        supports_output=True, internal="png", category="image",
    ),
    FormatDescriptor(
        name="JPEG Image", format="jpg", extension="jpg", mime="image/jpeg",
        supports_output=True, internal="jpg", category="image",
    ),
)


class PdfHandler(FormatHandler):
    """Renders every page of a PDF; multi-page documents yield one file per page."""

    name = "pdf"

    def __init__(self, config: PdfConfig | None = None) -> None:
        super().__init__()
        self._config = config or PdfConfig()

    async def initialize(self) -> None:
        import pymupdf  # noqa: F401

        self._declare(PDF_FORMATS)

    async def convert(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        if output_format.internal not in ("png", "jpg"):
            raise ConversionError("Invalid output format for PDF conversion")
        return await asyncio.to_thread(self._render_all, files, output_format)

    def _render_all(self, files: list[FileData], output_format: FormatDescriptor) -> list[FileData]:
        out = []
        for f in files:
            pages = render_pages(
                f.data,
                "pdf",
                output_format,
                dpi=self._config.dpi,
                jpeg_quality=self._config.jpeg_quality,
                max_pages=self._config.max_pages,
            )
            stem = base_file_name(f.name)
            ext = output_format.extension
            if len(pages) == 1:
                out.append(FileData(name=f"{stem}.{ext}", data=pages[0]))
                continue
            for number, page in enumerate(pages, 1):
                out.append(FileData(name=f"{stem}_page{number}.{ext}", data=page))
        return out

"""SVG rasterization backed by PyMuPDF."""

from __future__ import annotations

import asyncio

from mimebridge.config.models import SvgConfig
from mimebridge.errors import ConversionError
from mimebridge.formats.mime import with_extension
from mimebridge.formats.models import FileData, FormatDescriptor
from mimebridge.handlers._pymupdf import render_pages
from mimebridge.handlers.base import FormatHandler

SVG_FORMATS: tuple[FormatDescriptor, ...] = (
    FormatDescriptor(
        name="Scalable Vector Graphics", format="svg", extension="svg", mime="image/svg+xml",
        supports_input=True, supports_output=True, internal="svg", category="image",
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


class SvgHandler(FormatHandler):
    name = "svg"

    def __init__(self, config: SvgConfig | None = None) -> None:
        super().__init__()
        self._config = config or SvgConfig()

    async def initialize(self) -> None:
        import pymupdf  # noqa: F401

        self._declare(SVG_FORMATS)

    async def convert(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        if input_format.internal != "svg":
            raise ConversionError(
                f"Unsupported conversion: {input_format.format} to {output_format.format}"
            )
        # svg -> svg is a pass-through used when SVG is an intermediate hop
        if output_format.internal == "svg":
            return [FileData(name=with_extension(f.name, "svg"), data=f.data) for f in files]
        return await asyncio.to_thread(self._rasterize_all, files, output_format)

    def _rasterize_all(self, files: list[FileData], output_format: FormatDescriptor) -> list[FileData]:
        out = []
        for f in files:
            pages = render_pages(
                f.data,
                "svg",
                output_format,
                dpi=self._config.dpi,
                jpeg_quality=self._config.jpeg_quality,
                max_pages=1,
            )
            out.append(FileData(name=with_extension(f.name, output_format.extension), data=pages[0]))
        return out

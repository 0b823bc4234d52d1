"""Raster image re-encoding backed by Pillow."""

from __future__ import annotations

import asyncio
import io
import logging

from mimebridge.config.models import RasterConfig
from mimebridge.errors import ConversionError
from mimebridge.formats.mime import with_extension
from mimebridge.formats.models import FileData, FormatDescriptor
from mimebridge.handlers.base import FormatHandler

logger = logging.getLogger(__name__)

RASTER_FORMATS: tuple[FormatDescriptor, ...] = (
    FormatDescriptor(
        name="Portable Network Graphics", format="png", extension="png", mime="image/png",
        supports_input=True, supports_output=True, internal="PNG", category="image",
    ),
    FormatDescriptor(
        name="JPEG Image", format="jpeg", extension="jpg", mime="image/jpeg",
        supports_input=True, supports_output=True, internal="JPEG", category="image",
    ),
    FormatDescriptor(
        name="WebP Image", format="webp", extension="webp", mime="image/webp",
        supports_input=True, supports_output=True, internal="WEBP", category="image",
    ),
    FormatDescriptor(
        name="GIF Animation", format="gif", extension="gif", mime="image/gif",
        supports_input=True, internal="GIF", category="image",
    ),
    FormatDescriptor(
        name="BMP Bitmap", format="bmp", extension="bmp", mime="image/bmp",
        supports_input=True, internal="BMP", category="image",
    ),
    FormatDescriptor(
        name="ICO Icon", format="ico", extension="ico", mime="image/x-icon",
        supports_input=True, internal="ICO", category="image",
    ),
    FormatDescriptor(
        name="TIFF Image", format="tiff", extension="tiff", mime="image/tiff",
        supports_input=True, internal="TIFF", category="image",
    ),
    FormatDescriptor(
        name="Plain Text", format="text", extension="txt", mime="text/plain",
        supports_input=True, internal="TEXT", category="document",
    ),
)

# Formats that cannot carry an alpha channel get flattened onto white.
_OPAQUE_OUTPUTS = {"JPEG"}


class RasterHandler(FormatHandler):
    """Decodes common raster formats (and plain text) and re-encodes them."""

    name = "raster"

    def __init__(self, config: RasterConfig | None = None) -> None:
        super().__init__()
        self._config = config or RasterConfig()

    async def initialize(self) -> None:
        # Pillow is the codec; a missing install makes this handler unusable.
        from PIL import Image  # noqa: F401

        self._declare(RASTER_FORMATS)

    async def convert(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        return await asyncio.to_thread(self._convert_all, files, input_format, output_format)

    def _convert_all(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        out: list[FileData] = []
        for f in files:
            if input_format.internal == "TEXT":
                image = self._render_text(f.data, output_format)
            else:
                image = self._decode(f)
            out.append(
                FileData(
                    name=with_extension(f.name, output_format.extension),
                    data=self._encode(image, output_format),
                )
            )
        return out

    def _decode(self, f: FileData):
        from PIL import Image, UnidentifiedImageError

        try:
            image = Image.open(io.BytesIO(f.data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ConversionError(f"Failed to load image {f.name}: {e}") from e
        return image

    def _render_text(self, data: bytes, output_format: FormatDescriptor):
        from PIL import Image, ImageDraw, ImageFont

        text = data.decode("utf-8", errors="replace").replace("\n", " ")
        size = self._config.text_font_size
        font = ImageFont.load_default(size=size)

        probe = ImageDraw.Draw(Image.new("L", (1, 1)))
        width = max(int(probe.textlength(text, font=font)) + 20, 100)
        height = int(size * 1.5)

        background = (255, 255, 255, 255) if output_format.internal in _OPAQUE_OUTPUTS else (0, 0, 0, 0)
        image = Image.new("RGBA", (width, height), background)
        ImageDraw.Draw(image).text((10, size // 4), text, fill=(0, 0, 0, 255), font=font)
        return image

    def _encode(self, image, output_format: FormatDescriptor) -> bytes:
        from PIL import Image

        target = output_format.internal
        if target in _OPAQUE_OUTPUTS:
            rgba = image.convert("RGBA")
            image = Image.new("RGB", rgba.size, (255, 255, 255))
            image.paste(rgba, mask=rgba.getchannel("A"))
        elif image.mode not in ("RGB", "RGBA", "L", "LA"):
            image = image.convert("RGBA")

        buf = io.BytesIO()
        try:
            if target in ("JPEG", "WEBP"):
                image.save(buf, format=target, quality=self._config.jpeg_quality)
            else:
                image.save(buf, format=target)
        except (OSError, ValueError, KeyError) as e:
            raise ConversionError(f"Failed to encode {output_format.label}: {e}") from e
        logger.debug("Encoded %s (%d bytes)", output_format.label, buf.tell())
        return buf.getvalue()

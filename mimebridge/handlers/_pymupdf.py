"""Shared PyMuPDF rendering helpers for the vector and document rasterizers."""

from __future__ import annotations

from mimebridge.errors import ConversionError
from mimebridge.formats.models import FormatDescriptor


def render_pages(
    data: bytes,
    filetype: str,
    output_format: FormatDescriptor,
    *,
    dpi: int,
    jpeg_quality: int,
    max_pages: int | None = None,
) -> list[bytes]:
    """Rasterize each page of a PyMuPDF-readable document to PNG or JPEG bytes."""
    import pymupdf

    jpeg = output_format.internal == "jpg"
    try:
        doc = pymupdf.open(stream=data, filetype=filetype)
    except (RuntimeError, ValueError) as e:
        raise ConversionError(f"Failed to load {filetype.upper()}: {e}") from e

    images: list[bytes] = []
    try:
        for index, page in enumerate(doc):
            if max_pages is not None and index >= max_pages:
                break
            # JPEG has no alpha channel; PyMuPDF fills opaque pixmaps with white.
            pix = page.get_pixmap(dpi=dpi, alpha=not jpeg)
            if jpeg:
                images.append(pix.tobytes(output="jpg", jpg_quality=jpeg_quality))
            else:
                images.append(pix.tobytes(output="png"))
    except (RuntimeError, ValueError) as e:
        raise ConversionError(f"Failed to render {filetype.upper()}: {e}") from e
    finally:
        doc.close()

    if not images:
        raise ConversionError(f"{filetype.upper()} document has no pages")
    return images

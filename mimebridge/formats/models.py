"""Pydantic models for format descriptors and file payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mimebridge.formats.mime import category_from_mime, normalize_mime_type


class FormatCategory(str, Enum):
    """UI grouping for formats, in catalog display order."""

    image = "image"
    video = "video"
    audio = "audio"
    document = "document"
    archive = "archive"
    other = "other"


CATEGORY_ORDER: tuple[FormatCategory, ...] = tuple(FormatCategory)


class FormatDescriptor(BaseModel):
    """One file format as declared by a handler (or kept in the catalog).

    ``internal`` is private to the declaring handler; two handlers may expose
    the same mime under different internal tokens.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    format: str = Field(min_length=1)
    extension: str
    mime: str = Field(min_length=1)
    supports_input: bool = False
    supports_output: bool = False
    internal: str
    category: FormatCategory

    @model_validator(mode="before")
    @classmethod
    def _derive_category(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("category"):
            data = {**data, "category": category_from_mime(str(data.get("mime", "")))}
        return data

    @field_validator("extension")
    @classmethod
    def _strip_dot(cls, v: str) -> str:
        return v.lstrip(".")

    @property
    def canonical_mime(self) -> str:
        return normalize_mime_type(self.mime)

    @property
    def label(self) -> str:
        """Upper-cased format code used in route labels (``PNG``, ``JPEG``)."""
        return self.format.upper()

    def __str__(self) -> str:
        return f"{self.label} ({self.mime})"


class FileData(BaseModel):
    """A named, immutable byte payload passed between pipeline stages."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

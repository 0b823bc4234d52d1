"""Route, progress and result models for the conversion engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

from mimebridge.formats.models import FileData, FormatDescriptor

if TYPE_CHECKING:
    from mimebridge.handlers.base import FormatHandler


@dataclass(frozen=True)
class ConversionStep:
    """One handler invocation: *handler* turns *input_format* into *output_format*."""

    handler: FormatHandler
    input_format: FormatDescriptor
    output_format: FormatDescriptor


@dataclass(frozen=True)
class ConversionPath:
    steps: tuple[ConversionStep, ...]

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError("a conversion path needs at least one step")

    @property
    def source(self) -> FormatDescriptor:
        return self.steps[0].input_format

    @property
    def destination(self) -> FormatDescriptor:
        return self.steps[-1].output_format

    @property
    def labels(self) -> list[str]:
        """Format codes along the route, source first: ``["HTML", "SVG", "PNG"]``."""
        return [self.source.label] + [s.output_format.label for s in self.steps]

    def __len__(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        return " → ".join(self.labels)


Stage = Literal["initializing", "converting", "complete", "error"]


class ConversionProgress(BaseModel):
    """A progress notification. Observational only."""

    stage: Stage
    progress: int = Field(ge=0, le=100)
    message: str


ProgressCallback = Callable[[ConversionProgress], None]


class ConversionResult(BaseModel):
    """Outcome of one conversion request.

    ``path`` holds the format labels actually realized; on a failed step it
    stops at the last successful output. It is None when no route was found.
    """

    success: bool
    message: str
    path: list[str] | None = None
    files: list[FileData] | None = None

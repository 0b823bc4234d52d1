"""Sequential execution of a conversion path against in-memory payloads."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from mimebridge.engine.models import ConversionPath, ConversionResult, ConversionStep, ProgressCallback
from mimebridge.engine.progress import emit_progress
from mimebridge.errors import ConversionStepError, FormatResolutionError
from mimebridge.formats.models import FileData

logger = logging.getLogger(__name__)

# Share of the progress bar reserved for routing; execution fills the rest.
ROUTING_PROGRESS = 10
EXECUTION_PROGRESS = 80


def step_progress(index: int, total: int) -> int:
    """Percentage reported before running step *index* (0-based) of *total*."""
    return ROUTING_PROGRESS + round((index + 1) / total * EXECUTION_PROGRESS)


class PipelineExecutor:
    """Runs each step of a path in order, feeding each the previous output.

    Stops at the first failing step and reports the labels realized so far.
    Intermediate payloads are never rolled back; they are simply dropped.
    """

    def __init__(self, step_timeout: float | None = None) -> None:
        self.step_timeout = step_timeout

    async def execute(
        self,
        path: ConversionPath,
        files: Sequence[FileData],
        on_progress: ProgressCallback | None = None,
    ) -> ConversionResult:
        labels = [path.source.label]
        current = list(files)
        total = len(path)

        for index, step in enumerate(path.steps):
            progress = step_progress(index, total)
            emit_progress(on_progress, "converting", progress, f"Converting to {step.output_format.label}...")
            try:
                current = await self.run_step(step, current, index + 1)
            except ConversionStepError as e:
                logger.error("%s [handler=%s, route=%s]", e, e.handler, path)
                emit_progress(on_progress, "error", progress, str(e))
                return ConversionResult(success=False, message=str(e), path=labels)
            labels.append(step.output_format.label)

        emit_progress(on_progress, "complete", 100, "Conversion complete!")
        return ConversionResult(
            success=True,
            message=f"Successfully converted to {path.destination.label}",
            path=labels,
            files=current,
        )

    async def run_step(self, step: ConversionStep, files: list[FileData], number: int) -> list[FileData]:
        """Run one step with the handler's own descriptors; failures become ConversionStepError."""
        handler = step.handler
        try:
            handler_input = handler.find_format(step.input_format.mime, "input")
            if handler_input is None:
                raise FormatResolutionError(handler.name, step.input_format.mime, "input")
            handler_output = handler.find_format(step.output_format.mime, "output")
            if handler_output is None:
                raise FormatResolutionError(handler.name, step.output_format.mime, "output")

            logger.debug(
                "Step %d: %s %s -> %s (%d files)",
                number, handler.name, handler_input.label, handler_output.label, len(files),
            )
            call = handler.convert(list(files), handler_input, handler_output)
            if self.step_timeout is None:
                return list(await call)
            try:
                return list(await asyncio.wait_for(call, self.step_timeout))
            except TimeoutError as e:
                raise ConversionStepError(
                    number, handler.name, f"{handler.name} timed out after {self.step_timeout}s"
                ) from e
        except ConversionStepError:
            raise
        except Exception as e:
            raise ConversionStepError(number, handler.name, e) from e

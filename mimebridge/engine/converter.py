"""Request/response entry point: route a conversion and run it."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from mimebridge.config.models import EngineConfig, MimeBridgeConfig
from mimebridge.engine.executor import ROUTING_PROGRESS, PipelineExecutor
from mimebridge.engine.models import ConversionPath, ConversionResult, ProgressCallback
from mimebridge.engine.pathfinder import find_path, require_path
from mimebridge.engine.progress import emit_progress
from mimebridge.engine.registry import HandlerRegistry
from mimebridge.errors import NoRouteError
from mimebridge.formats.catalog import FormatCatalog
from mimebridge.formats.models import FileData, FormatDescriptor

logger = logging.getLogger(__name__)


class Converter:
    """Converts payloads between two catalog formats.

    Failures never raise: a missing route or a failing step comes back as an
    unsuccessful ConversionResult, and the registry stays usable.
    """

    def __init__(self, registry: HandlerRegistry, config: EngineConfig | None = None) -> None:
        self._registry = registry
        self._config = config or EngineConfig()
        self._executor = PipelineExecutor(step_timeout=self._config.step_timeout_seconds)

    @classmethod
    def from_config(cls, config: MimeBridgeConfig) -> Converter:
        return cls(HandlerRegistry.from_config(config.handlers), config.engine)

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def catalog(self) -> FormatCatalog:
        return self._registry.catalog

    async def initialize(self, on_progress: ProgressCallback | None = None) -> FormatCatalog:
        return await self._registry.initialize(on_progress)

    def find_route(
        self,
        source: FormatDescriptor,
        destination: FormatDescriptor,
        max_hops: int | None = None,
    ) -> ConversionPath | None:
        hops = max_hops if max_hops is not None else self._config.max_hops
        return find_path(self._registry.ready_handlers(), source, destination, hops)

    async def convert(
        self,
        files: Sequence[FileData],
        source: FormatDescriptor,
        destination: FormatDescriptor,
        on_progress: ProgressCallback | None = None,
    ) -> ConversionResult:
        if not self._registry.is_initialized:
            await self._registry.initialize(on_progress)

        emit_progress(on_progress, "converting", 0, "Finding conversion route...")

        if source.canonical_mime == destination.canonical_mime:
            emit_progress(on_progress, "complete", 100, "Files are already in the target format.")
            return ConversionResult(
                success=True,
                message="Files are already in the target format.",
                path=[source.label],
                files=list(files),
            )

        try:
            path = require_path(
                self._registry.ready_handlers(), source, destination, self._config.max_hops
            )
        except NoRouteError as e:
            logger.info("%s (max_hops=%d)", e, self._config.max_hops)
            emit_progress(on_progress, "error", 0, str(e))
            return ConversionResult(success=False, message=str(e))

        emit_progress(
            on_progress,
            "converting",
            ROUTING_PROGRESS,
            "Converting: " + " → ".join(path.labels[1:]),
        )
        return await self._executor.execute(path, files, on_progress)

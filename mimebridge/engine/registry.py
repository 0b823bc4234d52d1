"""Handler registry: one-time handler setup and catalog construction."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from mimebridge.config.models import HandlersConfig
from mimebridge.engine.models import ProgressCallback
from mimebridge.engine.progress import emit_progress
from mimebridge.errors import HandlerInitError
from mimebridge.formats.catalog import FormatCatalog
from mimebridge.handlers import create_handlers
from mimebridge.handlers.base import FormatHandler

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Owns the handlers, initializes them in order, and builds the catalog.

    The catalog and the active-handler list only change inside
    :meth:`initialize`. A fresh catalog is built on the side and swapped in
    once complete, under a lock, so no caller ever sees a partial one.
    """

    def __init__(self, handlers: Iterable[FormatHandler]) -> None:
        self._handlers = list(handlers)
        self._active: list[FormatHandler] = []
        self._failures: dict[str, HandlerInitError] = {}
        self._catalog = FormatCatalog()
        self._initialized = False
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: HandlersConfig | None = None) -> HandlerRegistry:
        return cls(create_handlers(config))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def handlers(self) -> list[FormatHandler]:
        """Every configured handler, in registration order."""
        return list(self._handlers)

    @property
    def catalog(self) -> FormatCatalog:
        return self._catalog

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def failures(self) -> dict[str, HandlerInitError]:
        """Handlers excluded by the last initialization, keyed by name."""
        return dict(self._failures)

    def ready_handlers(self) -> list[FormatHandler]:
        return [h for h in self._active if h.ready]

    async def initialize(
        self,
        on_progress: ProgressCallback | None = None,
        *,
        force: bool = False,
    ) -> FormatCatalog:
        """Initialize every handler and merge their formats into the catalog.

        A second call is a no-op returning the existing catalog unless
        *force* is set, in which case everything is rebuilt.
        """
        async with self._lock:
            if self._initialized and not force:
                return self._catalog

            emit_progress(on_progress, "initializing", 0, "Loading conversion tools...")

            active: list[FormatHandler] = []
            failures: dict[str, HandlerInitError] = {}
            catalog = FormatCatalog()
            total = len(self._handlers)

            for index, handler in enumerate(self._handlers):
                emit_progress(
                    on_progress,
                    "initializing",
                    round((index + 0.5) / total * 100),
                    f"Initializing {handler.name}...",
                )
                error = await self._initialize_one(handler)
                if error is not None:
                    failures[handler.name] = error
                    continue

                active.append(handler)
                added = sum(catalog.add(fmt) for fmt in handler.list_supported_formats())
                logger.debug("%s contributed %d new formats", handler.name, added)

            catalog.sort()
            self._active = active
            self._failures = failures
            self._catalog = catalog
            self._initialized = True

            logger.info(
                "Registry ready: %d/%d handlers, %d formats",
                len(active), total, len(catalog),
            )
            emit_progress(on_progress, "initializing", 100, f"Loaded {len(catalog)} formats")
            return catalog

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    async def _initialize_one(handler: FormatHandler) -> HandlerInitError | None:
        """Run one handler's setup. Returns the failure instead of raising."""
        try:
            await handler.initialize()
        except HandlerInitError as e:
            logger.warning("Skipping handler: %s", e)
            return e
        except Exception as e:
            logger.warning("Failed to initialize handler %s", handler.name, exc_info=True)
            return HandlerInitError(handler.name, e)

        if not handler.ready:
            logger.warning("Handler %s is not ready after initialization", handler.name)
            return HandlerInitError(handler.name, "not ready after initialization")
        return None

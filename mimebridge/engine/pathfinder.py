"""Route discovery over the implicit capability graph.

Nodes are canonical mime types. An edge A -> B exists when some ready
handler reads A and writes B. Handlers are always scanned in registration
order, and each mime is enqueued at most once, so for a fixed handler list
the returned route is deterministic and as short as possible.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence

from mimebridge.engine.models import ConversionPath, ConversionStep
from mimebridge.errors import NoRouteError
from mimebridge.formats.models import FormatDescriptor
from mimebridge.handlers.base import FormatHandler

logger = logging.getLogger(__name__)

DEFAULT_MAX_HOPS = 3


def find_bridge(
    handlers: Sequence[FormatHandler],
    source: FormatDescriptor,
    destination: FormatDescriptor,
) -> ConversionStep | None:
    """First ready handler that converts *source* straight into *destination*."""
    for handler in handlers:
        if handler.ready and handler.can_read(source.mime) and handler.can_write(destination.mime):
            return ConversionStep(handler, source, destination)
    return None


def find_path(
    handlers: Sequence[FormatHandler],
    source: FormatDescriptor,
    destination: FormatDescriptor,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> ConversionPath | None:
    """Shortest handler chain from *source* to *destination*, or None.

    A direct handler is always preferred, whatever *max_hops* is. Otherwise
    a breadth-first search returns a path of at most *max_hops* steps.
    """
    # max_hops < 1 is not "no route": a direct handler still wins.
    direct = find_bridge(handlers, source, destination)
    if direct is not None:
        logger.debug("Direct route %s -> %s via %s", source.label, destination.label, direct.handler.name)
        return ConversionPath((direct,))

    if max_hops <= 1:
        return None

    visited = {source.canonical_mime, destination.canonical_mime}
    queue: deque[tuple[FormatDescriptor, tuple[ConversionStep, ...]]] = deque()

    def expand(node: FormatDescriptor, trail: tuple[ConversionStep, ...]) -> None:
        for handler in handlers:
            if not handler.ready or not handler.can_read(node.mime):
                continue
            for fmt in handler.list_supported_formats():
                if not fmt.supports_output or fmt.canonical_mime in visited:
                    continue
                visited.add(fmt.canonical_mime)
                queue.append((fmt, trail + (ConversionStep(handler, node, fmt),)))

    expand(source, ())
    while queue:
        node, trail = queue.popleft()
        bridge = find_bridge(handlers, node, destination)
        if bridge is not None:
            path = ConversionPath(trail + (bridge,))
            logger.debug("Found %d-step route %s", len(path), path)
            return path
        # Room for one more intermediate plus the final bridge?
        if len(trail) + 1 < max_hops:
            expand(node, trail)

    logger.debug(
        "No route %s -> %s within %d hops", source.label, destination.label, max_hops
    )
    return None


def require_path(
    handlers: Sequence[FormatHandler],
    source: FormatDescriptor,
    destination: FormatDescriptor,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> ConversionPath:
    """Like :func:`find_path` but raises NoRouteError instead of returning None."""
    path = find_path(handlers, source, destination, max_hops)
    if path is None:
        raise NoRouteError(source.label, destination.label, max_hops)
    return path

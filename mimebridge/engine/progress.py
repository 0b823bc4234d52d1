"""Fire-and-forget delivery of progress events to an optional sink."""

from __future__ import annotations

import logging

from mimebridge.engine.models import ConversionProgress, ProgressCallback, Stage

logger = logging.getLogger(__name__)


def emit_progress(
    on_progress: ProgressCallback | None,
    stage: Stage,
    progress: int,
    message: str,
) -> None:
    """Send one event; a failing sink is logged and otherwise ignored."""
    if on_progress is None:
        return
    event = ConversionProgress(stage=stage, progress=max(0, min(100, progress)), message=message)
    try:
        on_progress(event)
    except Exception:
        logger.warning("Progress callback raised on %r", message, exc_info=True)

"""Conversion handlers and the factory that builds them from config."""

from collections.abc import Callable

from mimebridge.config.models import HandlersConfig
from mimebridge.handlers.base import FormatHandler
from mimebridge.handlers.ffmpeg import FFmpegHandler
from mimebridge.handlers.html import HtmlHandler
from mimebridge.handlers.pdf import PdfHandler
from mimebridge.handlers.raster import RasterHandler
from mimebridge.handlers.rename import RenameHandler
from mimebridge.handlers.svg import SvgHandler

_HANDLER_MAP: dict[str, Callable[[HandlersConfig], FormatHandler]] = {
    "raster": lambda cfg: RasterHandler(cfg.raster),
    "rename": lambda cfg: RenameHandler(),
    "html": lambda cfg: HtmlHandler(cfg.html),
    "svg": lambda cfg: SvgHandler(cfg.svg),
    "pdf": lambda cfg: PdfHandler(cfg.pdf),
    "ffmpeg": lambda cfg: FFmpegHandler(cfg.ffmpeg),
}


def create_handlers(config: HandlersConfig | None = None) -> list[FormatHandler]:
    """Instantiate the enabled handlers, in their configured order.

    Order matters: when several handlers can perform the same step, the
    one listed first is used.
    """
    config = config or HandlersConfig()
    handlers: list[FormatHandler] = []
    for name in config.enabled:
        factory = _HANDLER_MAP.get(name)
        if factory is None:
            raise ValueError(
                f"Unsupported handler: {name!r}. "
                f"Supported: {', '.join(_HANDLER_MAP)}"
            )
        handlers.append(factory(config))
    return handlers


__all__ = [
    "FFmpegHandler",
    "FormatHandler",
    "HtmlHandler",
    "PdfHandler",
    "RasterHandler",
    "RenameHandler",
    "SvgHandler",
    "create_handlers",
]

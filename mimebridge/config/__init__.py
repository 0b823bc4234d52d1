from .loader import DEFAULT_CONFIG_TEMPLATE, load_config
from .models import (
    DEFAULT_HANDLER_ORDER,
    EngineConfig,
    FFmpegConfig,
    HandlersConfig,
    HtmlConfig,
    MimeBridgeConfig,
    PdfConfig,
    RasterConfig,
    SvgConfig,
)

__all__ = [
    "DEFAULT_CONFIG_TEMPLATE",
    "DEFAULT_HANDLER_ORDER",
    "EngineConfig",
    "FFmpegConfig",
    "HandlersConfig",
    "HtmlConfig",
    "MimeBridgeConfig",
    "PdfConfig",
    "RasterConfig",
    "SvgConfig",
    "load_config",
]

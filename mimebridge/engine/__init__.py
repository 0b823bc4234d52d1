"""Conversion engine: registry, pathfinder, executor and the Converter facade."""

from mimebridge.engine.converter import Converter
from mimebridge.engine.executor import PipelineExecutor
from mimebridge.engine.models import (
    ConversionPath,
    ConversionProgress,
    ConversionResult,
    ConversionStep,
    ProgressCallback,
)
from mimebridge.engine.pathfinder import DEFAULT_MAX_HOPS, find_bridge, find_path, require_path
from mimebridge.engine.registry import HandlerRegistry

__all__ = [
    "ConversionPath",
    "ConversionProgress",
    "ConversionResult",
    "ConversionStep",
    "Converter",
    "DEFAULT_MAX_HOPS",
    "HandlerRegistry",
    "PipelineExecutor",
    "ProgressCallback",
    "find_bridge",
    "find_path",
    "require_path",
]

"""mimebridge: route and run file-format conversions through pluggable handlers."""

from mimebridge.engine import (
    ConversionPath,
    ConversionProgress,
    ConversionResult,
    ConversionStep,
    Converter,
    HandlerRegistry,
    find_path,
)
from mimebridge.formats import FileData, FormatCatalog, FormatCategory, FormatDescriptor

__version__ = "0.1.0"

__all__ = [
    "ConversionPath",
    "ConversionProgress",
    "ConversionResult",
    "ConversionStep",
    "Converter",
    "FileData",
    "FormatCatalog",
    "FormatCategory",
    "FormatDescriptor",
    "HandlerRegistry",
    "__version__",
    "find_path",
]

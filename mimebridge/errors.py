"""Exception taxonomy for handler setup, routing and pipeline execution."""

from __future__ import annotations


class MimeBridgeError(Exception):
    """Base class for all mimebridge errors."""


class HandlerInitError(MimeBridgeError):
    """A handler failed its one-time setup and is excluded from the registry."""

    def __init__(self, handler: str, cause: Exception | str) -> None:
        self.handler = handler
        super().__init__(f"{handler} initialization failed: {cause}")
        if isinstance(cause, Exception):
            self.__cause__ = cause


class NoRouteError(MimeBridgeError):
    """No chain of ready handlers connects two formats within the hop bound."""

    def __init__(self, source: str, destination: str, max_hops: int | None = None) -> None:
        self.source = source
        self.destination = destination
        self.max_hops = max_hops
        super().__init__(
            f"No conversion path found from {source} to {destination}. "
            "Try a different output format."
        )


class FormatResolutionError(MimeBridgeError):
    """A handler does not expose the requested mime under its own descriptors."""

    def __init__(self, handler: str, mime: str, direction: str) -> None:
        self.handler = handler
        self.mime = mime
        self.direction = direction
        super().__init__(f"Format {mime} not supported as {direction} by handler {handler}")


class ConversionError(MimeBridgeError):
    """Raised by handlers when a byte transformation cannot be performed."""


class ConversionStepError(MimeBridgeError):
    """One pipeline step failed; carries the 1-based step number."""

    def __init__(self, step: int, handler: str, cause: Exception | str) -> None:
        self.step = step
        self.handler = handler
        super().__init__(f"Conversion failed at step {step}: {cause}")
        if isinstance(cause, Exception):
            self.__cause__ = cause

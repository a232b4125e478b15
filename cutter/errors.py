"""
Exception types raised by cutter.

File system failures use the built-in OSError family.
"""


class CutterError(Exception):
    """Base class for cutter errors."""


class ConfigError(CutterError):
    """Invalid configuration, rejected before any phase starts."""


class RemoteError(CutterError):
    """Object store listing, download or upload failure."""


class TransformError(CutterError):
    """A single (source, size) unit could not be transformed."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class DecodeFailed(TransformError):
    """Source is not a decodable raster."""


class EncodeFailed(TransformError):
    """Result could not be serialized in the output format."""

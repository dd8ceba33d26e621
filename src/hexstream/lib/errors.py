"""Error taxonomy for hex dump rendering."""

from __future__ import annotations


class HexstreamError(Exception):
    """Base class for errors raised by hexstream."""


class ConfigurationError(HexstreamError, ValueError):
    """A format or settings value is invalid.

    Raised when the value is built, never later at render time.
    """

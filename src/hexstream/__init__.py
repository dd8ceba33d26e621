"""Streaming, configurable hex dumps."""

__version__ = "0.3.0"

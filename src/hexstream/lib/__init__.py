"""Core hexstream library exports."""

from hexstream.lib.errors import ConfigurationError, HexstreamError
from hexstream.lib.format import DEFAULT, NO_ASCII, Alphabet, HexDumpFormat, preset
from hexstream.lib.line import render_line
from hexstream.lib.sources import ByteSource, IterableSource, ReaderSource, open_file_source
from hexstream.lib.stream import RenderStats, print_dump, render, render_to_string

__all__ = [
    "DEFAULT",
    "NO_ASCII",
    "Alphabet",
    "ByteSource",
    "ConfigurationError",
    "HexDumpFormat",
    "HexstreamError",
    "IterableSource",
    "ReaderSource",
    "RenderStats",
    "open_file_source",
    "preset",
    "print_dump",
    "render",
    "render_line",
    "render_to_string",
]

"""Text formatting protocol for CLI output dataclasses."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

DEFAULT_WIDTH = 80


@dataclass(frozen=True, slots=True)
class FormatContext:
    """Parameters passed to text formatters.

    ``width`` is the number of terminal columns available to the output.
    """

    width: int = DEFAULT_WIDTH

    @classmethod
    def for_terminal(cls) -> FormatContext:
        return cls(width=shutil.get_terminal_size((DEFAULT_WIDTH, 24)).columns)


@runtime_checkable
class TextFormattable(Protocol):
    """Output dataclasses that know how to print themselves for humans."""

    def format_text(self, ctx: FormatContext | None = None) -> str: ...

"""Incremental, bounded-memory rendering of a byte source."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO, TypeAlias

from hexstream.lib.line import render_line
from hexstream.lib.sources import as_source

if TYPE_CHECKING:
    from collections.abc import Callable

    from hexstream.lib.format import HexDumpFormat
    from hexstream.lib.sources import SourceLike

logger = logging.getLogger(__name__)

Sink: TypeAlias = "Callable[[str], object]"


@dataclass(slots=True)
class RenderCursor:
    """Position and remaining budget of one in-flight render."""

    address: int
    remaining: int | None = None

    def next_take(self, bytes_per_line: int) -> int:
        if self.remaining is None:
            return bytes_per_line
        return min(bytes_per_line, self.remaining)

    def advance(self, consumed: int) -> None:
        self.address += consumed
        if self.remaining is not None:
            self.remaining -= consumed


@dataclass(frozen=True, slots=True)
class RenderStats:
    """Totals for a finished render."""

    line_count: int
    byte_count: int


def render(
    fmt: HexDumpFormat,
    source: SourceLike,
    sink: Sink,
) -> RenderStats:
    """Render ``source`` line by line, handing each line to ``sink``.

    At most one line's worth of input is held at a time. Errors raised by the
    source or the sink propagate immediately; lines already delivered stay
    delivered and nothing more is read.
    """

    byte_source = as_source(source)
    bytes_per_line = fmt.bytes_per_line
    cursor = RenderCursor(address=fmt.address_offset, remaining=fmt.length_limit)
    lines = 0
    total = 0

    while True:
        take = cursor.next_take(bytes_per_line)
        if take <= 0:
            break
        chunk = byte_source.read(take)
        if not chunk:
            break
        sink(render_line(fmt, chunk, cursor.address))
        consumed = len(chunk)
        cursor.advance(consumed)
        lines += 1
        total += consumed
        del chunk

    logger.debug(
        "render complete: lines=%d bytes=%d end_address=%#x", lines, total, cursor.address
    )
    return RenderStats(line_count=lines, byte_count=total)


def render_to_string(fmt: HexDumpFormat, source: SourceLike) -> str:
    """Render everything into one string; meant for small inputs."""

    lines: list[str] = []
    render(fmt, source, lines.append)
    return "".join(lines)


def print_dump(
    fmt: HexDumpFormat,
    source: SourceLike,
    file: TextIO | None = None,
) -> RenderStats:
    """Write each line to ``file`` (stdout by default) as soon as it is rendered."""

    out = sys.stdout if file is None else file
    return render(fmt, source, out.write)

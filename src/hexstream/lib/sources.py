"""Pull-based byte sources consumed by the stream renderer."""

from __future__ import annotations

import io
import logging
import os
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Protocol, TypeAlias, runtime_checkable

logger = logging.getLogger(__name__)

SKIP_BLOCK_SIZE = 64 * 1024

_EMPTY = memoryview(b"")


@runtime_checkable
class ByteSource(Protocol):
    """Anything that hands out the next bytes on request.

    ``read(size)`` returns at most ``size`` bytes, fewer only when the data
    runs out, and ``b""`` once it is exhausted.
    """

    def read(self, size: int, /) -> bytes: ...


BytesLike: TypeAlias = bytes | bytearray | memoryview
SourceLike: TypeAlias = ByteSource | BytesLike | Iterable[BytesLike | int]


class ReaderSource:
    """Byte source over a binary file object such as an open file or stdin.

    Pipes and terminals may return short reads; ``read`` keeps reading until
    the requested size is assembled or the stream ends. ``skip`` bytes are
    dropped before the first read, by seeking when the stream allows it and
    by reading into the void otherwise.
    """

    def __init__(self, stream: BinaryIO | io.RawIOBase | io.BufferedIOBase, skip: int = 0) -> None:
        if skip < 0:
            raise ValueError(f"Cannot skip a negative number of bytes ({skip}).")
        self._stream = stream
        self._pending_skip = skip

    def _seekable(self) -> bool:
        try:
            return bool(self._stream.seekable())
        except (AttributeError, OSError, ValueError):
            return False

    def _apply_skip(self) -> None:
        requested = self._pending_skip
        self._pending_skip = 0
        if self._seekable():
            self._stream.seek(requested, os.SEEK_CUR)
            logger.debug("skipped %d bytes by seeking", requested)
            return

        remaining = requested
        while remaining > 0:
            block = self._stream.read(min(remaining, SKIP_BLOCK_SIZE))
            if not block:
                break
            remaining -= len(block)
        logger.debug("skipped %d of %d bytes by reading", requested - remaining, requested)

    def read(self, size: int, /) -> bytes:
        if self._pending_skip:
            self._apply_skip()
        if size <= 0:
            return b""

        first = self._stream.read(size)
        if not first:
            return b""
        if len(first) == size:
            return bytes(first)

        parts = [first]
        received = len(first)
        while received < size:
            more = self._stream.read(size - received)
            if not more:
                break
            parts.append(more)
            received += len(more)
        return b"".join(parts)


def _chunk_view(chunk: object) -> memoryview:
    if isinstance(chunk, bool | str):
        raise TypeError(f"Expected bytes-like chunks or byte values, got {chunk!r}.")
    if isinstance(chunk, int):
        if not 0 <= chunk <= 0xFF:
            raise ValueError(f"Byte values must be in range(256), got {chunk}.")
        return memoryview(bytes((chunk,)))
    try:
        return memoryview(chunk).cast("B")  # type: ignore[arg-type]
    except TypeError:
        raise TypeError(
            f"Expected bytes-like chunks or byte values, got {type(chunk).__name__}."
        ) from None


class IterableSource:
    """Byte source over an iterable of byte chunks of arbitrary sizes.

    Items may also be single byte values (ints in ``range(256)``), so a
    generator yielding one byte at a time works too. Only the chunk currently
    being consumed is referenced; the iterator is advanced lazily, so
    generators producing endless data are fine.
    """

    def __init__(self, chunks: Iterable[BytesLike | int]) -> None:
        self._chunks: Iterator[BytesLike | int] = iter(chunks)
        self._current: memoryview = _EMPTY
        self._position = 0

    def _advance(self) -> bool:
        for chunk in self._chunks:
            view = _chunk_view(chunk)
            if len(view):
                self._current = view
                self._position = 0
                return True
        self._current = _EMPTY
        self._position = 0
        return False

    def read(self, size: int, /) -> bytes:
        if size <= 0:
            return b""

        parts: list[bytes] = []
        needed = size
        while needed > 0:
            if self._position >= len(self._current) and not self._advance():
                break
            taken = self._current[self._position : self._position + needed]
            parts.append(taken.tobytes())
            self._position += len(taken)
            needed -= len(taken)
        if self._position >= len(self._current):
            self._current = _EMPTY
            self._position = 0
        return b"".join(parts)


def as_source(data: SourceLike) -> ByteSource:
    """Adapt in-memory bytes, chunk iterables and file objects to a byte source."""

    if isinstance(data, ReaderSource | IterableSource):
        return data
    if isinstance(data, bytes | bytearray | memoryview):
        return IterableSource((data,))
    if isinstance(data, io.IOBase):
        return ReaderSource(data)
    if isinstance(data, ByteSource):
        return data
    if isinstance(data, str):
        raise TypeError("Cannot dump str; encode it to bytes first.")
    return IterableSource(data)


@contextmanager
def open_file_source(path: str | Path, offset: int = 0) -> Iterator[ReaderSource]:
    """Open ``path`` positioned at ``offset`` so skipped bytes are never read."""

    if offset < 0:
        raise ValueError(f"Offset must not be negative, got {offset}.")
    with open(Path(path), "rb") as stream:
        if offset:
            stream.seek(offset)
        logger.debug("opened %s at offset %d", path, offset)
        yield ReaderSource(stream)


def stdin_source(skip: int = 0) -> ReaderSource:
    """Byte source over standard input, dropping the first ``skip`` bytes."""

    return ReaderSource(sys.stdin.buffer, skip=skip)

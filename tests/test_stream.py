"""Incremental stream rendering: ordering, budgets, failures and memory."""

from __future__ import annotations

import io
import itertools
import math
import tracemalloc
from typing import TYPE_CHECKING

import pytest

from hexstream.lib.format import preset
from hexstream.lib.line import ASCII_BORDER
from hexstream.lib.stream import RenderCursor, print_dump, render, render_to_string

if TYPE_CHECKING:
    from collections.abc import Iterator

PLAIN = preset("default").with_ansi(False)


class _StopDump(Exception):
    pass


class _CountingSource:
    def __init__(self, data: bytes) -> None:
        self._data = io.BytesIO(data)
        self.reads: list[int] = []

    def read(self, size: int, /) -> bytes:
        self.reads.append(size)
        return self._data.read(size)


def test_scenario_full_byte_range() -> None:
    lines: list[str] = []

    stats = render(PLAIN, bytes(range(256)), lines.append)

    assert len(lines) == 16
    assert stats.line_count == 16
    assert stats.byte_count == 256
    assert lines[0].startswith(
        "00000000  00 01 02 03 04 05 06 07  08 09 0a 0b 0c 0d 0e 0f  │................│"
    )
    assert lines[15].startswith("000000f0  ")


def test_scenario_short_final_line_is_aligned() -> None:
    lines: list[str] = []

    render(PLAIN, bytes(range(18)), lines.append)

    assert len(lines) == 2
    assert lines[1].index(ASCII_BORDER) == lines[0].index(ASCII_BORDER)


def test_scenario_no_ascii_three_columns() -> None:
    lines: list[str] = []

    render(preset("no-ascii").with_ansi(False), bytes(range(24)), lines.append)

    assert len(lines) == 1
    assert ASCII_BORDER not in lines[0]
    assert lines[0].startswith("00000000  00 01")


def test_scenario_zero_length_limit_renders_nothing() -> None:
    source = _CountingSource(bytes(1024))

    assert render_to_string(PLAIN.with_length_limit(0), source) == ""
    assert source.reads == []


@pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 32, 100, 257])
@pytest.mark.parametrize("preset_name", ["default", "no-ascii"])
def test_line_count_is_ceiling_of_length(length: int, preset_name: str) -> None:
    fmt = preset(preset_name).with_ansi(False)
    lines: list[str] = []

    render(fmt, bytes(length), lines.append)

    assert len(lines) == math.ceil(length / fmt.bytes_per_line)


def test_addresses_increase_by_one_line_from_the_offset() -> None:
    fmt = PLAIN.with_address_offset(0x1000).with_data_column_count(1)
    lines: list[str] = []

    render(fmt, bytes(80), lines.append)

    for index, line in enumerate(lines):
        assert line.startswith(f"{0x1000 + index * fmt.bytes_per_line:08x}  ")


def test_length_limit_caps_rendered_bytes() -> None:
    lines: list[str] = []

    stats = render(PLAIN.with_length_limit(20), bytes(range(64)), lines.append)

    assert stats.byte_count == 20
    assert len(lines) == 2
    assert lines[1].startswith("00000010  10 11 12 13  ")


def test_length_limit_larger_than_input_renders_everything() -> None:
    assert render_to_string(PLAIN.with_length_limit(10_000), bytes(40)) == render_to_string(
        PLAIN, bytes(40)
    )


def test_rendering_is_deterministic() -> None:
    data = bytes(range(256)) * 3
    fmt = preset("default")

    assert render_to_string(fmt, data) == render_to_string(fmt, data)


def test_plain_output_has_no_escapes() -> None:
    assert "\x1b" not in render_to_string(PLAIN, bytes(range(256)))


def test_colorized_output_has_escapes() -> None:
    assert "\x1b[38;2;" in render_to_string(preset("default"), b"\x01")


def test_source_is_asked_for_at_most_one_line_at_a_time() -> None:
    source = _CountingSource(bytes(50))

    render(PLAIN, source, lambda line: None)

    assert source.reads == [16, 16, 16, 16, 16]


def test_budget_shrinks_the_last_request() -> None:
    source = _CountingSource(bytes(50))

    render(PLAIN.with_length_limit(40), source, lambda line: None)

    assert source.reads == [16, 16, 8]


def test_unbounded_generator_with_length_limit_terminates() -> None:
    lines: list[str] = []

    stats = render(PLAIN.with_length_limit(100), itertools.repeat(b"\xab" * 7), lines.append)

    assert stats.byte_count == 100
    assert len(lines) == 7


def test_unbounded_source_is_pulled_lazily_and_cancellable_from_the_sink() -> None:
    produced = 0

    def endless() -> Iterator[bytes]:
        nonlocal produced
        while True:
            produced += 1
            yield bytes(4096)

    seen: list[str] = []

    def sink(line: str) -> None:
        seen.append(line)
        if len(seen) == 10:
            raise _StopDump

    with pytest.raises(_StopDump):
        render(PLAIN, endless(), sink)

    assert len(seen) == 10
    assert produced == 1


MEMORY_CHUNK = 4096
MEMORY_PEAK_LIMIT = 200_000


def _peak_render_memory(total: int) -> tuple[int, int]:
    block = bytes(range(256)) * (MEMORY_CHUNK // 256)
    fmt = PLAIN.with_data_column_count(32)

    def chunks() -> Iterator[bytearray]:
        for _ in range(total // MEMORY_CHUNK):
            yield bytearray(block)

    tracemalloc.start()
    try:
        tracemalloc.reset_peak()
        stats = render(fmt, chunks(), lambda line: None)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    return stats.byte_count, peak


def test_peak_memory_does_not_grow_with_rendered_bytes() -> None:
    small_total, small_peak = _peak_render_memory(512 * 1024)
    large_total, large_peak = _peak_render_memory(16 * 1024 * 1024)

    assert small_total == 512 * 1024
    assert large_total == 16 * 1024 * 1024
    assert small_peak < MEMORY_PEAK_LIMIT
    assert large_peak < MEMORY_PEAK_LIMIT
    assert large_peak - small_peak < 32 * 1024


def test_source_errors_propagate_and_keep_delivered_lines() -> None:
    def failing() -> Iterator[bytes]:
        yield bytes(32)
        raise OSError("device went away")

    lines: list[str] = []

    with pytest.raises(OSError, match="device went away"):
        render(PLAIN, failing(), lines.append)

    assert len(lines) == 2


def test_sink_errors_stop_further_reads() -> None:
    source = _CountingSource(bytes(64))

    def sink(line: str) -> None:
        raise RuntimeError("sink closed")

    with pytest.raises(RuntimeError, match="sink closed"):
        render(PLAIN, source, sink)

    assert source.reads == [16]


def test_lines_are_delivered_in_address_order_before_the_next_read() -> None:
    events: list[str] = []

    class _Source:
        def __init__(self) -> None:
            self._data = io.BytesIO(bytes(40))

        def read(self, size: int, /) -> bytes:
            events.append("read")
            return self._data.read(size)

    render(PLAIN, _Source(), lambda line: events.append(line[:8]))

    assert events == ["read", "00000000", "read", "00000010", "read", "00000020", "read"]


def test_print_dump_writes_to_the_given_stream() -> None:
    out = io.StringIO()

    stats = print_dump(PLAIN, b"hello", file=out)

    assert out.getvalue() == render_to_string(PLAIN, b"hello")
    assert stats.line_count == 1


def test_print_dump_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    print_dump(PLAIN, b"hi")

    assert capsys.readouterr().out.endswith("│hi│\n")


def test_render_cursor_tracks_budget() -> None:
    cursor = RenderCursor(address=10, remaining=20)

    assert cursor.next_take(16) == 16
    cursor.advance(16)
    assert (cursor.address, cursor.remaining) == (26, 4)
    assert cursor.next_take(16) == 4

    unbounded = RenderCursor(address=0)
    unbounded.advance(16)
    assert unbounded.next_take(16) == 16
    assert unbounded.remaining is None

"""Render one line of a hex dump."""

from __future__ import annotations

from typing import TYPE_CHECKING

from hexstream.lib.color import FAINT, NORMAL, RESET, foreground_for_byte
from hexstream.lib.format import Alphabet

if TYPE_CHECKING:
    from hexstream.lib.format import HexDumpFormat

ADDRESS_MASK = 0xFFFF_FFFF
ASCII_BORDER = "│"
PLACEHOLDER = "."
REPLACEMENT = "�"

_HEX_CELLS: dict[Alphabet, tuple[str, ...]] = {
    Alphabet.LOWER: tuple(f"{value:02x} " for value in range(256)),
    Alphabet.UPPER: tuple(f"{value:02X} " for value in range(256)),
}


def _faint(text: str) -> str:
    return f"{FAINT}{text}{NORMAL}"


def render_address(fmt: HexDumpFormat, address: int) -> str:
    """Eight hex digits of the low 32 bits of ``address``."""

    masked = address & ADDRESS_MASK
    digits = f"{masked:08X}" if fmt.alphabet is Alphabet.UPPER else f"{masked:08x}"
    if fmt.ansi_enabled:
        return _faint(digits)
    return digits


def render_hex(fmt: HexDumpFormat, chunk: bytes) -> str:
    cells = _HEX_CELLS[fmt.alphabet]
    width = fmt.data_column_width_in_bytes
    parts: list[str] = []
    for start in range(0, len(chunk), width):
        for value in chunk[start : start + width]:
            if fmt.ansi_enabled:
                parts.append(foreground_for_byte(value))
            parts.append(cells[value])
        parts.append(" ")
    if fmt.ansi_enabled:
        parts.append(RESET)
    return "".join(parts)


def ascii_padding(fmt: HexDumpFormat, length: int) -> int:
    """Spaces needed so a short line's ASCII column lines up with a full one."""

    missing = fmt.bytes_per_line - length
    if missing == 0:
        return 0
    last_column_index = (length - 1) // fmt.data_column_width_in_bytes
    return missing * 3 - 1 + (fmt.data_column_count - last_column_index)


def line_width(fmt: HexDumpFormat) -> int:
    """Visible characters in a full line, escapes and newline excluded."""

    bytes_per_line = fmt.bytes_per_line
    width = bytes_per_line * 3 + fmt.data_column_count
    if fmt.include_address_column:
        width += 10
    if fmt.include_ascii_column:
        width += bytes_per_line + 2 * len(ASCII_BORDER)
    return width


def _ascii_char(value: int, ansi: bool) -> str:
    # Lenient ASCII decode: anything outside 7-bit becomes U+FFFD.
    if value >= 0x80:
        return _faint(REPLACEMENT) if ansi else REPLACEMENT
    if 0x20 <= value <= 0x7E:
        return chr(value)
    return _faint(PLACEHOLDER) if ansi else PLACEHOLDER


def render_ascii(fmt: HexDumpFormat, chunk: bytes) -> str:
    preview = "".join(_ascii_char(value, fmt.ansi_enabled) for value in chunk)
    return f"{ASCII_BORDER}{preview}{ASCII_BORDER}"


def render_line(fmt: HexDumpFormat, chunk: bytes, address: int) -> str:
    """Render ``chunk`` (at most one line's worth of bytes) starting at ``address``."""

    length = len(chunk)
    if length == 0:
        raise ValueError("Cannot render an empty chunk.")
    if length > fmt.bytes_per_line:
        raise ValueError(
            f"Chunk of {length} bytes exceeds bytes_per_line={fmt.bytes_per_line}."
        )

    parts: list[str] = []
    if fmt.include_address_column:
        parts.append(render_address(fmt, address))
        parts.append("  ")
    parts.append(render_hex(fmt, chunk))
    if fmt.include_ascii_column:
        parts.append(" " * ascii_padding(fmt, length))
        parts.append(render_ascii(fmt, chunk))
    parts.append("\n")
    return "".join(parts)

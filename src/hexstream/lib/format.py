"""Immutable hex dump format configuration and named presets."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, TextIO

from hexstream.lib.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from hexstream.lib.sources import SourceLike
    from hexstream.lib.stream import RenderStats


class Alphabet(StrEnum):
    LOWER = "lower"
    UPPER = "upper"

    @property
    def digits(self) -> str:
        if self is Alphabet.UPPER:
            return "0123456789ABCDEF"
        return "0123456789abcdef"


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"Invalid {name}: expected int, got {type(value).__name__} ({value!r})."
        )
    return value


def _require_bool(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Invalid {name}: expected bool, got {type(value).__name__} ({value!r})."
        )
    return value


@dataclass(frozen=True, slots=True)
class HexDumpFormat:
    """Every parameter that controls how a byte stream is rendered.

    Instances are values: the ``with_*`` methods return a new format and
    leave the receiver untouched, so new fields can be added later without
    breaking existing call sites. Start from :func:`preset` rather than
    calling the constructor directly.
    """

    include_address_column: bool = True
    data_column_count: int = 2
    data_column_width_in_bytes: int = 8
    include_ascii_column: bool = True
    alphabet: Alphabet = Alphabet.LOWER
    ansi_enabled: bool = True
    address_offset: int = 0
    length_limit: int | None = None

    def __post_init__(self) -> None:
        _require_bool("include_address_column", self.include_address_column)
        _require_bool("include_ascii_column", self.include_ascii_column)
        _require_bool("ansi_enabled", self.ansi_enabled)
        if _require_int("data_column_count", self.data_column_count) < 1:
            raise ConfigurationError(
                f"Invalid data_column_count: expected >= 1, got {self.data_column_count}."
            )
        if _require_int("data_column_width_in_bytes", self.data_column_width_in_bytes) < 1:
            raise ConfigurationError(
                "Invalid data_column_width_in_bytes: expected >= 1, "
                f"got {self.data_column_width_in_bytes}."
            )
        if not isinstance(self.alphabet, Alphabet):
            raise ConfigurationError(f"Invalid alphabet: {self.alphabet!r}.")
        _require_int("address_offset", self.address_offset)
        if self.length_limit is not None and _require_int("length_limit", self.length_limit) < 0:
            raise ConfigurationError(
                f"Invalid length_limit: expected >= 0, got {self.length_limit}."
            )

    @property
    def bytes_per_line(self) -> int:
        return self.data_column_width_in_bytes * self.data_column_count

    def with_include_address_column(self, include: bool) -> HexDumpFormat:
        return replace(self, include_address_column=include)

    def with_data_column_count(self, count: int) -> HexDumpFormat:
        return replace(self, data_column_count=count)

    def with_data_column_width_in_bytes(self, width: int) -> HexDumpFormat:
        return replace(self, data_column_width_in_bytes=width)

    def with_include_ascii_column(self, include: bool) -> HexDumpFormat:
        return replace(self, include_ascii_column=include)

    def with_alphabet(self, alphabet: Alphabet | str) -> HexDumpFormat:
        try:
            resolved = Alphabet(alphabet)
        except ValueError as error:
            raise ConfigurationError(
                f"Invalid alphabet: expected one of {[a.value for a in Alphabet]}, "
                f"got {alphabet!r}."
            ) from error
        return replace(self, alphabet=resolved)

    def with_ansi(self, enabled: bool) -> HexDumpFormat:
        return replace(self, ansi_enabled=enabled)

    def with_address_offset(self, offset: int) -> HexDumpFormat:
        return replace(self, address_offset=offset)

    def with_length_limit(self, limit: int | None) -> HexDumpFormat:
        return replace(self, length_limit=limit)

    def render(self, data: SourceLike) -> str:
        """Render ``data`` to one string. Memory grows with the output."""

        from hexstream.lib.stream import render_to_string

        return render_to_string(self, data)

    def render_lines(self, data: SourceLike, sink: Callable[[str], object]) -> RenderStats:
        from hexstream.lib.stream import render

        return render(self, data, sink)

    def print(self, data: SourceLike, file: TextIO | None = None) -> RenderStats:
        from hexstream.lib.stream import print_dump

        return print_dump(self, data, file=file)


DEFAULT = HexDumpFormat()
NO_ASCII = DEFAULT.with_include_ascii_column(False).with_data_column_count(3)

PRESETS: dict[str, HexDumpFormat] = {
    "default": DEFAULT,
    "no-ascii": NO_ASCII,
}


def preset(name: str) -> HexDumpFormat:
    """Look up a named preset."""

    normalized = name.strip().lower()
    try:
        return PRESETS[normalized]
    except KeyError:
        raise ConfigurationError(
            f"Unknown preset {name!r}: expected one of {sorted(PRESETS)}."
        ) from None

"""Informational operations behind the `presets` and `config` commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from hexstream.lib.config.settings import HexstreamConfig, load_config, resolve_config_path
from hexstream.lib.format import PRESETS, HexDumpFormat
from hexstream.lib.formatting import FormatContext
from hexstream.lib.line import line_width


def _on_off(flag: bool) -> str:
    return "on" if flag else "off"


@dataclass(frozen=True, slots=True)
class PresetEntry:
    name: str
    include_address_column: bool
    data_column_count: int
    data_column_width_in_bytes: int
    include_ascii_column: bool
    bytes_per_line: int
    line_width: int

    @classmethod
    def from_format(cls, name: str, fmt: HexDumpFormat) -> PresetEntry:
        return cls(
            name=name,
            include_address_column=fmt.include_address_column,
            data_column_count=fmt.data_column_count,
            data_column_width_in_bytes=fmt.data_column_width_in_bytes,
            include_ascii_column=fmt.include_ascii_column,
            bytes_per_line=fmt.bytes_per_line,
            line_width=line_width(fmt),
        )


@dataclass(frozen=True, slots=True)
class PresetListOutput:
    presets: tuple[PresetEntry, ...]

    def format_text(self, ctx: FormatContext | None = None) -> str:
        available = (ctx or FormatContext()).width
        too_wide = False
        rows = [["NAME", "ADDRESS", "COLUMNS", "BYTES/LINE", "ASCII", "WIDTH"]]
        for entry in self.presets:
            overflows = entry.line_width > available
            too_wide = too_wide or overflows
            rows.append(
                [
                    entry.name,
                    _on_off(entry.include_address_column),
                    f"{entry.data_column_count}x{entry.data_column_width_in_bytes}",
                    str(entry.bytes_per_line),
                    _on_off(entry.include_ascii_column),
                    f"{entry.line_width}*" if overflows else str(entry.line_width),
                ]
            )
        widths = [max(len(row[col]) for row in rows) for col in range(len(rows[0]))]
        lines = [
            "  ".join(cell.ljust(width) for cell, width in zip(row, widths, strict=True)).rstrip()
            for row in rows
        ]
        if too_wide:
            lines.append(f"* wider than {available} columns")
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class ConfigShowOutput:
    path: Path
    exists: bool
    config: HexstreamConfig

    def format_text(self, ctx: FormatContext | None = None) -> str:
        layout = self.config.layout
        color = "auto" if self.config.color is None else _on_off(self.config.color)
        pairs: list[tuple[str, str | None]] = [
            ("path", f"{self.path}" + ("" if self.exists else " (missing)")),
            ("preset", self.config.preset),
            ("color", color),
            ("uppercase", _on_off(self.config.uppercase)),
            ("layout.columns", None if layout.columns is None else str(layout.columns)),
            (
                "layout.column_width",
                None if layout.column_width is None else str(layout.column_width),
            ),
            ("layout.address", None if layout.address is None else _on_off(layout.address)),
            ("layout.ascii", None if layout.ascii is None else _on_off(layout.ascii)),
        ]
        return "\n".join(f"{key}: {value}" for key, value in pairs if value is not None)


def presets_list_sync() -> PresetListOutput:
    return PresetListOutput(
        presets=tuple(PresetEntry.from_format(name, fmt) for name, fmt in PRESETS.items())
    )


def config_show_sync(path: Path | None = None) -> ConfigShowOutput:
    config_path = resolve_config_path() if path is None else path
    return ConfigShowOutput(
        path=config_path,
        exists=config_path.is_file(),
        config=load_config(config_path),
    )

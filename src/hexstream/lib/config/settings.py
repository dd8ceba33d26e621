"""User-level configuration loader."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import TextIO, cast

from hexstream.lib.errors import ConfigurationError
from hexstream.lib.format import PRESETS, Alphabet, HexDumpFormat, preset

logger = logging.getLogger(__name__)

CONFIG_ENV = "HEXSTREAM_CONFIG"


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Column layout overrides; ``None`` keeps the preset's value."""

    columns: int | None = None
    column_width: int | None = None
    address: bool | None = None
    ascii: bool | None = None


@dataclass(frozen=True, slots=True)
class HexstreamConfig:
    """Resolved user configuration."""

    preset: str = "default"
    color: bool | None = None
    uppercase: bool = False
    layout: LayoutConfig = LayoutConfig()


_TOP_LEVEL_TYPES: dict[str, str] = {
    "preset": "preset",
    "color": "optional_bool",
    "uppercase": "bool",
}

_LAYOUT_TYPES: dict[str, str] = {
    "columns": "count",
    "column_width": "count",
    "address": "bool",
    "ascii": "bool",
}

_ENV_OVERRIDE_MAP: dict[str, tuple[str | None, str]] = {
    "HEXSTREAM_PRESET": (None, "preset"),
    "HEXSTREAM_COLOR": (None, "color"),
    "HEXSTREAM_UPPERCASE": (None, "uppercase"),
    "HEXSTREAM_COLUMNS": ("layout", "columns"),
    "HEXSTREAM_COLUMN_WIDTH": ("layout", "column_width"),
    "HEXSTREAM_ADDRESS": ("layout", "address"),
    "HEXSTREAM_ASCII": ("layout", "ascii"),
}

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})
_AUTO_WORDS = frozenset({"", "auto"})


def resolve_config_path() -> Path:
    """Locate the configuration file.

    Precedence:
    1. ``HEXSTREAM_CONFIG`` environment variable.
    2. ``$XDG_CONFIG_HOME/hexstream/config.toml``.
    3. ``~/.config/hexstream/config.toml``.
    """

    explicit = os.getenv(CONFIG_ENV)
    if explicit:
        return Path(explicit).expanduser()
    xdg_home = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg_home).expanduser() if xdg_home else Path.home() / ".config"
    return base / "hexstream" / "config.toml"


def _coerce_file_value(*, kind: str, raw_value: object, source: str) -> object:
    if kind in {"bool", "optional_bool"}:
        if not isinstance(raw_value, bool):
            raise ConfigurationError(
                f"Invalid value for '{source}': expected bool, got "
                f"{type(raw_value).__name__} ({raw_value!r})."
            )
        return raw_value

    if kind == "count":
        if isinstance(raw_value, bool) or not isinstance(raw_value, int):
            raise ConfigurationError(
                f"Invalid value for '{source}': expected int, got "
                f"{type(raw_value).__name__} ({raw_value!r})."
            )
        if raw_value < 1:
            raise ConfigurationError(
                f"Invalid value for '{source}': expected int >= 1, got {raw_value!r}."
            )
        return raw_value

    if not isinstance(raw_value, str):
        raise ConfigurationError(
            f"Invalid value for '{source}': expected str, got "
            f"{type(raw_value).__name__} ({raw_value!r})."
        )
    return _coerce_preset(raw_value, source=source)


def _coerce_preset(raw_value: str, *, source: str) -> str:
    normalized = raw_value.strip().lower()
    if normalized not in PRESETS:
        raise ConfigurationError(
            f"Invalid value for '{source}': expected one of {sorted(PRESETS)}, "
            f"got {raw_value!r}."
        )
    return normalized


def _coerce_env_value(*, kind: str, raw_value: str, env_name: str) -> object:
    normalized = raw_value.strip().lower()
    if kind in {"bool", "optional_bool"}:
        if normalized in _TRUE_WORDS:
            return True
        if normalized in _FALSE_WORDS:
            return False
        if kind == "optional_bool" and normalized in _AUTO_WORDS:
            return None
        raise ConfigurationError(
            f"Invalid environment override '{env_name}': expected bool, got {raw_value!r}."
        )

    if kind == "count":
        try:
            value = int(normalized, 0)
        except ValueError as error:
            raise ConfigurationError(
                f"Invalid environment override '{env_name}': expected int, got {raw_value!r}."
            ) from error
        if value < 1:
            raise ConfigurationError(
                f"Invalid environment override '{env_name}': expected int >= 1, "
                f"got {raw_value!r}."
            )
        return value

    return _coerce_preset(raw_value, source=env_name)


def _default_values() -> dict[str, object]:
    defaults = HexstreamConfig()
    values = {field.name: getattr(defaults, field.name) for field in fields(HexstreamConfig)}
    layout = defaults.layout
    values["layout"] = {field.name: getattr(layout, field.name) for field in fields(LayoutConfig)}
    return values


def _apply_toml_payload(*, values: dict[str, object], payload: dict[str, object]) -> None:
    layout_values = cast("dict[str, object]", values["layout"])
    for key, raw_value in payload.items():
        if key == "layout":
            if not isinstance(raw_value, dict):
                raise ConfigurationError("Invalid value for 'layout': expected table.")
            for layout_key, layout_value in cast("dict[str, object]", raw_value).items():
                kind = _LAYOUT_TYPES.get(layout_key)
                if kind is None:
                    logger.warning("Ignoring unknown hexstream config key 'layout.%s'.", layout_key)
                    continue
                layout_values[layout_key] = _coerce_file_value(
                    kind=kind,
                    raw_value=layout_value,
                    source=f"layout.{layout_key}",
                )
            continue

        kind = _TOP_LEVEL_TYPES.get(key)
        if kind is None:
            logger.warning("Ignoring unknown hexstream config key '%s'.", key)
            continue
        values[key] = _coerce_file_value(kind=kind, raw_value=raw_value, source=key)


def _apply_env_overrides(values: dict[str, object]) -> None:
    layout_values = cast("dict[str, object]", values["layout"])
    for env_name, (section, key) in _ENV_OVERRIDE_MAP.items():
        raw_value = os.getenv(env_name)
        if raw_value is None:
            continue
        kind = _LAYOUT_TYPES[key] if section == "layout" else _TOP_LEVEL_TYPES[key]
        target = layout_values if section == "layout" else values
        target[key] = _coerce_env_value(kind=kind, raw_value=raw_value, env_name=env_name)


def _build_config(values: dict[str, object]) -> HexstreamConfig:
    layout_values = cast("dict[str, object]", values["layout"])
    return HexstreamConfig(
        preset=cast("str", values["preset"]),
        color=cast("bool | None", values["color"]),
        uppercase=cast("bool", values["uppercase"]),
        layout=LayoutConfig(
            columns=cast("int | None", layout_values["columns"]),
            column_width=cast("int | None", layout_values["column_width"]),
            address=cast("bool | None", layout_values["address"]),
            ascii=cast("bool | None", layout_values["ascii"]),
        ),
    )


def load_config(path: Path | None = None) -> HexstreamConfig:
    """Load the TOML configuration file and apply environment overrides."""

    values = _default_values()
    config_path = resolve_config_path() if path is None else path
    if config_path.is_file():
        try:
            payload_obj = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as error:
            raise ConfigurationError(f"Invalid config file '{config_path}': {error}") from error
        _apply_toml_payload(values=values, payload=cast("dict[str, object]", payload_obj))

    _apply_env_overrides(values)
    return _build_config(values)


def with_overrides(
    config: HexstreamConfig,
    *,
    preset_name: str | None = None,
    color: bool | None = None,
    uppercase: bool | None = None,
    columns: int | None = None,
    column_width: int | None = None,
    address: bool | None = None,
    ascii: bool | None = None,
) -> HexstreamConfig:
    """Layer explicitly given values (command-line flags) over ``config``."""

    layout = config.layout
    layout = LayoutConfig(
        columns=layout.columns if columns is None else columns,
        column_width=layout.column_width if column_width is None else column_width,
        address=layout.address if address is None else address,
        ascii=layout.ascii if ascii is None else ascii,
    )
    return replace(
        config,
        preset=config.preset if preset_name is None else _coerce_preset(preset_name, source="preset"),
        color=config.color if color is None else color,
        uppercase=config.uppercase if uppercase is None else uppercase,
        layout=layout,
    )


def auto_color_enabled(stream: TextIO) -> bool:
    """Color by default only for terminals, and never when ``NO_COLOR`` is set."""

    if os.getenv("NO_COLOR"):
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def resolve_format(config: HexstreamConfig, *, color_default: bool) -> HexDumpFormat:
    """Build the dump format described by ``config``."""

    fmt = preset(config.preset)
    layout = config.layout
    if layout.columns is not None:
        fmt = fmt.with_data_column_count(layout.columns)
    if layout.column_width is not None:
        fmt = fmt.with_data_column_width_in_bytes(layout.column_width)
    if layout.address is not None:
        fmt = fmt.with_include_address_column(layout.address)
    if layout.ascii is not None:
        fmt = fmt.with_include_ascii_column(layout.ascii)
    fmt = fmt.with_alphabet(Alphabet.UPPER if config.uppercase else Alphabet.LOWER)
    return fmt.with_ansi(color_default if config.color is None else config.color)

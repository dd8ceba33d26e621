"""User configuration for the hexstream CLI."""

from hexstream.lib.config.settings import (
    HexstreamConfig,
    LayoutConfig,
    auto_color_enabled,
    load_config,
    resolve_config_path,
    resolve_format,
    with_overrides,
)

__all__ = [
    "HexstreamConfig",
    "LayoutConfig",
    "auto_color_enabled",
    "load_config",
    "resolve_config_path",
    "resolve_format",
    "with_overrides",
]

"""CLI output formatting utilities."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias, cast

from hexstream.lib.formatting import FormatContext, TextFormattable
from hexstream.lib.serialization import to_jsonable

OutputFormat = Literal["text", "json"]
JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


@dataclass(frozen=True, slots=True)
class OutputConfig:
    format: OutputFormat


def _to_json_value(value: Any) -> JSONValue:
    return cast("JSONValue", to_jsonable(value))


def normalize_output_format(*, requested: str | None, json_mode: bool) -> OutputFormat:
    """Resolve the final output format from ``--json`` and ``--format``."""

    if json_mode:
        return "json"
    if requested is None or requested == "":
        return "text"

    normalized = requested.strip().lower()
    if normalized in {"text", "json"}:
        return cast("OutputFormat", normalized)
    raise ValueError("--format must be one of: text, json")


def emit(value: Any, config: OutputConfig) -> None:
    """Emit one payload according to the configured output mode."""

    if config.format == "json":
        print(json.dumps(_to_json_value(value), sort_keys=True))
        return
    if isinstance(value, TextFormattable):
        print(value.format_text(FormatContext.for_terminal()))
    else:
        print(json.dumps(_to_json_value(value), sort_keys=True, indent=2))

"""Cyclopts CLI entry point for hexstream."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import structlog
from cyclopts import App, Parameter

from hexstream import __version__
from hexstream.cli.output import OutputConfig, emit, normalize_output_format
from hexstream.lib.config.settings import (
    auto_color_enabled,
    load_config,
    resolve_format,
    with_overrides,
)
from hexstream.lib.ops import config_show_sync, presets_list_sync
from hexstream.lib.sources import open_file_source, stdin_source
from hexstream.lib.stream import print_dump

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = structlog.get_logger(__name__)

STDIN_MARKER = "-"

app = App(
    name="hexstream",
    help="Print a hex dump of a file or standard input.",
    version=__version__,
)


def parse_count(raw: str, option: str, *, allow_negative: bool = False) -> int:
    """Parse a byte count given as decimal or with a 0x/0o/0b prefix."""

    text = raw.strip()
    try:
        value = int(text, 0)
    except ValueError:
        try:
            value = int(text, 10)
        except ValueError:
            raise ValueError(f"{option} expects an integer, got {raw!r}") from None
    if value < 0 and not allow_negative:
        raise ValueError(f"{option} must not be negative, got {raw!r}")
    return value


def _output_config(json_mode: bool, output_format: str | None) -> OutputConfig:
    return OutputConfig(format=normalize_output_format(requested=output_format, json_mode=json_mode))


@app.default
def dump(
    file: Annotated[
        str | None,
        Parameter(help="File to dump. Reads standard input when omitted or '-'."),
    ] = None,
    *,
    offset: Annotated[
        str,
        Parameter(name=["--offset", "-s"], help="Number of bytes to skip at start of input."),
    ] = "0",
    length: Annotated[
        str | None,
        Parameter(name=["--length", "-n"], help="Number of bytes to dump."),
    ] = None,
    color: Annotated[
        bool | None,
        Parameter(
            name="--color",
            help="Force colored output on or off. Defaults to on for terminals.",
        ),
    ] = None,
    preset_name: Annotated[
        str | None,
        Parameter(name="--preset", help="Starting layout preset (see `hexstream presets`)."),
    ] = None,
    columns: Annotated[
        int | None,
        Parameter(name=["--columns", "-c"], help="Number of data columns per line."),
    ] = None,
    column_width: Annotated[
        int | None,
        Parameter(name=["--column-width", "-w"], help="Bytes per data column."),
    ] = None,
    ascii_column: Annotated[
        bool | None,
        Parameter(name="--ascii", help="Show the ASCII preview column."),
    ] = None,
    address_column: Annotated[
        bool | None,
        Parameter(name="--address", help="Show the address column."),
    ] = None,
    uppercase: Annotated[
        bool | None,
        Parameter(name=["--uppercase", "-u"], help="Use uppercase hex digits."),
    ] = None,
    start_address: Annotated[
        str | None,
        Parameter(
            name="--start-address",
            help="Address printed for the first byte. Defaults to the --offset value.",
        ),
    ] = None,
) -> None:
    """Dump FILE (or standard input) as hex."""

    skip = parse_count(offset, "--offset")
    limit = None if length is None else parse_count(length, "--length")
    first_address = (
        skip
        if start_address is None
        else parse_count(start_address, "--start-address", allow_negative=True)
    )

    settings = with_overrides(
        load_config(),
        preset_name=preset_name,
        color=color,
        uppercase=uppercase,
        columns=columns,
        column_width=column_width,
        address=address_column,
        ascii=ascii_column,
    )
    fmt = (
        resolve_format(settings, color_default=auto_color_enabled(sys.stdout))
        .with_address_offset(first_address)
        .with_length_limit(limit)
    )

    from_stdin = file is None or file == STDIN_MARKER
    logger.info(
        "dump.start",
        file="<stdin>" if from_stdin else file,
        offset=skip,
        length=limit,
        preset=settings.preset,
        ansi=fmt.ansi_enabled,
    )
    if from_stdin:
        stats = print_dump(fmt, stdin_source(skip=skip))
    else:
        with open_file_source(Path(file), offset=skip) as source:
            stats = print_dump(fmt, source)
    logger.info("dump.finish", lines=stats.line_count, bytes=stats.byte_count)


@app.command(name="presets")
def presets(
    json_mode: Annotated[bool, Parameter(name="--json", help="Emit output as JSON.")] = False,
    output_format: Annotated[
        str | None,
        Parameter(name="--format", help="Set output format: text or json."),
    ] = None,
) -> None:
    """List the named layout presets."""

    emit(presets_list_sync(), _output_config(json_mode, output_format))


@app.command(name="config")
def show_config(
    json_mode: Annotated[bool, Parameter(name="--json", help="Emit output as JSON.")] = False,
    output_format: Annotated[
        str | None,
        Parameter(name="--format", help="Set output format: text or json."),
    ] = None,
) -> None:
    """Show the configuration file location and effective settings."""

    emit(config_show_sync(), _output_config(json_mode, output_format))


def _extract_verbosity(argv: Sequence[str]) -> tuple[list[str], int]:
    verbosity = 0
    cleaned: list[str] = []
    passthrough = False
    for arg in argv:
        if passthrough:
            cleaned.append(arg)
            continue
        if arg == "--":
            passthrough = True
            cleaned.append(arg)
            continue
        if arg == "--verbose":
            verbosity += 1
            continue
        if len(arg) > 1 and arg.startswith("-") and set(arg[1:]) == {"v"}:
            verbosity += len(arg) - 1
            continue
        cleaned.append(arg)
    return cleaned, verbosity


def _operation_error_message(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def _detach_stdout() -> None:
    # Point stdout at devnull so the interpreter's final flush cannot fail again.
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `hexstream` and `python -m hexstream`."""

    from hexstream.lib.logging import configure_logging

    args, verbosity = _extract_verbosity(sys.argv[1:] if argv is None else argv)
    configure_logging(json_mode=bool(os.getenv("HEXSTREAM_LOG_JSON")), verbosity=verbosity)

    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors="replace")

    try:
        app(args)
    except BrokenPipeError:
        _detach_stdout()
        raise SystemExit(0) from None
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except (KeyError, ValueError, OSError) as exc:
        print(f"error: {_operation_error_message(exc)}", file=sys.stderr)
        raise SystemExit(1) from None

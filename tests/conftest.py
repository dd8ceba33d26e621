"""Shared pytest fixtures for library and CLI checks."""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

PACKAGE_ROOT = Path(__file__).resolve().parents[1]

_ISOLATED_ENV = (
    "NO_COLOR",
    "XDG_CONFIG_HOME",
    "HEXSTREAM_CONFIG",
    "HEXSTREAM_PRESET",
    "HEXSTREAM_COLOR",
    "HEXSTREAM_UPPERCASE",
    "HEXSTREAM_COLUMNS",
    "HEXSTREAM_COLUMN_WIDTH",
    "HEXSTREAM_ADDRESS",
    "HEXSTREAM_ASCII",
    "HEXSTREAM_LOG_JSON",
)


@dataclass(frozen=True, slots=True)
class CliResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep the developer's own config file and environment out of every test."""

    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    config_path = tmp_path / "config" / "hexstream.toml"
    monkeypatch.setenv("HEXSTREAM_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def package_root() -> Path:
    return PACKAGE_ROOT


@pytest.fixture
def cli_env(package_root: Path, isolated_config: Path) -> dict[str, str]:
    env = os.environ.copy()
    existing = env.get("PYTHONPATH", "")
    root = str(package_root / "src")
    env["PYTHONPATH"] = root if not existing else f"{root}{os.pathsep}{existing}"
    env["PYTHONIOENCODING"] = "utf-8"
    env["COLUMNS"] = "80"
    env["HEXSTREAM_CONFIG"] = str(isolated_config)
    return env


@pytest.fixture
def run_hexstream(package_root: Path, cli_env: dict[str, str]) -> Callable[..., CliResult]:
    def _run(
        args: list[str],
        stdin: bytes = b"",
        env: dict[str, str] | None = None,
        timeout: float = 15.0,
    ) -> CliResult:
        completed = subprocess.run(
            [sys.executable, "-m", "hexstream", *args],
            cwd=package_root,
            env={**cli_env, **(env or {})},
            input=stdin,
            capture_output=True,
            check=False,
            timeout=timeout,
        )
        return CliResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout.decode("utf-8"),
            stderr=completed.stderr.decode("utf-8", errors="replace"),
        )

    return _run

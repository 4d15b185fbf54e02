"""``--env-file`` support for the CLI.

The service reads its settings (API key, port, database path) from the
environment. A deployment can keep them in a dotenv file instead and point
the CLI at it; the file is applied to ``os.environ`` before any subcommand
runs, so uvicorn and the app see the same values.
"""

from __future__ import annotations

import argparse
import io
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from dotenv import dotenv_values


def _env_file_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    parser.add_argument("--env-file", action="append", default=[], dest="env_files")
    return parser


def extract_env_files(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Pull every ``--env-file`` (either form, any position) out of argv."""

    known, remaining = _env_file_parser().parse_known_args(list(argv))
    return known.env_files, remaining


def parse_env_file_text(text: str) -> dict[str, str]:
    """Parse dotenv text; bare keys without a value are dropped."""

    values = dotenv_values(stream=io.StringIO(text), interpolate=False)
    return {key: value for key, value in values.items() if value is not None}


def _anchor_path(key: str, value: str, base_dir: Path) -> str:
    # SUPPORTCHAT_*_PATH / *_DIR values are relative to the env file.
    if not (key.startswith("SUPPORTCHAT_") and key.endswith(("_PATH", "_DIR"))):
        return value
    if not value or "://" in value or value.startswith("sqlite:"):
        return value
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return str(path.resolve())


def load_env_file(path: str | Path, *, override: bool = True) -> dict[str, str]:
    resolved = Path(path).expanduser()
    if not resolved.is_file():
        raise SystemExit(f"--env-file does not exist: {resolved}")

    base_dir = resolved.resolve().parent
    loaded = {
        key: _anchor_path(key, value, base_dir)
        for key, value in parse_env_file_text(resolved.read_text(encoding="utf-8")).items()
    }
    for key, value in loaded.items():
        if override or key not in os.environ:
            os.environ[key] = value
    return loaded


def load_env_files(paths: Iterable[str | Path], *, override: bool = True) -> dict[str, str]:
    """Apply env files in order; with ``override`` later files win."""

    merged: dict[str, str] = {}
    for path in paths:
        merged.update(load_env_file(path, override=override))
    return merged

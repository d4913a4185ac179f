"""black handler for tidygate."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

NAME = "black"

DEFAULTS: dict[str, str | list[str]] = {
    "fixer_path": "black",
    "extra_args": [],
}

SUCCESS_CODES = frozenset({0})


def build_command(options: Mapping[str, str | list[str]], target: Path) -> list[str]:
    return [options["fixer_path"], "--quiet", *options["extra_args"], str(target)]

"""
Ruff formatter handler for tidygate.

Runs ``ruff format``; the linter's ``--fix`` is not a formatter and is not used.
An empty ``config_path`` lets ruff discover its own configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

NAME = "ruff"

DEFAULTS: dict[str, str | list[str]] = {
    "fixer_path": "ruff",
    "config_path": "",
    "extra_args": [],
}

SUCCESS_CODES = frozenset({0})


def build_command(options: Mapping[str, str | list[str]], target: Path) -> list[str]:
    argv = [options["fixer_path"], "format", "--quiet"]
    if options["config_path"]:
        argv += ["--config", options["config_path"]]
    return [*argv, *options["extra_args"], str(target)]

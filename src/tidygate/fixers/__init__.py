"""
External formatters tidygate can replay.

Each fixer module exports:
- NAME: str - the key used in ``fixer_config``
- DEFAULTS: dict - option names, default values and, through them, types
- SUCCESS_CODES: frozenset[int] - exit codes meaning "ran fine"
- build_command(options, target) -> list[str] - argv to run, never a shell string

The table below is closed: a name that is not in it is a configuration error.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import structlog

from tidygate.core.errors import ConfigurationError, FixerInvocationError
from tidygate.fixers import black, php_cs_fixer, phpcbf, ruff

log = structlog.get_logger(__name__)

OptionValue = str | list[str]


class Fixer(Protocol):
    """Protocol for fixer modules."""

    NAME: str
    DEFAULTS: dict[str, OptionValue]
    SUCCESS_CODES: frozenset[int]

    def build_command(self, options: Mapping[str, OptionValue], target: Path) -> list[str]:
        """Return the argv that formats ``target`` in place."""
        ...


FIXERS: dict[str, Fixer] = {
    module.NAME: module for module in (php_cs_fixer, phpcbf, black, ruff)
}


def get_fixer(name: str) -> Fixer:
    """Look up a fixer by name. Raises ConfigurationError if unknown."""
    try:
        return FIXERS[name]
    except KeyError:
        raise ConfigurationError(
            f'Invalid fixer name "{name}". Known fixers: {", ".join(sorted(FIXERS))}'
        ) from None


def _type_name(value: Any) -> str:
    return {str: "string", list: "array", bool: "boolean", int: "integer"}.get(
        type(value), type(value).__name__
    )


def resolve_options(name: str, options: Mapping[str, Any]) -> dict[str, OptionValue]:
    """Validate ``options`` against the fixer's schema and merge over defaults.

    Unknown keys and values whose type differs from the default's type are
    configuration errors.
    """
    defaults = get_fixer(name).DEFAULTS
    for key, value in options.items():
        if key not in defaults:
            raise ConfigurationError(f'Unrecognized config value "{key}" for fixer "{name}".')
        expected = defaults[key]
        if type(value) is not type(expected):
            raise ConfigurationError(
                f'Invalid type for config value "{key}" of fixer "{name}": '
                f"expected {_type_name(expected)}, received {_type_name(value)}."
            )
        if isinstance(value, list) and not all(isinstance(item, str) for item in value):
            raise ConfigurationError(
                f'Invalid type for config value "{key}" of fixer "{name}": '
                "expected an array of strings."
            )
    return {**defaults, **options}


def apply_fixer(
    name: str,
    file_path: Path,
    options: Mapping[str, OptionValue],
    cwd: Path | None = None,
) -> None:
    """Run fixer ``name`` on ``file_path``, rewriting it in place.

    Relative ``fixer_path`` and ``config_path`` values resolve against ``cwd``.
    """
    fixer = get_fixer(name)
    argv = fixer.build_command(options, file_path)
    log.debug("fixer_start", fixer=name, argv=argv, cwd=str(cwd) if cwd else None)
    try:
        proc = subprocess.run(argv, cwd=cwd, capture_output=True)
    except OSError as e:
        raise FixerInvocationError(name, str(e)) from e
    if proc.returncode not in fixer.SUCCESS_CODES:
        output = os.fsdecode(proc.stderr).strip() or os.fsdecode(proc.stdout).strip()
        raise FixerInvocationError(name, output)
    log.debug("fixer_applied", fixer=name, returncode=proc.returncode)

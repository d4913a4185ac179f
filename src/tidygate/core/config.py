"""tidygate configuration and logging setup."""

from __future__ import annotations

import copy
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from tidygate.core.errors import ConfigurationError
from tidygate.fixers import resolve_options

USER_CONFIG = Path.home() / ".tidygate" / "config.toml"
PROJECT_CONFIG_NAME = ".tidygate.toml"
ENV_CONFIG = "TIDYGATE_CONFIG"

# Config scopes in priority order (lowest to highest)
SCOPE_USER = "user"
SCOPE_PROJECT = "project"
SCOPE_ENV = "env"

CHECK_WHITESPACE = "whitespace"
CHECK_FORMATTING = "formatting"
CHECK_FORMAT_PHP = "format_php"

# Per-check option schema. The default's type is the only accepted type.
CHECK_DEFAULTS: dict[str, dict[str, Any]] = {
    CHECK_WHITESPACE: {
        "triggered_by": ["php", "phtml", "xml", "yml", "js", "less", "css"],
    },
    CHECK_FORMATTING: {
        "triggered_by": ["php", "phtml"],
        "fixer_config": {},
    },
    CHECK_FORMAT_PHP: {
        "triggered_by": ["php", "phtml"],
        "fixer_path": "php-cs-fixer",
        "config_path": ".php-cs-fixer.dist.php",
    },
}

TOP_LEVEL_DEFAULTS: dict[str, Any] = {
    "checks": [CHECK_WHITESPACE],
    "jobs": 1,
    "log": "",
    "verbose": False,
}

_TYPE_NAMES = {str: "string", list: "array", dict: "table", bool: "boolean", int: "integer"}


def _type_name(value: Any) -> str:
    return _TYPE_NAMES.get(type(value), type(value).__name__)


@dataclass
class Config:
    """Parsed configuration."""

    checks: list[str] = field(default_factory=lambda: [CHECK_WHITESPACE])
    """Checks to run, in order."""

    jobs: int = 1
    log: Path | None = None  # None = log warnings to stderr only
    verbose: bool = False

    options: dict[str, dict[str, Any]] = field(
        default_factory=lambda: copy.deepcopy(CHECK_DEFAULTS)
    )
    """Per-check options, merged over CHECK_DEFAULTS. ``fixer_config`` is resolved."""

    sources: list[str] = field(default_factory=list)
    """Config files that contributed, lowest priority first."""


# === Validation ===


def _check_type(key: str, value: Any, expected: Any, where: str) -> None:
    if type(value) is not type(expected):
        raise ConfigurationError(
            f'{where}: invalid type for "{key}": expected {_type_name(expected)}, '
            f"received {_type_name(value)}"
        )
    if isinstance(value, list) and not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f'{where}: "{key}" must be an array of strings')


def _validate_fixer_config(fixer_config: dict[str, Any], where: str) -> None:
    for name, options in fixer_config.items():
        if not isinstance(options, dict):
            raise ConfigurationError(
                f'{where}: fixer "{name}" must be a table, received {_type_name(options)}'
            )
        try:
            resolve_options(name, options)
        except ConfigurationError as e:
            raise ConfigurationError(f"{where}: {e}") from None


def validate(raw: dict[str, Any], source: str) -> None:
    """Check a parsed config table against the schema. Raises ConfigurationError."""
    for key, value in raw.items():
        if key in CHECK_DEFAULTS:
            where = f"{source} [{key}]"
            if not isinstance(value, dict):
                raise ConfigurationError(f"{where}: must be a table")
            defaults = CHECK_DEFAULTS[key]
            for option, option_value in value.items():
                if option not in defaults:
                    raise ConfigurationError(f'{where}: unrecognized option "{option}"')
                _check_type(option, option_value, defaults[option], where)
            if "fixer_config" in value:
                _validate_fixer_config(value["fixer_config"], where)
        elif key in TOP_LEVEL_DEFAULTS:
            _check_type(key, value, TOP_LEVEL_DEFAULTS[key], source)
        else:
            raise ConfigurationError(f'{source}: unrecognized setting "{key}"')

    for name in raw.get("checks", []):
        if name not in CHECK_DEFAULTS:
            raise ConfigurationError(
                f'{source}: unknown check "{name}". '
                f"Known checks: {', '.join(CHECK_DEFAULTS)}"
            )
    if "jobs" in raw and raw["jobs"] < 1:
        raise ConfigurationError(f'{source}: "jobs" must be at least 1')


# === Loading ===


def parse_config(text: str, source: str = "<string>") -> dict[str, Any]:
    """Parse and validate TOML config text. Returns the raw table."""
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"{source}: {e}") from None
    validate(raw, source)
    return raw


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base. Tables merge recursively, everything else overlay wins."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_config(raw: dict[str, Any], sources: list[str] | None = None) -> Config:
    """Turn a validated (possibly merged) table into a Config."""
    options = copy.deepcopy(CHECK_DEFAULTS)
    for name in CHECK_DEFAULTS:
        options[name].update(copy.deepcopy(raw.get(name, {})))
    fixer_config = options[CHECK_FORMATTING]["fixer_config"]
    options[CHECK_FORMATTING]["fixer_config"] = {
        name: resolve_options(name, fixer_options)
        for name, fixer_options in fixer_config.items()
    }

    log_path = raw.get("log", "")
    return Config(
        checks=list(raw.get("checks", TOP_LEVEL_DEFAULTS["checks"])),
        jobs=raw.get("jobs", 1),
        log=Path(log_path).expanduser() if log_path else None,
        verbose=raw.get("verbose", False),
        options=options,
        sources=list(sources or []),
    )


def _find_project_config(cwd: Path) -> Path | None:
    """Walk up from cwd to find .tidygate.toml."""
    current = cwd.resolve()
    while True:
        candidate = current / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:  # reached root
            return None
        current = parent


def _read(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"{path}: {e.strerror}") from None
    return parse_config(text, str(path))


def config_paths(cwd: Path) -> list[tuple[str, Path]]:
    """Existing config files as (scope, path), lowest priority first."""
    found = []
    if USER_CONFIG.is_file():
        found.append((SCOPE_USER, USER_CONFIG))
    project_path = _find_project_config(cwd)
    if project_path is not None:
        found.append((SCOPE_PROJECT, project_path))
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        env_config_path = Path(env_path).expanduser()
        if not env_config_path.is_file():
            raise ConfigurationError(f"${ENV_CONFIG} points to a missing file: {env_config_path}")
        found.append((SCOPE_ENV, env_config_path))
    return found


def load_config(cwd: Path, explicit: Path | None = None) -> Config:
    """Load config from ~/.tidygate/config.toml, .tidygate.toml and $TIDYGATE_CONFIG.

    An explicit path replaces discovery entirely.
    """
    if explicit is not None:
        paths = [explicit]
    else:
        paths = [path for _, path in config_paths(cwd)]

    raw: dict[str, Any] = {}
    for path in paths:
        raw = _merge(raw, _read(path))
    return build_config(raw, [str(p) for p in paths])


# === Logging ===


def _configure_stderr(level: int) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def ensure_quiet_logging() -> None:
    """Keep library callers that never configured logging down to warnings on stderr."""
    if not structlog.is_configured():
        _configure_stderr(logging.WARNING)


def configure_logging(config: Config) -> None:
    """Configure structlog from config settings. Call once at startup.

    With a log path, every event is appended there as a JSON line. Without
    one, only warnings (or everything, when verbose) go to stderr. A log file
    that cannot be opened falls back to stderr; logging never fails the hook.
    """
    stderr_level = logging.DEBUG if config.verbose else logging.WARNING
    if config.log is None:
        _configure_stderr(stderr_level)
        return

    try:
        config.log.parent.mkdir(parents=True, exist_ok=True)
        stream = config.log.open("a", encoding="utf-8")
    except OSError as e:
        _configure_stderr(stderr_level)
        structlog.get_logger(__name__).warning(
            "log_unavailable", path=str(config.log), error=e.strerror or str(e)
        )
        return

    level = logging.DEBUG if config.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
    )

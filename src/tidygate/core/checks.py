"""
The commit-msg checks.

Each check takes the commit message and the staged files, narrows the files
to its ``triggered_by`` extensions, classifies them and returns a Verdict.

- whitespace: whitespace-insensitive line counts, tag ``[Whitespace]``
- formatting: replay every fixer in ``fixer_config``, tag ``[Format]``
- format_php: formatting with a single php-cs-fixer, tag ``[Format]``
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog

from tidygate.core import tags
from tidygate.core.config import (
    CHECK_FORMAT_PHP,
    CHECK_FORMATTING,
    CHECK_WHITESPACE,
    Config,
)
from tidygate.core.errors import FixerInvocationError, PatternEngineError, ReconstructionError
from tidygate.core.formatting import FixerConfig, FormattingDeltaAnalyzer
from tidygate.core.git import Git
from tidygate.core.model import StagedFile, filter_extensions
from tidygate.core.policy import (
    FORMATTING_WORDING,
    SKIP,
    WHITESPACE_WORDING,
    Verdict,
    decide,
    fail,
    new_files_under_tag,
)
from tidygate.core.whitespace import WhitespaceDeltaAnalyzer
from tidygate.fixers import php_cs_fixer, resolve_options

log = structlog.get_logger(__name__)

# Failures that end a run with a failed verdict rather than an exception
RUN_ERRORS = (ReconstructionError, FixerInvocationError, PatternEngineError)


@dataclass(frozen=True)
class CheckContext:
    """Everything a check needs for one hook invocation."""

    message: str
    files: tuple[StagedFile, ...]
    git: Git
    config: Config


def check_whitespace(ctx: CheckContext) -> Verdict:
    options = ctx.config.options[CHECK_WHITESPACE]
    files = filter_extensions(ctx.files, options["triggered_by"])
    if not files:
        return SKIP

    try:
        tagged = tags.has_tag(ctx.message, tags.WHITESPACE)
        classifications = WhitespaceDeltaAnalyzer(ctx.git).classify(files)
    except RUN_ERRORS as e:
        return fail(str(e))

    return decide(tagged, classifications, WHITESPACE_WORDING)


def _check_fixers(
    ctx: CheckContext, triggered_by: Sequence[str], fixers: list[FixerConfig]
) -> Verdict:
    files = filter_extensions(ctx.files, triggered_by)
    if not files:
        return SKIP

    try:
        tagged = tags.has_tag(ctx.message, tags.FORMAT)
        analyzer = FormattingDeltaAnalyzer(ctx.git, fixers, jobs=ctx.config.jobs)
        new_paths = analyzer.newly_added(files)
        if tagged and new_paths:
            return new_files_under_tag(new_paths)
        classifications = analyzer.classify(files, new_paths)
    except RUN_ERRORS as e:
        return fail(str(e))

    return decide(tagged, classifications, FORMATTING_WORDING)


def check_formatting(ctx: CheckContext) -> Verdict:
    options = ctx.config.options[CHECK_FORMATTING]
    fixer_config = options["fixer_config"]
    if not fixer_config:
        return SKIP
    fixers = [FixerConfig(name, fixer_options) for name, fixer_options in fixer_config.items()]
    return _check_fixers(ctx, options["triggered_by"], fixers)


def check_format_php(ctx: CheckContext) -> Verdict:
    options = ctx.config.options[CHECK_FORMAT_PHP]
    fixer_options = resolve_options(
        php_cs_fixer.NAME,
        {"fixer_path": options["fixer_path"], "config_path": options["config_path"]},
    )
    return _check_fixers(
        ctx, options["triggered_by"], [FixerConfig(php_cs_fixer.NAME, fixer_options)]
    )


CHECKS: dict[str, Callable[[CheckContext], Verdict]] = {
    CHECK_WHITESPACE: check_whitespace,
    CHECK_FORMATTING: check_formatting,
    CHECK_FORMAT_PHP: check_format_php,
}


def run_checks(ctx: CheckContext, names: Sequence[str] | None = None) -> list[tuple[str, Verdict]]:
    """Run the named checks (default: the configured ones) in order."""
    results = []
    for name in names if names is not None else ctx.config.checks:
        verdict = CHECKS[name](ctx)
        log.info(
            "verdict",
            check=name,
            status=verdict.status,
            offending_paths=list(verdict.offending_paths),
        )
        results.append((name, verdict))
    return results

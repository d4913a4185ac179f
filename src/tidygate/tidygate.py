"""git commit-msg hook that keeps cosmetic changes out of functional commits.

Install as ``.git/hooks/commit-msg`` (or call from an existing hook):

    #!/bin/sh
    exec tidygate "$1"

Each enabled check classifies the staged files it is triggered by as
functional or cosmetic and compares that with the tag in the commit message:

┌────────────┬────────────────────┬─────────────────────────────────────────┐
│ check      │ tag                │ cosmetic means                          │
├────────────┼────────────────────┼─────────────────────────────────────────┤
│ whitespace │ ABC-1 [Whitespace] │ no line changes once whitespace ignored │
│ formatting │ ABC-1 [Format]     │ a configured fixer reproduces the index │
│ format_php │ ABC-1 [Format]     │ php-cs-fixer reproduces the index       │
└────────────┴────────────────────┴─────────────────────────────────────────┘

Exit codes:
- 0: every check passed or was skipped.
- 1: at least one check failed, or the commit message or staged files could
  not be read. Messages are written to stderr.
- 2: configuration error.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog

from tidygate.core.checks import CHECKS, CheckContext, run_checks
from tidygate.core.config import Config, configure_logging, ensure_quiet_logging, load_config
from tidygate.core.errors import ConfigurationError, ReconstructionError
from tidygate.core.git import Git
from tidygate.core.model import StagedFile
from tidygate.core.policy import Verdict

log = structlog.get_logger(__name__)

SCISSORS = "# ------------------------ >8 ------------------------"


def read_commit_message(path: Path) -> str:
    """Read a commit message file, dropping comment lines and anything below the scissors."""
    lines = []
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        if line == SCISSORS:
            break
        if line.startswith("#"):
            continue
        lines.append(line)
    return "\n".join(lines)


def staged_files(git: Git) -> tuple[StagedFile, ...]:
    return tuple(StagedFile.from_path(path) for path in git.staged_paths())


def check_commit(
    message: str,
    files: tuple[StagedFile, ...],
    config: Config,
    cwd: Path | None = None,
    checks: list[str] | None = None,
) -> list[tuple[str, Verdict]]:
    """Run the configured checks against a commit message and staged files."""
    ensure_quiet_logging()
    ctx = CheckContext(message=message, files=tuple(files), git=Git(cwd), config=config)
    return run_checks(ctx, checks)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tidygate",
        description="Keep whitespace and formatting changes out of functional commits.",
    )
    parser.add_argument("message_file", type=Path, help="commit message file (passed by git)")
    parser.add_argument("--config", type=Path, help="config file, instead of discovery")
    parser.add_argument(
        "--check",
        action="append",
        choices=sorted(CHECKS),
        help="check to run (repeatable); overrides the configured list",
    )
    parser.add_argument("--jobs", type=int, help="files to classify concurrently")
    parser.add_argument("--verbose", action="store_true", help="log every step")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    cwd = Path.cwd()

    try:
        config = load_config(cwd, args.config)
        if args.jobs is not None:
            if args.jobs < 1:
                raise ConfigurationError("--jobs must be at least 1")
            config.jobs = args.jobs
    except ConfigurationError as e:
        print(f"tidygate: configuration error: {e}", file=sys.stderr)
        return 2
    if args.verbose:
        config.verbose = True
    configure_logging(config)

    try:
        message = read_commit_message(args.message_file)
    except OSError as e:
        print(
            f"tidygate: cannot read commit message {args.message_file}: {e.strerror or e}",
            file=sys.stderr,
        )
        return 1
    git = Git(cwd)
    try:
        files = staged_files(git)
    except ReconstructionError as e:
        print(f"tidygate: {e}", file=sys.stderr)
        return 1
    log.info("run", sources=config.sources, checks=args.check or config.checks, files=len(files))

    results = run_checks(
        CheckContext(message=message, files=files, git=git, config=config), args.check
    )

    failed = False
    for name, verdict in results:
        if verdict.failed:
            failed = True
            print(f"tidygate [{name}]: {verdict.message}", file=sys.stderr)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

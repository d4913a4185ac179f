"""
Git queries used by the analyzers.

All process invocation goes through a Git instance that callers pass in
explicitly. Each query states which exit codes it trusts:

- show / newly_added / staged_paths: non-zero means the query failed.
- numstat: non-zero means the query failed. A zero exit says nothing about
  whether differences exist (``--exit-code`` is not reliable without
  ``--quiet``), so the output is always parsed.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Sequence

import structlog

from tidygate.core.errors import ReconstructionError

log = structlog.get_logger(__name__)


class Ref(Enum):
    """Which version of a path to read."""

    HEAD = "HEAD"  # last committed
    STAGED = ":0"  # index, stage 0

    def object_name(self, path: str) -> str:
        return f"{self.value}:{path}"


@dataclass(frozen=True)
class DiffStatLine:
    """One ``--numstat`` record."""

    added: int
    removed: int
    path: str
    binary: bool = False

    @property
    def unchanged(self) -> bool:
        """True when no line was added or removed."""
        return not self.binary and self.added == 0 and self.removed == 0


def _split_nul(output: bytes) -> list[str]:
    """Split NUL-separated git output, dropping empty records."""
    return [os.fsdecode(record) for record in output.split(b"\0") if record]


def parse_numstat(output: bytes) -> list[DiffStatLine]:
    """Parse ``git diff --numstat -z`` output.

    Records look like ``<added>\\t<removed>\\t<path>``. Binary files report
    ``-`` for both counts. Records with an empty path are skipped.
    """
    lines = []
    for record in _split_nul(output):
        parts = record.split("\t", 2)
        if len(parts) != 3 or not parts[2]:
            continue
        added, removed, path = parts
        if added == "-" or removed == "-":
            lines.append(DiffStatLine(0, 0, path, binary=True))
        else:
            lines.append(DiffStatLine(int(added), int(removed), path))
    return lines


class Git:
    """Runs git in a working tree.

    Args:
        cwd: Directory git runs in. Defaults to the process working directory.
        executable: git binary to invoke.
    """

    def __init__(self, cwd: Path | None = None, executable: str = "git"):
        self.cwd = cwd
        self.executable = executable

    def _run(
        self,
        args: Sequence[str],
        failure: str,
        stdout: int | BinaryIO = subprocess.PIPE,
    ) -> bytes:
        argv = [self.executable, *args]
        log.debug("git", argv=argv)
        try:
            proc = subprocess.run(
                argv,
                cwd=self.cwd,
                stdout=stdout,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ReconstructionError(failure, str(e)) from e
        if proc.returncode != 0:
            raise ReconstructionError(failure, os.fsdecode(proc.stderr).strip())
        return proc.stdout or b""

    def show(self, path: str, ref: Ref, dest: BinaryIO) -> None:
        """Write the exact bytes of ``path`` at ``ref`` into ``dest``."""
        if ref is Ref.HEAD:
            failure = "Failed to retrieve the last committed version of the file"
        else:
            failure = "Failed to retrieve the staged version of the file"
        self._run(["show", ref.object_name(path)], failure, stdout=dest)

    def numstat(self, paths: Sequence[str]) -> list[DiffStatLine]:
        """Staged-vs-HEAD line counts with all whitespace differences ignored.

        ``--name-only`` is deliberately absent: it makes git drop
        ``--ignore-all-space``.
        """
        output = self._run(
            [
                "diff",
                "--cached",
                "--numstat",
                "--ignore-all-space",
                "--no-renames",
                "-z",
                "--",
                *paths,
            ],
            "Failed to compare staged changes",
        )
        return parse_numstat(output)

    def newly_added(self, paths: Sequence[str]) -> list[str]:
        """Paths among ``paths`` that do not exist in HEAD."""
        output = self._run(
            [
                "diff",
                "--cached",
                "--name-only",
                "--no-renames",
                "-z",
                "--diff-filter=A",
                "--",
                *paths,
            ],
            "Failed to identify newly added files",
        )
        return _split_nul(output)

    def staged_paths(self) -> list[str]:
        """Added, copied or modified paths in the index, in git's order."""
        output = self._run(
            [
                "diff",
                "--cached",
                "--name-only",
                "--no-renames",
                "-z",
                "--diff-filter=ACM",
            ],
            "Failed to list staged files",
        )
        return _split_nul(output)

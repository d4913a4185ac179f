"""
Formatting-only change detection.

For each file that already exists in HEAD, the committed version is replayed
through each configured fixer; if any fixer's output is byte-identical to the
staged version, the staged change is nothing but formatting. Files that are
new to the repository can never be formatting-only.
"""

from __future__ import annotations

import concurrent.futures
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import structlog

from tidygate.core.git import Git, Ref
from tidygate.core.model import COSMETIC, FUNCTIONAL, Classification, StagedFile
from tidygate.core.snapshot import ContentSnapshotter, digest_file
from tidygate.fixers import OptionValue, apply_fixer

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FixerConfig:
    """A fixer name with its resolved options."""

    name: str
    options: Mapping[str, OptionValue]


class FormattingDeltaAnalyzer:
    """Classifies files by replaying approved fixers over HEAD.

    Args:
        git: Git collaborator used for every query.
        fixers: Fixers to try, in priority order. The first match wins.
        jobs: Number of files classified concurrently.
    """

    def __init__(self, git: Git, fixers: Sequence[FixerConfig], jobs: int = 1):
        self.git = git
        self.snapshotter = ContentSnapshotter(git)
        self.fixers = list(fixers)
        self.jobs = max(1, jobs)

    def newly_added(self, files: Sequence[StagedFile]) -> list[str]:
        """Paths among ``files`` that have no committed version, in input order."""
        if not files:
            return []
        added = set(self.git.newly_added([f.path for f in files]))
        return [f.path for f in files if f.path in added]

    def fixed_digest(self, path: str, fixer: FixerConfig) -> bytes:
        """Digest of the committed ``path`` after running ``fixer`` over it."""
        with self.snapshotter.materialize(path, Ref.HEAD) as copy:
            apply_fixer(fixer.name, copy, fixer.options, cwd=self.git.cwd)
            return digest_file(copy)

    def classify_file(self, path: str) -> Classification:
        staged = self.snapshotter.snapshot(path, Ref.STAGED)
        for fixer in self.fixers:
            if self.fixed_digest(path, fixer) == staged:
                return Classification(path, COSMETIC, fixer.name)
        return Classification(path, FUNCTIONAL, "no fixer reproduces the staged content")

    def classify(
        self, files: Sequence[StagedFile], new_paths: Sequence[str] | None = None
    ) -> list[Classification]:
        """Classify ``files`` in input order.

        ``new_paths`` may be passed when the caller already ran newly_added().
        """
        if new_paths is None:
            new_paths = self.newly_added(files)
        new = set(new_paths)
        existing = [f.path for f in files if f.path not in new]

        if self.jobs > 1 and len(existing) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.jobs) as executor:
                # map() yields in submission order; the first exception propagates
                by_path = dict(zip(existing, executor.map(self.classify_file, existing)))
        else:
            by_path = {path: self.classify_file(path) for path in existing}

        results = []
        for f in files:
            if f.path in new:
                result = Classification(f.path, FUNCTIONAL, "new file")
            else:
                result = by_path[f.path]
            log.debug("classified", path=f.path, kind=result.kind, evidence=result.evidence)
            results.append(result)
        return results

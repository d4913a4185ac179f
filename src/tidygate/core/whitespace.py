"""
Whitespace-only change detection.

One bulk ``git diff --cached --numstat --ignore-all-space`` query covers every
file. With all whitespace ignored, a line whose only change is whitespace adds
and removes nothing, so a file is cosmetic exactly when both counts are zero.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from tidygate.core.git import Git
from tidygate.core.model import COSMETIC, FUNCTIONAL, Classification, StagedFile

log = structlog.get_logger(__name__)


class WhitespaceDeltaAnalyzer:
    def __init__(self, git: Git):
        self.git = git

    def classify(self, files: Sequence[StagedFile]) -> list[Classification]:
        """Classify ``files`` in input order."""
        if not files:
            return []
        stats = {line.path: line for line in self.git.numstat([f.path for f in files])}

        results = []
        for f in files:
            line = stats.get(f.path)
            if line is None:
                # git reports nothing when no line differs at all (mode-only change)
                result = Classification(f.path, COSMETIC, "+0 -0")
            elif line.binary:
                result = Classification(f.path, FUNCTIONAL, "binary")
            else:
                kind = COSMETIC if line.unchanged else FUNCTIONAL
                result = Classification(f.path, kind, f"+{line.added} -{line.removed}")
            log.debug("classified", path=f.path, kind=result.kind, evidence=result.evidence)
            results.append(result)
        return results

"""Values passed between the analyzers and the decision policy."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, Literal

FUNCTIONAL = "functional"
COSMETIC = "cosmetic"


@dataclass(frozen=True)
class StagedFile:
    """A path touched by the commit, relative to the repository root."""

    path: str
    extension: str

    @classmethod
    def from_path(cls, path: str) -> "StagedFile":
        return cls(path, PurePosixPath(path).suffix.lstrip(".").lower())


@dataclass(frozen=True)
class Classification:
    """How one staged file was classified, with the evidence for it."""

    path: str
    kind: Literal["functional", "cosmetic"]
    evidence: str = ""  # fixer name, "+3 -1", "new file"

    @property
    def cosmetic(self) -> bool:
        return self.kind == COSMETIC


def filter_extensions(files: Iterable[StagedFile], extensions: Iterable[str]) -> list[StagedFile]:
    """Keep files whose extension is in ``extensions``, preserving order."""
    allowed = {e.lstrip(".").lower() for e in extensions}
    return [f for f in files if f.extension in allowed]

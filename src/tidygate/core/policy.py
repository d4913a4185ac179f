"""
Reconciles the commit message tag with the per-file classification.

    tag  functional  cosmetic   verdict
    ---  ----------  --------   -------------------------------------
    yes  some        -          fail: non-cosmetic changes listed
    yes  none        -          pass
    no   none        -          fail: add the tag
    no   some        some       fail: cosmetic-only files listed
    no   some        none       pass

The whitespace and formatting checks share the table; only the wording differs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from tidygate.core.model import Classification
from tidygate.core.tags import display_text


@dataclass(frozen=True)
class Verdict:
    """Outcome of one check."""

    status: Literal["pass", "fail", "skip"]
    message: str = ""
    offending_paths: tuple[str, ...] = ()

    def __repr__(self) -> str:
        return f"Verdict({self.status!r}, {self.message!r})"

    @property
    def failed(self) -> bool:
        return self.status == "fail"


PASS = Verdict("pass")
SKIP = Verdict("skip")


def fail(message: str, paths: Sequence[str] = ()) -> Verdict:
    """A failed verdict; ``paths`` are appended to the message, one per line."""
    if paths:
        message = message + "\n" + "\n".join(paths)
    return Verdict("fail", message, tuple(paths))


@dataclass(frozen=True)
class Wording:
    """How a category is described in verdict messages."""

    kind: str  # "whitespace" | "formatting"
    category: str  # tag category, e.g. "Format"


WHITESPACE_WORDING = Wording("whitespace", "Whitespace")
FORMATTING_WORDING = Wording("formatting", "Format")


def decide(
    tag_present: bool, classifications: Sequence[Classification], wording: Wording
) -> Verdict:
    """Apply the decision table to ``classifications`` (in reporting order)."""
    if not classifications:
        return SKIP

    functional = [c.path for c in classifications if not c.cosmetic]
    cosmetic = [c.path for c in classifications if c.cosmetic]
    kind = wording.kind

    if tag_present:
        if functional:
            return fail(
                f"Non-{kind} changes detected in commit marked {kind} only. "
                f"Please unstage the files with non-{kind} changes:",
                functional,
            )
        return PASS

    if not functional:
        return fail(
            f"The staged changes only differ in {kind}. "
            f'Please mark the commit with "{display_text(wording.category)}" '
            "after the issue number for ease of auditing."
        )
    if cosmetic:
        return fail(
            f"{kind.capitalize()}-only changes detected in commit not marked as {kind} only. "
            f"Please unstage the files with {kind}-only changes:",
            cosmetic,
        )
    return PASS


def new_files_under_tag(new_paths: Sequence[str]) -> Verdict:
    """Failure for a formatting-only commit that adds files."""
    return fail(
        "The commit is marked as formatting-only, but some staged files are new to the repository:",
        new_paths,
    )

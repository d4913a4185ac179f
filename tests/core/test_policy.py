"""Tests for the decision table."""

import pytest

from tidygate.core.model import COSMETIC, FUNCTIONAL, Classification
from tidygate.core.policy import (
    FORMATTING_WORDING,
    WHITESPACE_WORDING,
    Verdict,
    decide,
    fail,
    new_files_under_tag,
)

F = Classification("f.php", FUNCTIONAL)
G = Classification("g.php", FUNCTIONAL)
C = Classification("c.php", COSMETIC)
D = Classification("d.php", COSMETIC)

TESTS = [
    # tag, classifications, status, offending paths
    (True, [F, C], "fail", ("f.php",)),
    (True, [F, G], "fail", ("f.php", "g.php")),
    (True, [C, D], "pass", ()),
    (False, [C, D], "fail", ()),
    (False, [C, F, D], "fail", ("c.php", "d.php")),
    (False, [F, G], "pass", ()),
    (True, [], "skip", ()),
    (False, [], "skip", ()),
]


@pytest.mark.parametrize("tagged,classifications,status,paths", TESTS)
def test_decision_table(tagged, classifications, status, paths):
    verdict = decide(tagged, classifications, FORMATTING_WORDING)
    assert verdict.status == status
    assert verdict.offending_paths == paths


def test_tagged_with_functional_message():
    verdict = decide(True, [C, F], FORMATTING_WORDING)
    assert verdict.message == (
        "Non-formatting changes detected in commit marked formatting only. "
        "Please unstage the files with non-formatting changes:\nf.php"
    )


def test_untagged_all_cosmetic_message():
    verdict = decide(False, [C], WHITESPACE_WORDING)
    assert verdict.message == (
        "The staged changes only differ in whitespace. Please mark the commit with "
        '"[Whitespace]" after the issue number for ease of auditing.'
    )


def test_untagged_mixed_message():
    verdict = decide(False, [F, C, D], WHITESPACE_WORDING)
    assert verdict.message == (
        "Whitespace-only changes detected in commit not marked as whitespace only. "
        "Please unstage the files with whitespace-only changes:\nc.php\nd.php"
    )


def test_new_files_under_tag():
    verdict = new_files_under_tag(["n.php", "m.php"])
    assert verdict.failed
    assert verdict.offending_paths == ("n.php", "m.php")
    assert verdict.message.endswith("new to the repository:\nn.php\nm.php")


def test_fail_without_paths():
    assert fail("broken") == Verdict("fail", "broken", ())

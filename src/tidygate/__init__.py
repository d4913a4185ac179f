"""
tidygate - keeps cosmetic changes out of functional commits.

A commit-msg hook that classifies staged changes as whitespace-only,
formatter-only or functional, and checks that against the commit's tag.
"""

from __future__ import annotations

__version__ = "0.1.0"

from tidygate.tidygate import check_commit

__all__ = ["check_commit", "__version__"]

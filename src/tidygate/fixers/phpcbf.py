"""PHP Code Beautifier and Fixer handler for tidygate.

phpcbf exits 1 when it fixed something, so both 0 and 1 count as success.
2 means some errors could not be fixed; 3 is a processing error.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

NAME = "phpcbf"

DEFAULTS = {
    "fixer_path": "phpcbf",
    "standard": "PSR12",
}

SUCCESS_CODES = frozenset({0, 1})


def build_command(options: Mapping[str, str], target: Path) -> list[str]:
    return [options["fixer_path"], "-q", f"--standard={options['standard']}", str(target)]

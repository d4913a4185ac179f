"""PHP CS Fixer handler for tidygate.

``php-cs-fixer fix`` rewrites files in place and exits 0 whether or not it
changed anything.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

NAME = "php_cs_fixer"

DEFAULTS = {
    "fixer_path": "php-cs-fixer",
    "config_path": ".php-cs-fixer.dist.php",
}

SUCCESS_CODES = frozenset({0})


def build_command(options: Mapping[str, str], target: Path) -> list[str]:
    return [
        options["fixer_path"],
        "fix",
        "--quiet",
        "--config",
        options["config_path"],
        str(target),
    ]

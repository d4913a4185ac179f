"""
Shared test fixtures for tidygate tests.
"""

import os
import shutil
import stat
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest
import structlog

from tidygate.core.config import Config, build_config
from tidygate.core.git import Git
from tidygate.core.model import StagedFile

# Stand-in for a real formatter: strips trailing whitespace and expands tabs.
# Like any formatter it only looks at its last argument, the target file.
FAKE_FIXER = '''\
import sys

path = sys.argv[-1]
with open(path, "rb") as f:
    data = f.read()
lines = [line.replace(b"\\t", b"    ").rstrip() for line in data.split(b"\\n")]
with open(path, "wb") as f:
    f.write(b"\\n".join(lines))
sys.stderr.write({stderr!r})
sys.exit({exit_code})
'''


class Repo:
    """A throwaway git repository with one initial commit."""

    def __init__(self, root: Path):
        self.root = root
        self.git = Git(root)

    def run(self, *args: str) -> str:
        proc = subprocess.run(
            ["git", *args], cwd=self.root, capture_output=True, text=True, check=True
        )
        return proc.stdout

    def write(self, path: str, content: str | bytes) -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        target.write_bytes(content)

    def stage(self, path: str, content: str | bytes) -> StagedFile:
        self.write(path, content)
        self.run("add", "--", path)
        return StagedFile.from_path(path)

    def commit(self, files: dict[str, str | bytes], message: str = "PROJ-1 initial") -> None:
        for path, content in files.items():
            self.stage(path, content)
        self.run("commit", "-q", "--no-verify", "-m", message)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() calls made by the code under test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def repo(tmp_path):
    """An initialized repository containing a committed README."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    root = tmp_path / "repo"
    root.mkdir()
    r = Repo(root)
    r.run("init", "-q")
    r.run("config", "user.email", "dev@example.com")
    r.run("config", "user.name", "Dev")
    r.run("config", "commit.gpgsign", "false")
    r.run("config", "core.autocrlf", "false")
    r.commit({"README": "readme\n"})
    return r


@pytest.fixture
def make_fixer(tmp_path):
    """Factory for fake formatter executables."""
    counter = iter(range(1000))

    def _make(exit_code: int = 0, stderr: str = "") -> str:
        script = tmp_path / f"fake-fixer-{next(counter)}"
        script.write_text(
            f"#!{sys.executable}\n" + FAKE_FIXER.format(exit_code=exit_code, stderr=stderr)
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def fake_fixer(make_fixer):
    """A formatter that succeeds."""
    return make_fixer()


@pytest.fixture
def make_config():
    """Build a Config from TOML-shaped keyword tables."""

    def _make(**raw) -> Config:
        return build_config(raw)

    return _make


@pytest.fixture
def chdir():
    """Change directory for the duration of a test."""
    original = Path.cwd()

    def _chdir(path: Path) -> None:
        os.chdir(path)

    yield _chdir
    os.chdir(original)


def toml(text: str) -> str:
    return textwrap.dedent(text).lstrip()

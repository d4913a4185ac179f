"""
Materialize a version of a file and fingerprint its bytes.

A materialized copy lives exactly as long as the ``with`` block that asked for
it. Anything that mutates the copy (a fixer) must run inside that block and
take the digest before it closes.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath

import structlog

from tidygate.core.git import Git, Ref

log = structlog.get_logger(__name__)

TEMP_PREFIX = {Ref.HEAD: "fixer_", Ref.STAGED: "staged_"}

_CHUNK = 1 << 16


def digest_file(path: Path) -> bytes:
    """SHA-256 of the file's exact bytes."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.digest()


class ContentSnapshotter:
    """Reads staged or committed file contents through git."""

    def __init__(self, git: Git):
        self.git = git

    @contextmanager
    def materialize(self, path: str, ref: Ref) -> Iterator[Path]:
        """Write ``path`` at ``ref`` to a fresh temp file and yield its path.

        The temp file keeps the original suffix, since some formatters pick
        their rules from it. It is removed on every exit path.
        """
        fd, name = tempfile.mkstemp(
            prefix=TEMP_PREFIX[ref], suffix=PurePosixPath(path).suffix
        )
        temp_path = Path(name)
        try:
            with os.fdopen(fd, "wb") as dest:
                self.git.show(path, ref, dest)
            yield temp_path
        finally:
            temp_path.unlink(missing_ok=True)

    def snapshot(self, path: str, ref: Ref) -> bytes:
        """Digest of ``path`` at ``ref``."""
        with self.materialize(path, ref) as temp_path:
            digest = digest_file(temp_path)
        log.debug("snapshot", path=path, ref=ref.name, digest=digest.hex())
        return digest

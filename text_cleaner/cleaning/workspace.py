"""Scratch directory for the files handed to and produced by imgclean.

Every artifact gets a uuid4-based name, so concurrent requests never touch the
same file and no locking is required.
"""

from __future__ import annotations

import os
import re
import tempfile
import time
import uuid
from pathlib import Path

from text_cleaner.logger import get_logger
from text_cleaner.path_utils import abs_path, with_extension

from .errors import InputWriteFailed

_logger = get_logger("workspace")

# uuid4().hex plus an optional extension; anything else in the root is left alone
_ARTIFACT_NAME = re.compile(r"^[0-9a-f]{32}(\.[^.]+)?$")


def default_scratch_dir(name: str = "text_cleaner") -> Path:
    return Path(tempfile.gettempdir()) / name


class Workspace:
    def __init__(self, root: Path | str):
        self._root = abs_path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _ensure_root(self) -> Path:
        # Checked on every write: the OS temp cleanup may remove the directory while we run
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    def _new_path(self, extension: str, directory: Path | None = None) -> Path:
        base = directory if directory is not None else self._ensure_root()
        return base / with_extension(uuid.uuid4().hex, extension)

    def create_input_artifact(self, data: bytes, extension: str) -> Path:
        """Write `data` to a fresh file in the scratch directory.

        The file is either written completely or removed before
        `InputWriteFailed` is raised.
        """
        try:
            path = self._new_path(extension)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0), 0o600)
        except OSError as e:
            _logger.error("input artifact create failed: %s", e)
            raise InputWriteFailed(e) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            _logger.error("input artifact write failed: %s -> %s", path, e)
            self.delete_artifact(path)
            raise InputWriteFailed(e) from e

        _logger.debug("input artifact written: %s (%d bytes)", path, len(data))
        return path

    def allocate_output_path(self, extension: str, beside: Path | None = None) -> Path:
        """Reserve (without creating) a unique path next to `beside`."""
        directory = beside.parent if beside is not None else None
        return self._new_path(extension, directory)

    def delete_artifact(self, path: Path | str) -> bool:
        """Best-effort delete. Never raises; a stray temp file is not a failure."""
        try:
            Path(path).unlink(missing_ok=True)
            return True
        except OSError as e:
            _logger.warning("artifact delete failed: %s -> %s", path, e)
            return False

    def sweep_orphans(self, max_age_seconds: float) -> int:
        """Delete artifacts older than `max_age_seconds`.

        Only files named like the ones this class creates are considered, so a
        root shared with other files is safe to sweep.

        Output artifacts that were never released end up here.
        """
        if not self._root.is_dir():
            return 0
        cutoff = time.time() - max(0.0, float(max_age_seconds))
        removed = 0
        try:
            entries = list(os.scandir(self._root))
        except OSError as e:
            _logger.warning("orphan sweep skipped: %s -> %s", self._root, e)
            return 0
        for entry in entries:
            if not _ARTIFACT_NAME.match(entry.name):
                continue
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                if entry.stat(follow_symlinks=False).st_mtime >= cutoff:
                    continue
            except OSError:
                continue
            if self.delete_artifact(entry.path):
                removed += 1
        if removed:
            _logger.info("removed %d stale file(s) from %s", removed, self._root)
        return removed

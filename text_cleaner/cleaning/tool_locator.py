from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from text_cleaner.logger import get_logger
from text_cleaner.path_utils import abs_path, program_dir

from .errors import ToolNotFound

_logger = get_logger("tool_locator")

TOOL_NAME = "imgclean"


def executable_name(name: str = TOOL_NAME) -> str:
    if os.name == "nt" and not name.lower().endswith(".exe"):
        return f"{name}.exe"
    return name


class ToolLocator:
    """Finds imgclean next to the running program.

    The lookup runs on every call so a tool replaced between runs is picked up.
    `override` (the `tool_path` setting) replaces the sibling lookup entirely.
    """

    def __init__(
        self,
        name: str = TOOL_NAME,
        base_dir: Path | str | Callable[[], Path] | None = None,
        override: Path | str | None = None,
    ):
        self._name = executable_name(name)
        self._base_dir = base_dir
        self._override = override

    def expected_path(self) -> Path:
        if self._override:
            return abs_path(self._override)
        base = self._base_dir
        if base is None:
            base = program_dir()
        elif callable(base):
            base = base()
        return abs_path(base) / self._name

    def locate(self) -> Path:
        exe = self.expected_path()
        if not exe.is_file():
            _logger.warning("tool missing: %s", exe)
            raise ToolNotFound(exe, "missing")
        if not os.access(exe, os.X_OK):
            _logger.warning("tool not executable: %s", exe)
            raise ToolNotFound(exe, "is not executable")
        _logger.debug("tool located: %s", exe)
        return exe

"""Path helpers shared by the workspace, tool locator and file operations.

Keep this module free of Qt dependencies.
"""

from __future__ import annotations

import sys
from pathlib import Path


def abs_path(path: str | Path) -> Path:
    """Return an absolute path without requiring that it exists."""
    p = Path(path).expanduser()
    try:
        # strict=False avoids exceptions for non-existent paths.
        return p.resolve(strict=False)
    except OSError:
        return p.absolute()


def normalize_extension(extension: str) -> str:
    """Strip a leading dot; the extension is otherwise threaded through as given."""
    return (extension or "").strip().lstrip(".")


def with_extension(name: str, extension: str) -> str:
    ext = normalize_extension(extension)
    return f"{name}.{ext}" if ext else name


def program_dir() -> Path:
    """Directory of the running program.

    Frozen bundles (PyInstaller) resolve to the bundle directory, otherwise the
    directory of the launched script.
    """
    if getattr(sys, "frozen", False):
        return Path(getattr(sys, "_MEIPASS", Path(sys.executable).resolve().parent))
    argv0 = sys.argv[0] if sys.argv and sys.argv[0] else ""
    if argv0 and argv0 != "-c":
        return abs_path(argv0).parent
    return abs_path(sys.executable).parent

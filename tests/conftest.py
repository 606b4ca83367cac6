"""Pytest configuration.

The Qt bridge tests need a Qt application object for queued signal delivery,
so a single `QCoreApplication` is created for the whole session.

Fake `imgclean` executables are small Python scripts with a shebang pointing at
the running interpreter. Each one appends its argv as a JSON line to
`<tool dir>/calls.jsonl` so tests can inspect what was passed.
"""

from __future__ import annotations

import json
import os
import stat
import sys
import textwrap
from pathlib import Path
from typing import Any

import pytest

_APP: Any | None = None

_TOOL_PRELUDE = """\
#!{python}
import json
import os
import sys
import time

args = sys.argv[1:]
with open({log!r}, "a", encoding="utf-8") as _log:
    _log.write(json.dumps(args) + "\\n")


def opt(flag):
    return args[args.index(flag) + 1] if flag in args else None


src, dst, algo = opt("-i"), opt("-o"), opt("-a")
"""

# Writes the input bytes reversed, so the output is distinguishable from the input
COPY_REVERSED = """
with open(src, "rb") as f:
    data = f.read()
with open(dst, "wb") as f:
    f.write(data[::-1])
"""


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QCoreApplication exists before collecting/running tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    global _APP

    app = QCoreApplication.instance()
    # Keep a strong ref so it isn't GC'd mid-session.
    _APP = app if app is not None else QCoreApplication([])


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    app = QCoreApplication.instance()
    if app is None:
        return
    app.quit()
    app.processEvents()


class FakeTool:
    def __init__(self, path: Path, log: Path):
        self.path = path
        self.log = log

    @property
    def calls(self) -> list[list[str]]:
        if not self.log.exists():
            return []
        return [json.loads(line) for line in self.log.read_text(encoding="utf-8").splitlines() if line]

    def last_arg(self, flag: str) -> str:
        args = self.calls[-1]
        return args[args.index(flag) + 1]


@pytest.fixture
def make_tool(tmp_path: Path):
    """Factory: make_tool(body) writes an executable imgclean running `body`."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(body: str = COPY_REVERSED, name: str = "imgclean") -> FakeTool:
        path = bin_dir / name
        log = bin_dir / "calls.jsonl"
        script = _TOOL_PRELUDE.format(python=sys.executable, log=str(log)) + textwrap.dedent(body)
        path.write_text(script, encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakeTool(path, log)

    return _make


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    return tmp_path / "scratch"

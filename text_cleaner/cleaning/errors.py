"""Error kinds raised by the cleaning pipeline.

Every error carries a stable ``kind`` (used by the Qt bridge and the CLI) and a
human-readable ``message``.
"""

from __future__ import annotations

from pathlib import Path


class CleanError(Exception):
    kind = "CleanError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ToolNotFound(CleanError):
    kind = "ToolNotFound"

    def __init__(self, expected_path: Path | str, reason: str = "missing"):
        self.expected_path = Path(expected_path)
        self.reason = reason
        super().__init__(f"'{self.expected_path.name}' {reason}. Expected it at: {self.expected_path}")


class LaunchFailed(CleanError):
    kind = "LaunchFailed"

    def __init__(self, error: OSError):
        self.error = error
        super().__init__(f"could not start imgclean: {error}")


class ToolExecutionFailed(CleanError):
    kind = "ToolExecutionFailed"

    def __init__(self, exit_code: int, text: str):
        self.exit_code = exit_code
        self.text = text
        super().__init__(text)


class OutputUnreadable(CleanError):
    kind = "OutputUnreadable"

    def __init__(self, path: Path | str, error: OSError):
        self.path = Path(path)
        self.error = error
        super().__init__(f"imgclean reported success but its output could not be read: {error}")


class InputWriteFailed(CleanError):
    kind = "InputWriteFailed"

    def __init__(self, error: OSError):
        self.error = error
        super().__init__(f"could not write the image to a temporary file: {error}")


class ToolTimedOut(CleanError):
    kind = "ToolTimedOut"

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"imgclean did not finish within {timeout:g} seconds and was stopped")

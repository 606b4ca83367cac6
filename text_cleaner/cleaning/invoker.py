"""Runs imgclean as a child process.

`ProcessInvoker.run` blocks for the whole spawn / wait / read sequence and must
be called on a worker thread, never on a GUI thread.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from text_cleaner.logger import get_logger

from .metrics import EXIT_FAILURES, LAUNCH_FAILURES, SPAWN_ATTEMPTS, TIMEOUTS, TOOL_DURATION, metrics
from .types import Algorithm, ExitFailure, LaunchFailure, Outcome, ReadFailure, Success, TimeoutFailure

_logger = get_logger("invoker")

DEFAULT_ALGORITHM_FLAG = "-a"


def build_arguments(
    tool_path: Path,
    input_path: Path,
    output_path: Path,
    algorithm: Algorithm | str | None = None,
    algorithm_flag: str = DEFAULT_ALGORITHM_FLAG,
) -> list[str]:
    args = [str(tool_path), "-i", str(input_path), "-o", str(output_path)]
    # No algorithm argument means the tool's own default
    if algorithm:
        value = algorithm.value if isinstance(algorithm, Algorithm) else str(algorithm)
        args += [algorithm_flag, value]
    return args


def _decode_stderr(raw: bytes | None) -> str:
    return (raw or b"").decode("utf-8", errors="replace").rstrip()


class ProcessInvoker:
    def __init__(self, algorithm_flag: str = DEFAULT_ALGORITHM_FLAG):
        self._algorithm_flag = algorithm_flag or DEFAULT_ALGORITHM_FLAG

    def run(
        self,
        tool_path: Path,
        input_path: Path,
        output_path: Path,
        algorithm: Algorithm | str | None = None,
        timeout: float | None = None,
    ) -> Outcome:
        args = build_arguments(tool_path, input_path, output_path, algorithm, self._algorithm_flag)
        _logger.debug("spawn: %s", " ".join(args))
        metrics.inc(SPAWN_ATTEMPTS)
        with metrics.timed(TOOL_DURATION):
            try:
                proc = subprocess.Popen(
                    args,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                )
            except OSError as e:
                metrics.inc(LAUNCH_FAILURES)
                _logger.error("spawn failed: %s -> %s", tool_path, e)
                return LaunchFailure(e)

            try:
                _, err = proc.communicate(timeout=timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                # Reap the child and drain the pipe
                proc.communicate()
                metrics.inc(TIMEOUTS)
                _logger.warning("imgclean timed out after %ss (pid=%s)", timeout, proc.pid)
                return TimeoutFailure(float(timeout or 0))

        status = proc.returncode
        if status != 0:
            metrics.inc(EXIT_FAILURES)
            text = _decode_stderr(err) or f"imgclean exited with status {status}"
            _logger.warning("imgclean failed: status=%s stderr=%s", status, text)
            return ExitFailure(status, text)

        try:
            data = Path(output_path).read_bytes()
        except OSError as e:
            _logger.warning("output read failed: %s -> %s", output_path, e)
            return ReadFailure(Path(output_path), e)

        _logger.debug("imgclean ok: %s (%d bytes)", output_path, len(data))
        return Success(data)

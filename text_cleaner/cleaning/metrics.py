"""Counters and timings for the imgclean pipeline.

Recorded keys:

    invoker.spawn_attempts    imgclean processes started (or attempted)
    invoker.launch_failures   spawn raised OSError
    invoker.exit_failures     non-zero exit status
    invoker.timeouts          killed after the configured timeout
    invoker.duration          timing, spawn to exit for every run
    service.requests          requests scheduled on the worker pool
    service.succeeded         requests that produced a CleanResult
    service.failed            requests that ended in a CleanError

Everything stays in process; tests assert on `count`, the CLI logs `summary`
at debug level when it exits.
"""

from __future__ import annotations

import time
from collections import defaultdict
from contextlib import contextmanager
from threading import RLock
from typing import Any

SPAWN_ATTEMPTS = "invoker.spawn_attempts"
LAUNCH_FAILURES = "invoker.launch_failures"
EXIT_FAILURES = "invoker.exit_failures"
TIMEOUTS = "invoker.timeouts"
TOOL_DURATION = "invoker.duration"
REQUESTS = "service.requests"
SUCCEEDED = "service.succeeded"
FAILED = "service.failed"


class _Metrics:
    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, list[float]] = defaultdict(list)
        self._lock = RLock()

    def inc(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[key] += int(amount)

    def count(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    def counters(self, prefix: str = "") -> dict[str, int]:
        """Counters whose key starts with `prefix` (e.g. "invoker.")."""
        with self._lock:
            return {k: v for k, v in self._counters.items() if k.startswith(prefix)}

    @contextmanager
    def timed(self, key: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                self._timings[key].append(elapsed)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {k: list(v) for k, v in self._timings.items()},
            }

    def summary(self) -> str:
        """One line for the log: counters, then count/total/max per timing."""
        with self._lock:
            parts = [f"{k}={v}" for k, v in sorted(self._counters.items())]
            for key, values in sorted(self._timings.items()):
                if values:
                    parts.append(f"{key}=n{len(values)}/total{sum(values):.3f}s/max{max(values):.3f}s")
        return " ".join(parts) or "no activity"

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = _Metrics()

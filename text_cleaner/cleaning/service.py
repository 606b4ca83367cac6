"""Cleaning orchestrator.

Turns raw image bytes into cleaned image bytes by handing them to imgclean
through the scratch directory. The whole request runs on a worker thread; the
caller gets a `Future` (or blocks on it through `clean`).

Usage:
    service = CleaningService(Workspace(tmp_dir), ToolLocator())
    future = service.clean_async(CleanRequest(data, "png", Algorithm.SAUVOLA))
    result = future.result()
    ...
    result.release()
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from text_cleaner.logger import get_logger
from text_cleaner.settings_manager import SettingsManager

from .errors import (
    CleanError,
    LaunchFailed,
    OutputUnreadable,
    ToolExecutionFailed,
    ToolTimedOut,
)
from .invoker import ProcessInvoker
from .metrics import FAILED, REQUESTS, SUCCEEDED, metrics
from .tool_locator import ToolLocator
from .types import (
    Algorithm,
    CleanRequest,
    CleanResult,
    ExitFailure,
    LaunchFailure,
    Outcome,
    OutputArtifact,
    ReadFailure,
    Success,
    TimeoutFailure,
)
from .workspace import Workspace, default_scratch_dir

_logger = get_logger("service")


def translate_outcome(outcome: Outcome) -> CleanError:
    """Map a failed invocation outcome onto the public error kinds."""
    if isinstance(outcome, ExitFailure):
        return ToolExecutionFailed(outcome.exit_code, outcome.text)
    if isinstance(outcome, LaunchFailure):
        return LaunchFailed(outcome.error)
    if isinstance(outcome, ReadFailure):
        return OutputUnreadable(outcome.path, outcome.error)
    if isinstance(outcome, TimeoutFailure):
        return ToolTimedOut(outcome.timeout)
    raise TypeError(f"not a failure outcome: {outcome!r}")


class CleaningService:
    def __init__(
        self,
        workspace: Workspace,
        locator: ToolLocator,
        invoker: ProcessInvoker | None = None,
        timeout: float | None = None,
        orphan_max_age: float | None = None,
        max_workers: int = 2,
        default_algorithm: Algorithm | str | None = None,
    ):
        self._workspace = workspace
        self._locator = locator
        self._invoker = invoker or ProcessInvoker()
        self._timeout = timeout
        self._default_algorithm = Algorithm.parse(default_algorithm) if default_algorithm else None
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="text_cleaner")
        # Startup sweep of output artifacts nobody released
        if orphan_max_age is not None:
            workspace.sweep_orphans(orphan_max_age)

    @classmethod
    def from_settings(cls, settings: SettingsManager, scratch_dir: Path | str | None = None) -> CleaningService:
        root = scratch_dir or settings.get("scratch_dir") or default_scratch_dir(settings.scratch_dir_name)
        workspace = Workspace(root)
        locator = ToolLocator(name=settings.get("tool_name"), override=settings.tool_path)
        invoker = ProcessInvoker(algorithm_flag=settings.get("algorithm_flag"))
        default_algorithm = settings.get("default_algorithm")
        try:
            default_algorithm = Algorithm.parse(default_algorithm) if default_algorithm else None
        except ValueError as e:
            _logger.warning("ignoring default_algorithm setting: %s", e)
            default_algorithm = None
        return cls(
            workspace,
            locator,
            invoker,
            timeout=settings.timeout_seconds,
            orphan_max_age=settings.orphan_max_age_seconds,
            max_workers=settings.max_workers,
            default_algorithm=default_algorithm,
        )

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    def clean_async(self, request: CleanRequest) -> Future:
        """Schedule `request`; the future resolves to a CleanResult or raises a CleanError."""
        metrics.inc(REQUESTS)
        return self._executor.submit(self._clean, request)

    def clean(self, request: CleanRequest) -> CleanResult:
        """Blocking variant of `clean_async`. Do not call from a GUI thread."""
        return self.clean_async(request).result()

    def _clean(self, request: CleanRequest) -> CleanResult:
        algorithm = request.algorithm or self._default_algorithm
        input_path = self._workspace.create_input_artifact(request.data, request.extension)
        output_path = self._workspace.allocate_output_path(request.extension, beside=input_path)
        try:
            tool = self._locator.locate()
            outcome = self._invoker.run(tool, input_path, output_path, algorithm, self._timeout)
        finally:
            self._workspace.delete_artifact(input_path)

        if isinstance(outcome, Success):
            metrics.inc(SUCCEEDED)
            _logger.debug("cleaned %d -> %d bytes: %s", len(request.data), len(outcome.data), output_path)
            return CleanResult(outcome.data, OutputArtifact(output_path))

        metrics.inc(FAILED)
        # Never handed to the caller, so remove whatever the tool left behind
        self._workspace.delete_artifact(output_path)
        raise translate_outcome(outcome)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> CleaningService:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

"""Cleaning core: hands images to the external imgclean tool.

Components:
- Scratch files (workspace)
- Locating the imgclean executable (tool_locator)
- Running it (invoker)
- Orchestration and error translation (service)
- Qt completion bridge (controller)

Usage:
    from text_cleaner.cleaning import CleaningService, CleanRequest

    service = CleaningService.from_settings(settings)
    result = service.clean(CleanRequest(data, "png", "sauvola"))
"""

from .errors import (
    CleanError,
    InputWriteFailed,
    LaunchFailed,
    OutputUnreadable,
    ToolExecutionFailed,
    ToolNotFound,
    ToolTimedOut,
)
from .invoker import ProcessInvoker
from .service import CleaningService
from .tool_locator import ToolLocator
from .types import Algorithm, CleanRequest, CleanResult, OutputArtifact
from .workspace import Workspace

try:
    from .controller import CleanController
except ImportError:  # pragma: no cover - allow the headless core without PySide6
    CleanController = None

__all__ = [
    "Algorithm",
    "CleanController",
    "CleanError",
    "CleanRequest",
    "CleanResult",
    "CleaningService",
    "InputWriteFailed",
    "LaunchFailed",
    "OutputArtifact",
    "OutputUnreadable",
    "ProcessInvoker",
    "ToolExecutionFailed",
    "ToolLocator",
    "ToolNotFound",
    "ToolTimedOut",
    "Workspace",
]

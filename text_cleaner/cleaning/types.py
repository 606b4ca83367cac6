from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from text_cleaner.logger import get_logger
from text_cleaner.path_utils import normalize_extension

_logger = get_logger("types")


class Algorithm(str, Enum):
    """Binarization approaches understood by imgclean."""

    BRADLEY_ROTH = "bradley-roth"
    NICK = "nick"
    SAUVOLA = "sauvola"
    NIBLACK = "niblack"
    BATAINEH = "bataineh"

    @classmethod
    def parse(cls, text: str) -> Algorithm:
        key = (text or "").strip().lower()
        for algo in cls:
            if algo.value == key:
                return algo
        choices = ", ".join(a.value for a in cls)
        raise ValueError(f"unknown algorithm {text!r} (choose from: {choices})")

    @property
    def label(self) -> str:
        return self.value.title()


@dataclass(frozen=True)
class CleanRequest:
    data: bytes
    extension: str
    algorithm: Algorithm | None = None

    def __post_init__(self) -> None:
        # Accept plain strings for the algorithm and a leading dot on the extension
        if isinstance(self.algorithm, str) and not isinstance(self.algorithm, Algorithm):
            algo = Algorithm.parse(self.algorithm) if self.algorithm.strip() else None
            object.__setattr__(self, "algorithm", algo)
        object.__setattr__(self, "extension", normalize_extension(self.extension))


class OutputArtifact:
    """Handle to the tool's output file: reserve -> use -> release.

    The file stays on disk until `release` is called by whoever consumes the
    cleaned image (usually after saving it elsewhere). Files that are never
    released are removed by the workspace orphan sweep on a later start.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._released = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"OutputArtifact({str(self._path)!r}, released={self._released})"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        """Delete the artifact. Returns True only for the call that released it."""
        with self._lock:
            if self._released:
                _logger.debug("artifact already released: %s", self._path)
                return False
            self._released = True
        try:
            self._path.unlink(missing_ok=True)
            _logger.debug("artifact released: %s", self._path)
        except OSError as e:
            _logger.warning("artifact delete failed: %s -> %s", self._path, e)
        return True


@dataclass(frozen=True)
class CleanResult:
    data: bytes
    artifact: OutputArtifact = field(compare=False)

    @property
    def output_path(self) -> Path:
        return self.artifact.path

    def release(self) -> bool:
        return self.artifact.release()


# --- Tool invocation outcome -------------------------------------------------


@dataclass(frozen=True)
class Success:
    data: bytes


@dataclass(frozen=True)
class ExitFailure:
    exit_code: int
    text: str


@dataclass(frozen=True)
class LaunchFailure:
    error: OSError


@dataclass(frozen=True)
class ReadFailure:
    path: Path
    error: OSError


@dataclass(frozen=True)
class TimeoutFailure:
    timeout: float


Outcome = Union[Success, ExitFailure, LaunchFailure, ReadFailure, TimeoutFailure]

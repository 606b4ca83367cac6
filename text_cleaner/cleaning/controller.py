"""Qt bridge around CleaningService.

Requests run on the service's worker pool. The future's done callback emits a
signal from the worker thread; Qt queues it to the thread that owns the
receiver, so slots only ever see a request after it fully completed.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future

from PySide6.QtCore import QObject, Signal

from text_cleaner.logger import get_logger

from .errors import CleanError
from .service import CleaningService
from .types import CleanRequest, CleanResult

_logger = get_logger("controller")


class CleanController(QObject):
    """Runs cleaning requests off the GUI thread, latest request wins.

    A front end re-cleans the same image whenever the algorithm changes, so an
    older request that finishes after a newer one was started is stale: its
    output artifact is released and no signal is emitted for it.

    Signals:
        started: request id
        finished: request id, CleanResult
        failed: request id, error kind, message
    """

    started = Signal(str)
    finished = Signal(str, object)
    failed = Signal(str, str, str)

    def __init__(self, service: CleaningService, parent: QObject | None = None):
        super().__init__(parent)
        self._service = service
        self._lock = threading.Lock()
        self._next_id = 1
        self._latest_id: str | None = None
        self._pending: set[str] = set()

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def start(self, request: CleanRequest) -> str:
        with self._lock:
            req_id = str(self._next_id)
            self._next_id += 1
            self._latest_id = req_id
            self._pending.add(req_id)
        _logger.debug("start request id=%s ext=%s algo=%s", req_id, request.extension, request.algorithm)
        self.started.emit(req_id)
        future = self._service.clean_async(request)
        future.add_done_callback(lambda f, rid=req_id: self._on_done(rid, f))
        return req_id

    def _is_stale(self, req_id: str) -> bool:
        with self._lock:
            self._pending.discard(req_id)
            return req_id != self._latest_id

    def _on_done(self, req_id: str, future: Future) -> None:
        try:
            result: CleanResult = future.result()
        except CleanError as e:
            if self._is_stale(req_id):
                _logger.debug("dropping stale failure id=%s: %s", req_id, e.kind)
                return
            _logger.info("clean failed id=%s: %s: %s", req_id, e.kind, e.message)
            self.failed.emit(req_id, e.kind, e.message)
            return
        except Exception as e:
            # Anything else is a programming error; still report it to the UI
            _logger.exception("clean crashed id=%s", req_id)
            if not self._is_stale(req_id):
                self.failed.emit(req_id, type(e).__name__, str(e))
            return

        if self._is_stale(req_id):
            _logger.debug("dropping stale result id=%s", req_id)
            result.release()
            return
        self.finished.emit(req_id, result)

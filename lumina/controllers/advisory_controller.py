"""Runs advisory requests on a worker thread and feeds the results to the store."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QThread, Signal, Slot

from lumina.services.project_store import ProjectStore
from lumina.services.settings_manager import SettingsManager
from lumina.workers.advisory_worker import AdvisoryWorker

logger = logging.getLogger(__name__)


class AdvisoryController(QObject):
    """Owns the advisory QThread; one request at a time."""

    busy_changed = Signal(bool)

    def __init__(self, store: ProjectStore, settings: SettingsManager | None = None,
                 parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._store = store
        self._settings = settings if settings is not None else SettingsManager()
        self._thread: QThread | None = None
        self._worker: AdvisoryWorker | None = None
        self._src: str | None = None
        self._at_time: float | None = None

    def is_running(self) -> bool:
        return self._thread is not None

    def request_suggestions(self, description: str, src: str | None = None,
                            at_time: float | None = None) -> bool:
        """Start a segment analysis of the current project. False if one is already running."""
        if self._thread is not None:
            logger.info("Advisory request already running; ignoring new request")
            return False

        self._src = src
        self._at_time = at_time
        self._thread = QThread()
        self._worker = AdvisoryWorker(
            description,
            self._store.project.duration,
            self._settings.get_gemini_api_key(),
        )
        self._worker.moveToThread(self._thread)

        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self._on_finished)
        self._worker.error.connect(self._on_error)
        self._worker.finished.connect(self._thread.quit)
        self._worker.error.connect(self._thread.quit)
        self._thread.finished.connect(self._on_thread_finished)

        self._thread.start()
        self.busy_changed.emit(True)
        return True

    def cancel(self) -> None:
        """Drop the pending result; the thread winds down once the request returns."""
        if self._worker is not None and self._thread is not None:
            self._worker.cancel()
            self._thread.quit()

    @Slot(list)
    def _on_finished(self, segments: list) -> None:
        self._store.apply_suggestions(segments, self._src, self._at_time)

    @Slot(str)
    def _on_error(self, message: str) -> None:
        self._store.report_advisory_failure(message)

    @Slot()
    def _on_thread_finished(self) -> None:
        if self._thread is None:
            return
        # finished is emitted just before the thread exits.
        self._thread.wait()
        self._thread = None
        self._worker = None
        self.busy_changed.emit(False)

"""Background worker for advisory (Gemini) segment analysis."""

from PySide6.QtCore import QObject, Signal

from lumina.services.advisory_service import AdvisoryService


class AdvisoryWorker(QObject):
    """Runs the advisory HTTP call off the GUI thread (QThread + moveToThread pattern)."""

    finished = Signal(list)  # list[SuggestedSegment]
    error    = Signal(str)

    def __init__(self, description: str, total_duration: float, api_key: str) -> None:
        super().__init__()
        self._description = description
        self._total_duration = total_duration
        self._api_key = api_key
        self._cancelled = False

    def cancel(self) -> None:
        """Drop the result when it arrives (an in-flight HTTP request cannot be aborted)."""
        self._cancelled = True

    def run(self) -> None:
        """Executed on the background thread."""
        try:
            segments = AdvisoryService.analyze_video_content(
                self._description,
                self._total_duration,
                self._api_key,
            )
            if not self._cancelled:
                self.finished.emit(segments)
        except Exception as e:
            if not self._cancelled:
                self.error.emit(str(e))

"""Settings manager for editor preferences."""

from __future__ import annotations

from PySide6.QtCore import QSettings

from lumina.utils.config import DEFAULT_CLIP_DURATION, SEEK_TOLERANCE_SEC, TICK_QUANTUM_SEC
from lumina.utils.time_utils import frame_duration


class SettingsManager:
    """Wrapper around QSettings for type-safe preference management."""

    def __init__(self, settings: QSettings | None = None):
        self._settings = settings if settings is not None else QSettings()

    # ---------------------------------------------------- Editing Settings

    def get_default_clip_duration(self) -> float:
        """Get the duration of newly added clips in seconds (default: 5.0)."""
        return self._settings.value("editing/default_clip_duration", DEFAULT_CLIP_DURATION, float)

    def set_default_clip_duration(self, seconds: float) -> None:
        """Set the duration of newly added clips in seconds."""
        self._settings.setValue("editing/default_clip_duration", float(seconds))

    def get_frame_accurate(self) -> bool:
        """Whether guard band and tick quantum follow the project frame rate (default: False)."""
        return self._settings.value("editing/frame_accurate", False, bool)

    def set_frame_accurate(self, enabled: bool) -> None:
        self._settings.setValue("editing/frame_accurate", bool(enabled))

    def get_undo_limit(self) -> int:
        """Get the maximum number of undo steps (default: 100)."""
        return self._settings.value("editing/undo_limit", 100, int)

    def set_undo_limit(self, steps: int) -> None:
        self._settings.setValue("editing/undo_limit", int(steps))

    # ---------------------------------------------------- Playback Settings

    def get_seek_tolerance(self) -> float:
        """Get the drift in seconds tolerated before re-seeking media (default: 0.3)."""
        return self._settings.value("playback/seek_tolerance", SEEK_TOLERANCE_SEC, float)

    def set_seek_tolerance(self, seconds: float) -> None:
        self._settings.setValue("playback/seek_tolerance", float(seconds))

    def tick_quantum_for(self, fps: int) -> float:
        """Playback tick quantum in seconds for a project running at *fps*."""
        return frame_duration(fps) if self.get_frame_accurate() else TICK_QUANTUM_SEC

    # ---------------------------------------------------- API Keys

    def get_gemini_api_key(self) -> str:
        """Get the Gemini API key (empty when unset)."""
        return self._settings.value("api_keys/gemini", "", str)

    def set_gemini_api_key(self, key: str) -> None:
        self._settings.setValue("api_keys/gemini", key)

    # ---------------------------------------------------- Utility

    def reset_to_defaults(self) -> None:
        """Clear every stored preference."""
        self._settings.clear()

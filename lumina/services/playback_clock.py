"""Playback clock: active-clip resolution and the play/pause/seek cursor.

Resolution is pure (``resolve_active``) so renderers and tests can ask
"what is on screen at time t" without a running clock. ``PlaybackClock``
drives the cursor with a QTimer and writes time back through the
ProjectStore, which stays the only writer of project state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from lumina.models.clip import Clip, TrackKind
from lumina.models.project import Project
from lumina.utils.config import SEEK_TOLERANCE_SEC, TICK_QUANTUM_SEC
from lumina.utils.time_utils import TIME_EPSILON, clamp

if TYPE_CHECKING:
    from lumina.services.project_store import ProjectStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActiveSet:
    """Everything the renderer needs for one instant of the timeline."""

    time: float
    primary_clip: Clip | None = None
    overlay_clips: tuple[Clip, ...] = ()
    audio_clip: Clip | None = None
    source_time: float | None = None  # position inside primary_clip's source media

    @property
    def has_signal(self) -> bool:
        return self.primary_clip is not None

    @property
    def volume(self) -> float:
        """Playback volume of the primary clip's media (0 when nothing plays)."""
        if self.primary_clip is None:
            return 0.0
        return effective_volume(self.primary_clip)


def source_time_for(clip: Clip, time: float) -> float:
    """Map a timeline instant to the clip's source media position."""
    return (time - clip.start_time) + clip.trim_start


def effective_volume(clip: Clip) -> float:
    volume = clip.properties.get("volume")
    if volume is None:
        return 1.0
    return clamp(float(volume), 0.0, 1.0)


def needs_resync(reported: float, mapped: float, tolerance: float = SEEK_TOLERANCE_SEC) -> bool:
    """True when an external source drifted more than *tolerance* from *mapped*."""
    return abs(reported - mapped) > tolerance


def resolve_primary(project: Project, time: float) -> Clip | None:
    """Topmost covering video clip: later-declared tracks win entirely."""
    for track in reversed(project.tracks):
        if track.kind is not TrackKind.VIDEO or track.hidden or track.locked:
            continue
        clip = track.clip_at(time)
        if clip is not None:
            return clip
    return None


def resolve_overlays(project: Project, time: float) -> tuple[Clip, ...]:
    overlays: list[Clip] = []
    for track in project.tracks:
        if track.kind is TrackKind.TEXT and not track.hidden:
            overlays.extend(track.clips_at(time))
    return tuple(overlays)


def resolve_audio(project: Project, time: float) -> Clip | None:
    for track in project.tracks:
        if track.kind is not TrackKind.AUDIO or track.hidden or track.muted:
            continue
        clip = track.clip_at(time)
        if clip is not None:
            return clip
    return None


def resolve_active(project: Project, time: float | None = None) -> ActiveSet:
    """Resolve the active rendering set at *time* (the project playhead by default)."""
    time = project.current_time if time is None else time
    primary = resolve_primary(project, time)
    return ActiveSet(
        time=time,
        primary_clip=primary,
        overlay_clips=resolve_overlays(project, time),
        audio_clip=resolve_audio(project, time),
        source_time=source_time_for(primary, time) if primary is not None else None,
    )


class PlaybackClock(QObject):
    """Paused/Playing state machine advancing the playhead by a fixed quantum.

    Each QTimer timeout is one ``tick``. Reaching the end of the timeline
    while playing pauses and rewinds to 0. ``seek`` works in both states
    and never changes the play state.
    """

    PAUSED = "paused"
    PLAYING = "playing"

    state_changed = Signal(str)
    position_changed = Signal(float)
    frame_resolved = Signal(object)  # ActiveSet
    playback_finished = Signal()

    def __init__(
        self,
        store: ProjectStore,
        parent: QObject | None = None,
        *,
        quantum: float = TICK_QUANTUM_SEC,
        tolerance: float = SEEK_TOLERANCE_SEC,
    ) -> None:
        super().__init__(parent)
        if quantum <= 0:
            raise ValueError(f"quantum must be positive, got {quantum}")
        self._store = store
        self._quantum = float(quantum)
        self._tolerance = float(tolerance)
        self._playing = False

        self._timer = QTimer(self)
        self._timer.setInterval(max(1, int(round(self._quantum * 1000))))
        self._timer.timeout.connect(self.tick)

        # Edits made during playback are visible on the next frame.
        store.project_changed.connect(self._on_project_changed)

    # ---- state ----

    @property
    def quantum(self) -> float:
        return self._quantum

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def state(self) -> str:
        return self.PLAYING if self._playing else self.PAUSED

    @property
    def current_time(self) -> float:
        return self._store.project.current_time

    def play(self) -> None:
        if self._playing:
            return
        self._playing = True
        self._timer.start()
        logger.debug("Playback started at %.3f", self.current_time)
        self.state_changed.emit(self.PLAYING)

    def pause(self) -> None:
        if not self._playing:
            return
        self._playing = False
        self._timer.stop()
        logger.debug("Playback paused at %.3f", self.current_time)
        self.state_changed.emit(self.PAUSED)

    def toggle_play(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    # ---- cursor ----

    def seek(self, time: float) -> float:
        """Move the playhead, clamped to ``[0, duration]``. Returns the applied time."""
        applied = self._store.set_current_time(time)
        self._emit_position()
        return applied

    @Slot()
    def tick(self) -> None:
        """Advance one quantum. Ignored while paused."""
        if not self._playing:
            return
        project = self._store.project
        next_time = round(project.current_time + self._quantum, 9)
        if next_time >= project.duration - TIME_EPSILON:
            self.pause()
            self._store.set_current_time(0.0)
            self._emit_position()
            logger.info("Reached end of timeline (%.3fs); rewound to start", project.duration)
            self.playback_finished.emit()
            return
        self._store.set_current_time(next_time)
        self._emit_position()

    # ---- resolution ----

    def resolve(self) -> ActiveSet:
        return resolve_active(self._store.project)

    def sync_source(self, reported_position: float) -> float | None:
        """Return where the external media source should seek to, or None to leave it be."""
        active = self.resolve()
        if active.source_time is None:
            return None
        if needs_resync(reported_position, active.source_time, self._tolerance):
            return active.source_time
        return None

    def _emit_position(self) -> None:
        self.position_changed.emit(self.current_time)
        self.frame_resolved.emit(self.resolve())

    @Slot(object)
    def _on_project_changed(self, _project: object) -> None:
        self.frame_resolved.emit(self.resolve())

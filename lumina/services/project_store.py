"""ProjectStore: single owner of the authoritative Project value.

All writes go through the store. Edits run the pure edit engine against
the project current at call time and are committed as QUndoCommand
snapshots; observers learn about every committed state through signals.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable

from PySide6.QtCore import QObject, Signal, Slot
from PySide6.QtGui import QUndoCommand, QUndoStack

from lumina.models.clip import Clip, TrackKind
from lumina.models.project import Project, new_project
from lumina.services import edit_engine
from lumina.services.advisory_service import apply_segments
from lumina.services.edit_engine import EditResult
from lumina.utils.config import DEFAULT_CLIP_DURATION, SPLIT_GUARD_SEC
from lumina.utils.time_utils import clamp, frame_duration

logger = logging.getLogger(__name__)


class ProjectSnapshotCommand(QUndoCommand):
    """Undo step holding the project values before and after one edit."""

    def __init__(self, store: ProjectStore, label: str, before: Project, after: Project):
        super().__init__(label)
        self._store = store
        self._before = before
        self._after = after

    def redo(self) -> None:
        self._store._restore(self._after)

    def undo(self) -> None:
        self._store._restore(self._before)


class ProjectStore(QObject):
    """Owns the current Project, applies edits, and notifies observers."""

    project_changed = Signal(object)       # Project
    selection_changed = Signal(object)     # clip id or None
    current_time_changed = Signal(float)
    edit_rejected = Signal(str, str)       # (operation label, reason code)
    advisory_failed = Signal(str)

    def __init__(
        self,
        project: Project | None = None,
        parent: QObject | None = None,
        *,
        frame_accurate: bool = False,
        default_clip_duration: float = DEFAULT_CLIP_DURATION,
        undo_limit: int = 100,
    ) -> None:
        super().__init__(parent)
        self._project = project if project is not None else new_project()
        self._selected_clip_id: str | None = None
        self._frame_accurate = frame_accurate
        self._default_clip_duration = default_clip_duration
        self._undo_stack = QUndoStack(self)
        self._undo_stack.setUndoLimit(max(1, int(undo_limit)))

    # ---- state access ----

    @property
    def project(self) -> Project:
        return self._project

    @property
    def undo_stack(self) -> QUndoStack:
        return self._undo_stack

    @property
    def selected_clip_id(self) -> str | None:
        return self._selected_clip_id

    @property
    def selected_clip(self) -> Clip | None:
        if self._selected_clip_id is None:
            return None
        return self._project.get_clip(self._selected_clip_id)

    def split_guard(self) -> float:
        """Guard band for splits: one frame in frame-accurate mode, else the fixed default."""
        if self._frame_accurate:
            return frame_duration(self._project.fps)
        return SPLIT_GUARD_SEC

    # ---- commit ----

    def apply(self, label: str, operation: Callable[..., EditResult], *args: Any, **kwargs: Any) -> EditResult:
        """Run *operation* against the current project and commit it if applied."""
        before = self._project
        result = operation(before, *args, **kwargs)
        if not result.applied:
            reason = result.reason.value if result.reason else result.status.value
            logger.info("%s not applied: %s (%s)", label, result.status.value, reason)
            self.edit_rejected.emit(label, reason)
            return result
        self._undo_stack.push(ProjectSnapshotCommand(self, label, before, result.project))
        logger.debug("%s applied (clip=%s, track=%s)", label, result.clip_id, result.track_id)
        return result

    def _restore(self, project: Project) -> None:
        # The playhead is not part of edit history.
        current = clamp(self._project.current_time, 0.0, project.duration)
        self._project = replace(project, current_time=current)
        if self._selected_clip_id is not None and self._project.get_clip(self._selected_clip_id) is None:
            self._selected_clip_id = None
            self.selection_changed.emit(None)
        self.project_changed.emit(self._project)

    def replace_project(self, project: Project) -> None:
        """Swap in a different project (e.g. after loading). Clears history and selection."""
        self._undo_stack.clear()
        self._project = project
        if self._selected_clip_id is not None:
            self._selected_clip_id = None
            self.selection_changed.emit(None)
        logger.info("Project replaced: %s (%d tracks)", project.name, len(project.tracks))
        self.project_changed.emit(self._project)

    def set_current_time(self, time: float) -> float:
        """Move the playhead, clamped to ``[0, duration]``. Returns the applied time."""
        applied = clamp(float(time), 0.0, self._project.duration)
        if applied != self._project.current_time:
            self._project = replace(self._project, current_time=applied)
            self.current_time_changed.emit(applied)
        return applied

    # ---- selection ----

    def select_clip(self, clip_id: str | None) -> bool:
        """Select a clip by id (None clears). Unknown ids are ignored."""
        if clip_id is not None and self._project.get_clip(clip_id) is None:
            return False
        if clip_id != self._selected_clip_id:
            self._selected_clip_id = clip_id
            self.selection_changed.emit(clip_id)
        return True

    # ---- history ----

    def can_undo(self) -> bool:
        return self._undo_stack.canUndo()

    def can_redo(self) -> bool:
        return self._undo_stack.canRedo()

    def undo(self) -> None:
        self._undo_stack.undo()

    def redo(self) -> None:
        self._undo_stack.redo()

    # ---- edit operations ----

    def add_clip(self, kind: TrackKind | str, src: str | None = None, at_time: float | None = None,
                 **kwargs: Any) -> EditResult:
        kwargs.setdefault("duration", self._default_clip_duration)
        return self.apply("Add clip", edit_engine.add_clip, kind, at_time, src, **kwargs)

    def split_clip(self, clip_id: str, at_time: float) -> EditResult:
        return self.apply("Split clip", edit_engine.split_clip, clip_id, at_time, self.split_guard())

    def split_at_playhead(self) -> EditResult:
        return self.apply("Split clip", edit_engine.split_at_playhead, self._selected_clip_id, self.split_guard())

    def update_clip(self, clip_id: str, updates: dict[str, Any]) -> EditResult:
        return self.apply("Update clip", edit_engine.update_clip, clip_id, updates)

    def update_selected(self, updates: dict[str, Any]) -> EditResult | None:
        """Update the selected clip; None when nothing is selected."""
        if self._selected_clip_id is None:
            return None
        return self.update_clip(self._selected_clip_id, updates)

    def trim_clip(self, clip_id: str, trim_start: float, trim_end: float) -> EditResult:
        return self.apply("Trim clip", edit_engine.trim_clip, clip_id, trim_start, trim_end)

    def move_clip(self, clip_id: str, start_time: float, track_id: str | None = None) -> EditResult:
        return self.apply("Move clip", edit_engine.move_clip, clip_id, start_time, track_id)

    def duplicate_clip(self, clip_id: str | None = None) -> EditResult | None:
        """Duplicate *clip_id* or the selected clip; None when there is neither."""
        clip_id = clip_id or self._selected_clip_id
        if clip_id is None:
            return None
        return self.apply("Duplicate clip", edit_engine.duplicate_clip, clip_id)

    def delete_clip(self, clip_id: str | None = None) -> EditResult | None:
        """Delete *clip_id* or the selected clip, clearing the selection if it pointed there."""
        clip_id = clip_id or self._selected_clip_id
        if clip_id is None:
            return None
        result = self.apply("Delete clip", edit_engine.delete_clip, clip_id)
        if result.applied and self._selected_clip_id == clip_id:
            self.select_clip(None)
        return result

    def add_track(self, kind: TrackKind | str, name: str | None = None) -> EditResult:
        return self.apply("Add track", edit_engine.add_track, kind, name)

    def remove_track(self, track_id: str) -> EditResult:
        return self.apply("Remove track", edit_engine.remove_track, track_id)

    def update_track(self, track_id: str, **flags: Any) -> EditResult:
        return self.apply("Update track", edit_engine.update_track, track_id, **flags)

    def set_duration(self, duration: float) -> EditResult:
        result = self.apply("Set duration", edit_engine.set_duration, duration)
        if result.applied:
            self.current_time_changed.emit(self._project.current_time)
        return result

    # ---- advisory ----

    def apply_suggestions(self, segments: list, src: str | None = None, at_time: float | None = None) -> EditResult:
        """Turn advisory segments into ordinary clip edits, committed as one undo step."""
        return self.apply("Apply AI suggestions", apply_segments, segments, src, at_time)

    @Slot(str)
    def report_advisory_failure(self, message: str) -> None:
        logger.warning("Advisory service failed: %s", message)
        self.advisory_failed.emit(message)

"""Lumina headless playback entry point.

Plays a project (the .lumina.json file given on the command line, or the
demo project) through the playback clock and logs what the renderer would
draw each tick.
"""

import logging
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from lumina.models.project import demo_project
from lumina.services.playback_clock import ActiveSet, PlaybackClock
from lumina.services.project_io import is_project_file, load_project
from lumina.services.project_store import ProjectStore
from lumina.services.settings_manager import SettingsManager
from lumina.utils.config import APP_NAME, APP_VERSION, ORG_NAME, PROJECT_EXTENSION
from lumina.utils.time_utils import seconds_to_display, seconds_to_timecode

logger = logging.getLogger("lumina")


def _configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.INFO)


def _log_frame(active: ActiveSet, fps: int) -> None:
    timecode = seconds_to_timecode(active.time, fps)
    primary = active.primary_clip
    overlays = ", ".join(c.name for c in active.overlay_clips) or "-"
    audio = active.audio_clip.name if active.audio_clip else "-"
    if primary is None:
        logger.info("%s  no signal | text: %s | audio: %s", timecode, overlays, audio)
        return
    logger.info(
        "%s  %s @ %.2fs (vol %.2f) | text: %s | audio: %s",
        timecode, primary.name, active.source_time, active.volume, overlays, audio,
    )


def main() -> None:
    _configure_logging()
    QCoreApplication.setOrganizationName(ORG_NAME)
    QCoreApplication.setApplicationName(APP_NAME)
    QCoreApplication.setApplicationVersion(APP_VERSION)

    app = QCoreApplication(sys.argv)
    settings = SettingsManager()

    project = demo_project()
    if len(sys.argv) > 1:
        project_path = Path(sys.argv[1])
        if is_project_file(project_path):
            project = load_project(project_path)
        else:
            logger.warning("%s is not a %s file; playing the demo project", project_path, PROJECT_EXTENSION)
    logger.info("%s %s playing %s (%s, %d tracks)", APP_NAME, APP_VERSION, project.name,
                seconds_to_display(project.duration), len(project.tracks))

    store = ProjectStore(
        project,
        frame_accurate=settings.get_frame_accurate(),
        default_clip_duration=settings.get_default_clip_duration(),
        undo_limit=settings.get_undo_limit(),
    )
    clock = PlaybackClock(
        store,
        quantum=settings.tick_quantum_for(project.fps),
        tolerance=settings.get_seek_tolerance(),
    )
    clock.frame_resolved.connect(lambda active: _log_frame(active, store.project.fps))
    clock.playback_finished.connect(app.quit)

    clock.play()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

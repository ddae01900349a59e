"""Shared fixtures."""

from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication

from lumina.models.clip import Clip, TrackKind
from lumina.models.project import Project
from lumina.models.track import Track


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Signals, timers and QUndoStack need a QCoreApplication (no GUI)."""
    return QCoreApplication.instance() or QCoreApplication([])


def make_clip(clip_id: str, track_id: str = "v1", kind: TrackKind = TrackKind.VIDEO,
              start: float = 0.0, duration: float = 10.0, trim_start: float = 0.0, **kwargs) -> Clip:
    return Clip(
        id=clip_id,
        track_id=track_id,
        name=kwargs.pop("name", clip_id.upper()),
        kind=kind,
        start_time=start,
        duration=duration,
        trim_start=trim_start,
        trim_end=kwargs.pop("trim_end", trim_start + duration),
        **kwargs,
    )


@pytest.fixture
def project() -> Project:
    """45s project: V1 (0-10s, 12-20s), T1 title (1-6s), A1 music (0-30s)."""
    video = Track(id="v1", name="Video 1", kind=TrackKind.VIDEO, clips=(
        make_clip("c1", start=0.0, duration=10.0, src="a.mp4",
                  properties={"opacity": 1, "scale": 1, "volume": 1}),
        make_clip("c2", start=12.0, duration=8.0, trim_start=3.0, src="b.mp4",
                  properties={"opacity": 1, "volume": 0.8}),
    ))
    text = Track(id="t1", name="Text", kind=TrackKind.TEXT, clips=(
        make_clip("title", track_id="t1", kind=TrackKind.TEXT, start=1.0, duration=5.0,
                  properties={"text": "HELLO", "font_size": 80}),
    ))
    audio = Track(id="a1", name="Audio", kind=TrackKind.AUDIO, clips=(
        make_clip("music", track_id="a1", kind=TrackKind.AUDIO, start=0.0, duration=30.0,
                  properties={"volume": 0.5}),
    ))
    return Project(id="p1", name="Test", duration=45.0, tracks=(video, text, audio))

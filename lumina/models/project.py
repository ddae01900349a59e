"""Project state model."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from lumina.models.clip import Clip, TrackKind, new_id
from lumina.models.track import Track
from lumina.utils.config import (
    DEFAULT_FPS,
    DEFAULT_HEIGHT,
    DEFAULT_PROJECT_DURATION,
    DEFAULT_PROJECT_NAME,
    DEFAULT_WIDTH,
    KIND_COLORS,
)


def now_ms() -> int:
    """Wall-clock timestamp used for *last_modified*."""
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class Project:
    """Aggregate root of the editing session.

    Projects are immutable values: every edit produces a new Project that
    shares the untouched tracks and clips with its predecessor.
    """

    id: str
    name: str = DEFAULT_PROJECT_NAME
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    fps: int = DEFAULT_FPS
    duration: float = DEFAULT_PROJECT_DURATION
    tracks: tuple[Track, ...] = ()
    current_time: float = 0.0
    last_modified: int = field(default_factory=now_ms)

    # -------------------------------------------------------- Lookups

    def get_track(self, track_id: str) -> Track | None:
        for track in self.tracks:
            if track.id == track_id:
                return track
        return None

    def track_index(self, track_id: str) -> int | None:
        for i, track in enumerate(self.tracks):
            if track.id == track_id:
                return i
        return None

    def tracks_of_kind(self, kind: TrackKind | str) -> list[Track]:
        kind = TrackKind.parse(kind)
        return [t for t in self.tracks if t.kind == kind]

    def find_clip(self, clip_id: str) -> tuple[int, int, Clip] | None:
        """Return (track_index, clip_index, clip) for *clip_id*, or None.

        Tracks are scanned in declaration order, clips in storage order.
        """
        for t_idx, track in enumerate(self.tracks):
            c_idx = track.clip_index(clip_id)
            if c_idx is not None:
                return t_idx, c_idx, track.clips[c_idx]
        return None

    def get_clip(self, clip_id: str) -> Clip | None:
        found = self.find_clip(clip_id)
        return found[2] if found else None

    @property
    def content_end(self) -> float:
        """End of the latest clip on any track."""
        return max((t.content_end for t in self.tracks), default=0.0)

    # -------------------------------------------------------- Serialization

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "duration": self.duration,
            "current_time": self.current_time,
            "last_modified": self.last_modified,
            "tracks": [t.to_dict() for t in self.tracks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        duration = float(data.get("duration", DEFAULT_PROJECT_DURATION))
        current = float(data.get("current_time", 0.0))
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", DEFAULT_PROJECT_NAME)),
            width=int(data.get("width", DEFAULT_WIDTH)),
            height=int(data.get("height", DEFAULT_HEIGHT)),
            fps=int(data.get("fps", DEFAULT_FPS)),
            duration=duration,
            tracks=tuple(Track.from_dict(t) for t in data.get("tracks", [])),
            current_time=min(max(0.0, current), duration),
            last_modified=int(data.get("last_modified") or now_ms()),
        )


def new_project(name: str = DEFAULT_PROJECT_NAME, duration: float = DEFAULT_PROJECT_DURATION) -> Project:
    """Create an empty project with default dimensions and frame rate."""
    return Project(id=new_id(), name=name, duration=duration)


def demo_project() -> Project:
    """Sample project: two video clips, a title card and a music bed."""
    sample_src = "https://sample-videos.com/video321/mp4/720/big_buck_bunny_720p_1mb.mp4"
    video = Track(
        id="t1",
        name="Video 1",
        kind=TrackKind.VIDEO,
        clips=(
            Clip(
                id="c1", track_id="t1", name="Intro Scene", kind=TrackKind.VIDEO,
                start_time=0.0, duration=10.0, trim_start=0.0, trim_end=10.0,
                color=KIND_COLORS["video"], src=sample_src,
                properties={"opacity": 1, "scale": 1, "x": 0, "y": 0, "rotation": 0, "volume": 1},
            ),
            Clip(
                id="c2", track_id="t1", name="Travel Montage", kind=TrackKind.VIDEO,
                start_time=10.5, duration=8.0, trim_start=0.0, trim_end=8.0,
                color=KIND_COLORS["video"], src=sample_src,
                properties={"opacity": 1, "scale": 1.2, "x": 0, "y": 0, "rotation": 0, "volume": 0.8},
            ),
        ),
    )
    text = Track(
        id="t2",
        name="Text Overlay",
        kind=TrackKind.TEXT,
        clips=(
            Clip(
                id="c3", track_id="t2", name="Title Card", kind=TrackKind.TEXT,
                start_time=1.0, duration=5.0, trim_start=0.0, trim_end=5.0,
                color=KIND_COLORS["text"],
                properties={"text": "SUMMER 2024", "font_size": 80, "font_family": "Inter", "rotation": -5},
            ),
        ),
    )
    audio = Track(
        id="t3",
        name="Audio",
        kind=TrackKind.AUDIO,
        clips=(
            Clip(
                id="c4", track_id="t3", name="LoFi Beat", kind=TrackKind.AUDIO,
                start_time=0.0, duration=30.0, trim_start=0.0, trim_end=30.0,
                color=KIND_COLORS["audio"],
                properties={"volume": 0.5},
            ),
        ),
    )
    return Project(
        id="proj_1",
        name="Summer_Vlog_2024.mp4",
        width=1920,
        height=1080,
        fps=30,
        duration=45.0,
        tracks=(video, text, audio),
    )

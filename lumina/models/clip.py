"""Clip data models (pure Python, no Qt dependency)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from lumina.models.track import Track


def new_id() -> str:
    """Generate a unique id for tracks, clips and effects."""
    return uuid.uuid4().hex


class TrackKind(str, Enum):
    """Media kind shared by a track and every clip it holds."""

    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"

    @classmethod
    def parse(cls, value: str | TrackKind) -> TrackKind:
        """Accept an enum member or its string value.

        Raises:
            ValueError: If *value* names no kind.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


TRANSITION_KINDS = ("fade", "wipe", "zoom", "slide-left", "slide-right", "dissolve", "iris")
EFFECT_KINDS = ("blur", "brightness", "grayscale", "sepia")


@dataclass(frozen=True, slots=True)
class Transition:
    """Entry or exit transition attached to a clip."""

    kind: str = "fade"
    duration: float = 0.5  # seconds

    def to_dict(self) -> dict:
        return {"kind": self.kind, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: dict | None) -> Transition | None:
        """Tolerant loader: unknown kinds become fade, non-positive durations mean none."""
        if not isinstance(data, dict):
            return None
        kind = str(data.get("kind", data.get("type", "fade")) or "fade").strip().lower()
        if kind in ("", "none", "off"):
            return None
        if kind not in TRANSITION_KINDS:
            kind = "fade"
        try:
            duration = float(data.get("duration", 0.5))
        except (TypeError, ValueError):
            duration = 0.5
        if duration <= 0.0:
            return None
        return cls(kind=kind, duration=duration)


@dataclass(frozen=True, slots=True)
class Effect:
    """A visual effect (type + intensity) applied to a clip."""

    kind: str
    value: float
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "kind": self.kind, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> Effect:
        """Build an effect from its dict form.

        Raises:
            ValueError: If the effect kind is not one of EFFECT_KINDS.
        """
        kind = str(data.get("kind", data.get("type", ""))).strip().lower()
        if kind not in EFFECT_KINDS:
            raise ValueError(f"Unknown effect kind {kind!r}")
        return cls(
            kind=kind,
            value=float(data.get("value", 0.0)),
            id=str(data.get("id") or new_id()),
        )


@dataclass(frozen=True, slots=True)
class Clip:
    """A placed, time-bounded instance of media or text on a track.

    Timeline placement (*start_time*, *duration*) and the source window
    (*trim_start*, *trim_end*) are independent coordinate systems: the
    visible portion of the source begins at *trim_start* whatever the
    clip's position on the timeline.

    *source_duration* is the known length of the underlying media, or
    ``None`` when unknown (text clips, sources not yet inspected).
    *properties* is stored as a read-only copy.
    """

    id: str
    track_id: str
    name: str
    kind: TrackKind
    start_time: float
    duration: float
    trim_start: float = 0.0
    trim_end: float = 0.0
    color: str = "#3b82f6"
    src: str | None = None
    source_duration: float | None = None
    properties: Mapping[str, Any] = field(default_factory=dict, hash=False)
    effects: tuple[Effect, ...] = ()
    transition_in: Transition | None = None
    transition_out: Transition | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def contains(self, time: float) -> bool:
        """Half-open test: the clip covers ``[start_time, end_time)``."""
        return self.start_time <= time < self.end_time

    def strictly_contains(self, time: float) -> bool:
        return self.start_time < time < self.end_time

    def to_dict(self) -> dict:
        d: dict = {
            "id": self.id,
            "track_id": self.track_id,
            "name": self.name,
            "kind": self.kind.value,
            "start_time": self.start_time,
            "duration": self.duration,
            "trim_start": self.trim_start,
            "trim_end": self.trim_end,
            "color": self.color,
            "properties": dict(self.properties),
        }
        if self.src is not None:
            d["src"] = self.src
        if self.source_duration is not None:
            d["source_duration"] = self.source_duration
        if self.effects:
            d["effects"] = [e.to_dict() for e in self.effects]
        if self.transition_in is not None:
            d["transition_in"] = self.transition_in.to_dict()
        if self.transition_out is not None:
            d["transition_out"] = self.transition_out.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Clip:
        source_duration = data.get("source_duration")
        return cls(
            id=str(data["id"]),
            track_id=str(data.get("track_id", "")),
            name=str(data.get("name", "")),
            kind=TrackKind.parse(data["kind"]),
            start_time=float(data["start_time"]),
            duration=float(data["duration"]),
            trim_start=float(data.get("trim_start", 0.0)),
            trim_end=float(data.get("trim_end", 0.0)),
            color=str(data.get("color", "#3b82f6")),
            src=data.get("src"),
            source_duration=float(source_duration) if source_duration is not None else None,
            properties=dict(data.get("properties") or {}),
            effects=tuple(Effect.from_dict(e) for e in data.get("effects", [])),
            transition_in=Transition.from_dict(data.get("transition_in")),
            transition_out=Transition.from_dict(data.get("transition_out")),
        )


def is_valid_clip(clip: Clip) -> bool:
    """Check the per-clip invariants.

    The source-length bound is only checked when *source_duration* is known.
    """
    if clip.duration <= 0 or clip.start_time < 0 or clip.trim_start < 0:
        return False
    if clip.source_duration is not None and clip.trim_start + clip.duration > clip.source_duration + 1e-9:
        return False
    return True


def tracks_share_kind(track: Track, clip: Clip) -> bool:
    return track.kind == clip.kind

"""Track data model (pure Python, no Qt dependency)."""

from __future__ import annotations

from dataclasses import dataclass

from lumina.models.clip import Clip, TrackKind


@dataclass(frozen=True, slots=True)
class Track:
    """An ordered lane holding clips of one kind.

    Clips are kept in storage order, which is not necessarily timeline
    order; lookups scan them front to back.
    """

    id: str
    name: str
    kind: TrackKind
    clips: tuple[Clip, ...] = ()
    hidden: bool = False
    muted: bool = False
    locked: bool = False

    @property
    def visible(self) -> bool:
        return not self.hidden

    def clip_index(self, clip_id: str) -> int | None:
        for i, clip in enumerate(self.clips):
            if clip.id == clip_id:
                return i
        return None

    def clip_at(self, time: float) -> Clip | None:
        """First clip (storage order) covering *time*, or None."""
        for clip in self.clips:
            if clip.contains(time):
                return clip
        return None

    def clips_at(self, time: float) -> list[Clip]:
        return [c for c in self.clips if c.contains(time)]

    @property
    def content_end(self) -> float:
        return max((c.end_time for c in self.clips), default=0.0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "hidden": self.hidden,
            "muted": self.muted,
            "locked": self.locked,
            "clips": [c.to_dict() for c in self.clips],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Track:
        """Build a track from its dict form.

        Clips without a ``track_id`` are given this track's id.

        Raises:
            ValueError: If a clip's kind or ``track_id`` disagrees with the track.
        """
        track_id = str(data["id"])
        kind = TrackKind.parse(data["kind"])
        clips = []
        for item in data.get("clips", []):
            clip = Clip.from_dict({**item, "track_id": item.get("track_id") or track_id})
            if clip.kind != kind:
                raise ValueError(f"Clip {clip.id!r} of kind {clip.kind.value!r} on {kind.value} track {track_id!r}")
            if clip.track_id != track_id:
                raise ValueError(f"Clip {clip.id!r} claims track {clip.track_id!r} but sits on {track_id!r}")
            clips.append(clip)
        return cls(
            id=track_id,
            name=str(data.get("name") or track_id),
            kind=kind,
            clips=tuple(clips),
            hidden=bool(data.get("hidden", False)),
            muted=bool(data.get("muted", False)),
            locked=bool(data.get("locked", False)),
        )

    def __len__(self) -> int:
        return len(self.clips)

    def __iter__(self):
        return iter(self.clips)

    def __getitem__(self, index: int) -> Clip:
        return self.clips[index]

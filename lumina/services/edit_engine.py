"""Pure edit operations over immutable Project values.

Every operation takes the current Project and returns an EditResult. When
the edit is not applied the result carries the *same* Project object it
was given, so callers can tell a no-op apart by status and reason without
diffing trees.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping

from lumina.models.clip import Clip, Effect, TrackKind, Transition, is_valid_clip, new_id, tracks_share_kind
from lumina.models.project import Project, now_ms
from lumina.models.track import Track
from lumina.utils.config import (
    DEFAULT_CLIP_DURATION,
    KIND_COLORS,
    MEDIA_DEFAULT_PROPERTIES,
    SPLIT_GUARD_SEC,
    TEXT_DEFAULT_PROPERTIES,
)
from lumina.utils.time_utils import TIME_EPSILON, clamp


class EditStatus(str, Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"  # nothing matched the request
    REJECTED = "rejected"    # the request was invalid


class EditReason(str, Enum):
    CLIP_NOT_FOUND = "clip_not_found"
    TRACK_NOT_FOUND = "track_not_found"
    NO_CLIP_AT_PLAYHEAD = "no_clip_at_playhead"
    GUARD_BAND = "guard_band"
    NON_POSITIVE_DURATION = "non_positive_duration"
    NEGATIVE_START = "negative_start"
    NEGATIVE_TRIM = "negative_trim"
    TRIM_EXCEEDS_SOURCE = "trim_exceeds_source"
    KIND_MISMATCH = "kind_mismatch"
    TRACK_LOCKED = "track_locked"
    IMMUTABLE_FIELD = "immutable_field"
    UNKNOWN_FIELD = "unknown_field"
    INVALID_VALUE = "invalid_value"
    EMPTY_SUGGESTIONS = "empty_suggestions"


@dataclass(frozen=True, slots=True)
class EditResult:
    """Outcome of one edit operation."""

    project: Project
    status: EditStatus
    reason: EditReason | None = None
    clip_id: str | None = None
    track_id: str | None = None

    @property
    def applied(self) -> bool:
        return self.status is EditStatus.APPLIED

    @classmethod
    def ok(cls, project: Project, clip_id: str | None = None, track_id: str | None = None) -> EditResult:
        return cls(project, EditStatus.APPLIED, None, clip_id, track_id)

    @classmethod
    def not_found(cls, project: Project, reason: EditReason, clip_id: str | None = None,
                  track_id: str | None = None) -> EditResult:
        return cls(project, EditStatus.NOT_FOUND, reason, clip_id, track_id)

    @classmethod
    def rejected(cls, project: Project, reason: EditReason, clip_id: str | None = None,
                 track_id: str | None = None) -> EditResult:
        return cls(project, EditStatus.REJECTED, reason, clip_id, track_id)


# Clip fields that identify a clip; update_clip refuses to touch them.
IMMUTABLE_CLIP_FIELDS = frozenset({"id", "track_id", "kind"})
_CLIP_FIELDS = frozenset(f.name for f in fields(Clip))


# ---------------------------------------------------------------- helpers


def _with_tracks(project: Project, tracks: list[Track] | tuple[Track, ...]) -> Project:
    return replace(project, tracks=tuple(tracks), last_modified=now_ms())


def _with_track(project: Project, index: int, track: Track) -> Project:
    tracks = list(project.tracks)
    tracks[index] = track
    return _with_tracks(project, tracks)


def _with_clips(track: Track, clips: list[Clip]) -> Track:
    return replace(track, clips=tuple(clips))


def _geometry_error(clip: Clip) -> EditReason | None:
    if clip.duration <= 0:
        return EditReason.NON_POSITIVE_DURATION
    if clip.start_time < 0:
        return EditReason.NEGATIVE_START
    if clip.trim_start < 0:
        return EditReason.NEGATIVE_TRIM
    if not is_valid_clip(clip):
        return EditReason.TRIM_EXCEEDS_SOURCE
    return None


def _to_float(value: Any) -> float | None:
    """*value* as a finite float, or None when it is not a number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _coerce_update(key: str, value: Any) -> Any:
    """Normalize one update value.

    Raises:
        ValueError: If *value* cannot be stored in field *key*.
    """
    if key in ("start_time", "duration", "trim_start", "trim_end"):
        number = _to_float(value)
        if number is None:
            raise ValueError(f"{key} must be a number, got {value!r}")
        return number
    if key == "source_duration":
        if value is None:
            return None
        number = _to_float(value)
        if number is None:
            raise ValueError(f"source_duration must be a number or None, got {value!r}")
        return number
    if key in ("transition_in", "transition_out"):
        if value is None or isinstance(value, Transition):
            return value
        if isinstance(value, dict):
            return Transition.from_dict(value)
        raise ValueError(f"{key} must be a transition, got {value!r}")
    if key == "effects":
        if isinstance(value, (str, bytes, dict)) or not hasattr(value, "__iter__"):
            raise ValueError(f"effects must be a list of effects, got {value!r}")
        effects = tuple(Effect.from_dict(e) if isinstance(e, dict) else e for e in value)
        if not all(isinstance(e, Effect) for e in effects):
            raise ValueError(f"effects must be a list of effects, got {value!r}")
        return effects
    if key == "properties":
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError(f"properties must be a mapping, got {value!r}")
        return value
    return value


def first_unlocked_track(project: Project, kind: TrackKind | str) -> Track | None:
    """Track-selection policy for new clips: first unlocked track of *kind* in declaration order."""
    kind = TrackKind.parse(kind)
    for track in project.tracks:
        if track.kind == kind and not track.locked:
            return track
    return None


# ---------------------------------------------------------------- tracks


def add_track(project: Project, kind: TrackKind | str, name: str | None = None) -> EditResult:
    """Append an empty track of *kind*."""
    kind = TrackKind.parse(kind)
    if name is None:
        name = f"{kind.value.capitalize()} {len(project.tracks_of_kind(kind)) + 1}"
    track = Track(id=f"t_{new_id()[:8]}", name=name, kind=kind)
    return EditResult.ok(_with_tracks(project, [*project.tracks, track]), track_id=track.id)


def remove_track(project: Project, track_id: str) -> EditResult:
    """Remove a track together with the clips it owns."""
    index = project.track_index(track_id)
    if index is None:
        return EditResult.not_found(project, EditReason.TRACK_NOT_FOUND, track_id=track_id)
    if project.tracks[index].locked:
        return EditResult.rejected(project, EditReason.TRACK_LOCKED, track_id=track_id)
    tracks = [t for i, t in enumerate(project.tracks) if i != index]
    return EditResult.ok(_with_tracks(project, tracks), track_id=track_id)


def update_track(
    project: Project,
    track_id: str,
    *,
    name: str | None = None,
    hidden: bool | None = None,
    muted: bool | None = None,
    locked: bool | None = None,
) -> EditResult:
    """Change a track's display name or its hidden/muted/locked flags."""
    index = project.track_index(track_id)
    if index is None:
        return EditResult.not_found(project, EditReason.TRACK_NOT_FOUND, track_id=track_id)
    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = name
    if hidden is not None:
        changes["hidden"] = bool(hidden)
    if muted is not None:
        changes["muted"] = bool(muted)
    if locked is not None:
        changes["locked"] = bool(locked)
    track = replace(project.tracks[index], **changes)
    return EditResult.ok(_with_track(project, index, track), track_id=track_id)


def set_duration(project: Project, duration: float) -> EditResult:
    """Change the total timeline duration, keeping the playhead inside it."""
    duration = _to_float(duration)
    if duration is None:
        return EditResult.rejected(project, EditReason.INVALID_VALUE)
    if duration <= 0:
        return EditResult.rejected(project, EditReason.NON_POSITIVE_DURATION)
    updated = replace(
        project,
        duration=duration,
        current_time=clamp(project.current_time, 0.0, duration),
        last_modified=now_ms(),
    )
    return EditResult.ok(updated)


# ---------------------------------------------------------------- clips


def add_clip(
    project: Project,
    kind: TrackKind | str,
    at_time: float | None = None,
    src: str | None = None,
    *,
    name: str | None = None,
    duration: float = DEFAULT_CLIP_DURATION,
    source_duration: float | None = None,
) -> EditResult:
    """Place a new clip of *kind* at *at_time* (the playhead by default).

    The clip goes to the first unlocked track of the same kind; if there is
    none, a new track is appended first. A known *source_duration* shorter
    than *duration* shortens the clip to the whole source.
    """
    kind = TrackKind.parse(kind)
    start = project.current_time if at_time is None else _to_float(at_time)
    duration = _to_float(duration)
    if source_duration is not None:
        source_duration = _to_float(source_duration)
        if source_duration is None:
            return EditResult.rejected(project, EditReason.INVALID_VALUE)
    if start is None or duration is None:
        return EditResult.rejected(project, EditReason.INVALID_VALUE)
    if start < 0:
        return EditResult.rejected(project, EditReason.NEGATIVE_START)
    if source_duration is not None:
        duration = min(duration, source_duration)
    if duration <= 0:
        return EditResult.rejected(project, EditReason.NON_POSITIVE_DURATION)

    tracks = list(project.tracks)
    target = first_unlocked_track(project, kind)
    if target is None:
        target = Track(id=f"t_{new_id()[:8]}", name=f"{kind.value.capitalize()} Track", kind=kind)
        tracks.append(target)
    index = next(i for i, t in enumerate(tracks) if t.id == target.id)

    is_text = kind is TrackKind.TEXT
    clip = Clip(
        id=f"c_{new_id()[:12]}",
        track_id=target.id,
        name=name or ("New Text" if is_text else "New Clip"),
        kind=kind,
        start_time=start,
        duration=duration,
        trim_start=0.0,
        trim_end=duration,
        color=KIND_COLORS[kind.value],
        src=src,
        source_duration=source_duration,
        properties=dict(TEXT_DEFAULT_PROPERTIES if is_text else MEDIA_DEFAULT_PROPERTIES),
    )
    tracks[index] = _with_clips(target, [*target.clips, clip])
    return EditResult.ok(_with_tracks(project, tracks), clip_id=clip.id, track_id=target.id)


def split_clip(project: Project, clip_id: str, at_time: float, guard: float = SPLIT_GUARD_SEC) -> EditResult:
    """Divide a clip in two at a timeline instant.

    The first fragment keeps the clip's identity and has its source window
    cut at the split point; the second fragment starts at *at_time*, gets a
    derived id and name, and its *trim_start* moves forward by the same
    amount, so both fragments together show exactly the original source
    window. Split points within *guard* seconds of either edge are rejected.

    The result's ``clip_id`` is the id of the second fragment.
    """
    found = project.find_clip(clip_id)
    if found is None:
        return EditResult.not_found(project, EditReason.CLIP_NOT_FOUND, clip_id=clip_id)
    t_idx, c_idx, clip = found
    track = project.tracks[t_idx]
    if track.locked:
        return EditResult.rejected(project, EditReason.TRACK_LOCKED, clip_id=clip_id, track_id=track.id)

    at_time = _to_float(at_time)
    if at_time is None:
        return EditResult.rejected(project, EditReason.INVALID_VALUE, clip_id=clip_id, track_id=track.id)
    if at_time <= clip.start_time + guard or at_time >= clip.end_time - guard:
        return EditResult.rejected(project, EditReason.GUARD_BAND, clip_id=clip_id, track_id=track.id)

    rel = at_time - clip.start_time
    first = replace(clip, duration=rel, trim_end=clip.trim_start + rel)
    second = replace(
        clip,
        id=f"{clip.id}_split_{new_id()[:8]}",
        name=f"{clip.name} (2)",
        start_time=at_time,
        duration=clip.duration - rel,
        trim_start=clip.trim_start + rel,
        properties=dict(clip.properties),
    )
    clips = list(track.clips)
    clips[c_idx:c_idx + 1] = [first, second]
    return EditResult.ok(_with_track(project, t_idx, _with_clips(track, clips)), clip_id=second.id, track_id=track.id)


def clip_under_playhead(project: Project, time: float | None = None) -> Clip | None:
    """First clip on an unlocked track strictly covering *time* (tracks, then clips, in storage order)."""
    time = project.current_time if time is None else time
    for track in project.tracks:
        if track.locked:
            continue
        for clip in track.clips:
            if clip.strictly_contains(time):
                return clip
    return None


def split_at_playhead(project: Project, selected_clip_id: str | None = None,
                      guard: float = SPLIT_GUARD_SEC) -> EditResult:
    """Split the selected clip, or the clip under the playhead, at the playhead."""
    if selected_clip_id:
        return split_clip(project, selected_clip_id, project.current_time, guard)
    clip = clip_under_playhead(project)
    if clip is None:
        return EditResult.not_found(project, EditReason.NO_CLIP_AT_PLAYHEAD)
    return split_clip(project, clip.id, project.current_time, guard)


def _apply_update(project: Project, clip_id: str, updates: dict[str, Any]) -> EditResult:
    found = project.find_clip(clip_id)
    if found is None:
        return EditResult.not_found(project, EditReason.CLIP_NOT_FOUND, clip_id=clip_id)
    t_idx, c_idx, clip = found
    track = project.tracks[t_idx]
    if track.locked:
        return EditResult.rejected(project, EditReason.TRACK_LOCKED, clip_id=clip_id, track_id=track.id)
    if IMMUTABLE_CLIP_FIELDS & updates.keys():
        return EditResult.rejected(project, EditReason.IMMUTABLE_FIELD, clip_id=clip_id, track_id=track.id)
    if updates.keys() - _CLIP_FIELDS:
        return EditResult.rejected(project, EditReason.UNKNOWN_FIELD, clip_id=clip_id, track_id=track.id)

    try:
        changes = {k: _coerce_update(k, v) for k, v in updates.items()}
    except (TypeError, ValueError):
        return EditResult.rejected(project, EditReason.INVALID_VALUE, clip_id=clip_id, track_id=track.id)
    if "properties" in changes:
        # Property bags are merged key by key, never replaced wholesale.
        changes["properties"] = {**clip.properties, **changes["properties"]}
    updated = replace(clip, **changes)

    error = _geometry_error(updated)
    if error is not None:
        return EditResult.rejected(project, error, clip_id=clip_id, track_id=track.id)

    clips = list(track.clips)
    clips[c_idx] = updated
    return EditResult.ok(_with_track(project, t_idx, _with_clips(track, clips)), clip_id=clip_id, track_id=track.id)


def update_clip(project: Project, clip_id: str, updates: dict[str, Any]) -> EditResult:
    """Shallow-merge *updates* into a clip, deep-merging its ``properties``.

    Keys absent from ``updates["properties"]`` keep their current values.
    ``id``, ``track_id`` and ``kind`` cannot be changed here (use
    :func:`move_clip` to change tracks). Fields Clip does not have and
    values that do not fit their field are rejected.
    """
    return _apply_update(project, clip_id, dict(updates))


def trim_clip(project: Project, clip_id: str, trim_start: float, trim_end: float) -> EditResult:
    """Set the visible source window; the clip's duration follows it."""
    trim_start = _to_float(trim_start)
    trim_end = _to_float(trim_end)
    if trim_start is None or trim_end is None:
        if project.find_clip(clip_id) is None:
            return EditResult.not_found(project, EditReason.CLIP_NOT_FOUND, clip_id=clip_id)
        return EditResult.rejected(project, EditReason.INVALID_VALUE, clip_id=clip_id)
    if trim_end - trim_start <= TIME_EPSILON:
        if project.find_clip(clip_id) is None:
            return EditResult.not_found(project, EditReason.CLIP_NOT_FOUND, clip_id=clip_id)
        return EditResult.rejected(project, EditReason.NON_POSITIVE_DURATION, clip_id=clip_id)
    return _apply_update(
        project,
        clip_id,
        {"trim_start": trim_start, "trim_end": trim_end, "duration": trim_end - trim_start},
    )


def move_clip(project: Project, clip_id: str, start_time: float, track_id: str | None = None) -> EditResult:
    """Move a clip in time and, optionally, onto another track of the same kind.

    A clip moved across tracks is appended to the destination's clip list.
    """
    found = project.find_clip(clip_id)
    if found is None:
        return EditResult.not_found(project, EditReason.CLIP_NOT_FOUND, clip_id=clip_id)
    t_idx, c_idx, clip = found
    if track_id is None or track_id == clip.track_id:
        return _apply_update(project, clip_id, {"start_time": start_time})

    source = project.tracks[t_idx]
    if source.locked:
        return EditResult.rejected(project, EditReason.TRACK_LOCKED, clip_id=clip_id, track_id=source.id)
    dest_idx = project.track_index(track_id)
    if dest_idx is None:
        return EditResult.not_found(project, EditReason.TRACK_NOT_FOUND, clip_id=clip_id, track_id=track_id)
    dest = project.tracks[dest_idx]
    if not tracks_share_kind(dest, clip):
        return EditResult.rejected(project, EditReason.KIND_MISMATCH, clip_id=clip_id, track_id=track_id)
    if dest.locked:
        return EditResult.rejected(project, EditReason.TRACK_LOCKED, clip_id=clip_id, track_id=track_id)

    start_time = _to_float(start_time)
    if start_time is None:
        return EditResult.rejected(project, EditReason.INVALID_VALUE, clip_id=clip_id, track_id=track_id)
    moved = replace(clip, start_time=start_time, track_id=dest.id)
    error = _geometry_error(moved)
    if error is not None:
        return EditResult.rejected(project, error, clip_id=clip_id, track_id=track_id)

    tracks = list(project.tracks)
    tracks[t_idx] = _with_clips(source, [c for i, c in enumerate(source.clips) if i != c_idx])
    tracks[dest_idx] = _with_clips(dest, [*dest.clips, moved])
    return EditResult.ok(_with_tracks(project, tracks), clip_id=clip_id, track_id=dest.id)


def duplicate_clip(project: Project, clip_id: str) -> EditResult:
    """Copy a clip and place the copy immediately after it on the same track.

    The result's ``clip_id`` is the id of the copy.
    """
    found = project.find_clip(clip_id)
    if found is None:
        return EditResult.not_found(project, EditReason.CLIP_NOT_FOUND, clip_id=clip_id)
    t_idx, c_idx, clip = found
    track = project.tracks[t_idx]
    if track.locked:
        return EditResult.rejected(project, EditReason.TRACK_LOCKED, clip_id=clip_id, track_id=track.id)

    copy = replace(
        clip,
        id=f"c_{new_id()[:12]}",
        name=f"{clip.name} (Copy)",
        start_time=clip.end_time,
        properties=dict(clip.properties),
    )
    clips = list(track.clips)
    clips.insert(c_idx + 1, copy)
    return EditResult.ok(_with_track(project, t_idx, _with_clips(track, clips)), clip_id=copy.id, track_id=track.id)


def delete_clip(project: Project, clip_id: str) -> EditResult:
    """Remove a clip from its track."""
    found = project.find_clip(clip_id)
    if found is None:
        return EditResult.not_found(project, EditReason.CLIP_NOT_FOUND, clip_id=clip_id)
    t_idx, c_idx, _clip = found
    track = project.tracks[t_idx]
    if track.locked:
        return EditResult.rejected(project, EditReason.TRACK_LOCKED, clip_id=clip_id, track_id=track.id)
    clips = [c for i, c in enumerate(track.clips) if i != c_idx]
    return EditResult.ok(_with_track(project, t_idx, _with_clips(track, clips)), clip_id=clip_id, track_id=track.id)

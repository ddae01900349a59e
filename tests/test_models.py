"""Unit tests for Clip, Track and Project models."""

import pytest

from conftest import make_clip
from lumina.models.clip import Clip, Effect, TrackKind, Transition, is_valid_clip, tracks_share_kind
from lumina.models.project import Project, demo_project, new_project
from lumina.models.track import Track


# ------------------------------------------------------------------ Clip


class TestClip:
    def test_end_time(self):
        clip = make_clip("c", start=2.0, duration=3.5)
        assert clip.end_time == 5.5

    def test_contains_is_half_open(self):
        clip = make_clip("c", start=2.0, duration=3.0)
        assert clip.contains(2.0)
        assert clip.contains(4.999)
        assert not clip.contains(5.0)
        assert not clip.contains(1.999)

    def test_strictly_contains_excludes_edges(self):
        clip = make_clip("c", start=2.0, duration=3.0)
        assert not clip.strictly_contains(2.0)
        assert clip.strictly_contains(2.5)

    def test_to_dict_omits_empty_optionals(self):
        d = make_clip("c").to_dict()
        assert "src" not in d
        assert "effects" not in d
        assert "transition_in" not in d
        assert d["kind"] == "video"

    def test_from_dict_full(self):
        clip = Clip.from_dict({
            "id": "c9", "track_id": "v1", "name": "Shot", "kind": "video",
            "start_time": 1, "duration": 2, "trim_start": 0.5, "trim_end": 2.5,
            "src": "x.mp4", "source_duration": 60,
            "properties": {"opacity": 0.5},
            "effects": [{"id": "e1", "kind": "blur", "value": 3}],
            "transition_in": {"kind": "wipe", "duration": 1.0},
        })
        assert clip.kind is TrackKind.VIDEO
        assert clip.start_time == 1.0
        assert clip.source_duration == 60.0
        assert clip.effects == (Effect(kind="blur", value=3.0, id="e1"),)
        assert clip.transition_in == Transition(kind="wipe", duration=1.0)
        assert clip.transition_out is None

    def test_from_dict_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            Clip.from_dict({"id": "c", "kind": "hologram", "start_time": 0, "duration": 1})


    def test_properties_are_read_only(self):
        clip = make_clip("c", properties={"volume": 0.5})
        with pytest.raises(TypeError):
            clip.properties["volume"] = 1.0

    def test_properties_copied_from_input(self):
        bag = {"volume": 0.5}
        clip = make_clip("c", properties=bag)
        bag["volume"] = 0.0
        assert clip.properties["volume"] == 0.5

    def test_hashable(self):
        clip = make_clip("c", properties={"volume": 0.5})
        assert hash(clip) == hash(make_clip("c", properties={"volume": 0.9}))
        assert len({clip, clip}) == 1


class TestEffect:
    def test_from_dict_accepts_type_key(self):
        assert Effect.from_dict({"type": "Sepia", "value": 1}).kind == "sepia"

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown effect kind"):
            Effect.from_dict({"kind": "sparkle", "value": 1})


class TestTransition:
    def test_unknown_kind_falls_back_to_fade(self):
        assert Transition.from_dict({"type": "spiral", "duration": 1}).kind == "fade"

    def test_none_kind(self):
        assert Transition.from_dict({"kind": "none"}) is None

    def test_non_positive_duration(self):
        assert Transition.from_dict({"kind": "iris", "duration": 0}) is None

    def test_not_a_dict(self):
        assert Transition.from_dict(None) is None


class TestPredicates:
    def test_valid_clip(self):
        assert is_valid_clip(make_clip("c"))

    def test_zero_duration_invalid(self):
        assert not is_valid_clip(make_clip("c", duration=0.0))

    def test_negative_trim_invalid(self):
        assert not is_valid_clip(make_clip("c", trim_start=-1.0))

    def test_source_bound_checked_when_known(self):
        assert is_valid_clip(make_clip("c", duration=10.0, source_duration=10.0))
        assert not is_valid_clip(make_clip("c", trim_start=2.0, duration=10.0, source_duration=10.0))

    def test_source_bound_ignored_when_unknown(self):
        assert is_valid_clip(make_clip("c", trim_start=500.0, duration=10.0))

    def test_tracks_share_kind(self):
        track = Track(id="t", name="T", kind=TrackKind.TEXT)
        assert tracks_share_kind(track, make_clip("x", kind=TrackKind.TEXT))
        assert not tracks_share_kind(track, make_clip("y", kind=TrackKind.VIDEO))


# ------------------------------------------------------------------ Track


class TestTrack:
    def test_clip_at_uses_storage_order(self):
        track = Track(id="v1", name="V", kind=TrackKind.VIDEO, clips=(
            make_clip("late", start=5.0, duration=5.0),
            make_clip("early", start=0.0, duration=8.0),
        ))
        assert track.clip_at(6.0).id == "late"
        assert track.clip_at(1.0).id == "early"
        assert track.clip_at(10.0) is None

    def test_clips_at_returns_all(self):
        track = Track(id="t1", name="T", kind=TrackKind.TEXT, clips=(
            make_clip("a", kind=TrackKind.TEXT, start=0.0, duration=5.0),
            make_clip("b", kind=TrackKind.TEXT, start=2.0, duration=5.0),
        ))
        assert [c.id for c in track.clips_at(3.0)] == ["a", "b"]

    def test_content_end(self):
        track = Track(id="v1", name="V", kind=TrackKind.VIDEO, clips=(
            make_clip("a", start=0.0, duration=5.0),
            make_clip("b", start=20.0, duration=2.0),
        ))
        assert track.content_end == 22.0
        assert Track(id="e", name="E", kind=TrackKind.AUDIO).content_end == 0.0

    def test_from_dict_adopts_track_id(self):
        track = Track.from_dict({"id": "v1", "kind": "video", "clips": [
            {"id": "c", "kind": "video", "start_time": 0, "duration": 1},
        ]})
        assert track.clips[0].track_id == "v1"

    def test_from_dict_rejects_foreign_kind(self):
        with pytest.raises(ValueError):
            Track.from_dict({"id": "v1", "kind": "video", "clips": [
                {"id": "c", "track_id": "v1", "kind": "audio", "start_time": 0, "duration": 1},
            ]})

    def test_from_dict_rejects_foreign_track_id(self):
        with pytest.raises(ValueError):
            Track.from_dict({"id": "v1", "kind": "video", "clips": [
                {"id": "c", "track_id": "zzz", "kind": "video", "start_time": 0, "duration": 1},
            ]})

    def test_container_protocol(self):
        track = Track(id="v1", name="V", kind=TrackKind.VIDEO, clips=(make_clip("a"),))
        assert len(track) == 1
        assert track[0].id == "a"
        assert [c.id for c in track] == ["a"]


# ------------------------------------------------------------------ Project


class TestProject:
    def test_find_clip(self, project):
        t_idx, c_idx, clip = project.find_clip("c2")
        assert (t_idx, c_idx) == (0, 1)
        assert clip.id == "c2"

    def test_find_clip_missing(self, project):
        assert project.find_clip("nope") is None
        assert project.get_clip("nope") is None

    def test_tracks_of_kind_accepts_string(self, project):
        assert [t.id for t in project.tracks_of_kind("text")] == ["t1"]

    def test_content_end(self, project):
        assert project.content_end == 30.0

    def test_from_dict_clamps_current_time(self):
        project = Project.from_dict({"id": "p", "duration": 10, "current_time": 99, "tracks": []})
        assert project.current_time == 10.0

    def test_roundtrip(self, project):
        restored = Project.from_dict(project.to_dict())
        assert restored == project

    def test_new_project_is_empty(self):
        project = new_project("Fresh")
        assert project.name == "Fresh"
        assert project.tracks == ()
        assert project.current_time == 0.0

    def test_demo_project_is_valid(self):
        project = demo_project()
        assert project.duration == 45.0
        for track in project.tracks:
            for clip in track:
                assert is_valid_clip(clip)
                assert clip.track_id == track.id
                assert tracks_share_kind(track, clip)

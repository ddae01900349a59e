"""SettingsManager tests (QSettings replaced with an in-memory fake)."""

from __future__ import annotations

import pytest

from lumina.services.settings_manager import SettingsManager


class _FakeQSettings:
    def __init__(self):
        self._data: dict = {}

    def value(self, key: str, default, type_=None):
        return self._data.get(key, default)

    def setValue(self, key: str, value) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


@pytest.fixture
def fake() -> _FakeQSettings:
    return _FakeQSettings()


@pytest.fixture
def mgr(fake) -> SettingsManager:
    return SettingsManager(fake)


class TestDefaults:
    def test_editing_defaults(self, mgr):
        assert mgr.get_default_clip_duration() == 5.0
        assert mgr.get_frame_accurate() is False
        assert mgr.get_undo_limit() == 100

    def test_playback_defaults(self, mgr):
        assert mgr.get_seek_tolerance() == 0.3
        assert mgr.tick_quantum_for(30) == 0.1

    def test_no_api_key(self, mgr):
        assert mgr.get_gemini_api_key() == ""


class TestRoundtrip:
    def test_clip_duration(self, mgr, fake):
        mgr.set_default_clip_duration(3)
        assert mgr.get_default_clip_duration() == 3.0
        assert fake._data["editing/default_clip_duration"] == 3.0

    def test_frame_accurate_changes_quantum(self, mgr):
        mgr.set_frame_accurate(True)
        assert mgr.get_frame_accurate() is True
        assert mgr.tick_quantum_for(25) == pytest.approx(0.04)

    def test_undo_limit(self, mgr):
        mgr.set_undo_limit(20)
        assert mgr.get_undo_limit() == 20

    def test_seek_tolerance(self, mgr):
        mgr.set_seek_tolerance(0.5)
        assert mgr.get_seek_tolerance() == 0.5

    def test_api_key(self, mgr):
        mgr.set_gemini_api_key("secret")
        assert mgr.get_gemini_api_key() == "secret"

    def test_reset_to_defaults(self, mgr):
        mgr.set_undo_limit(3)
        mgr.set_frame_accurate(True)
        mgr.reset_to_defaults()
        assert mgr.get_undo_limit() == 100
        assert mgr.get_frame_accurate() is False


class TestFrameAccurateQuantum:
    def test_invalid_fps(self, mgr):
        mgr.set_frame_accurate(True)
        with pytest.raises(ValueError):
            mgr.tick_quantum_for(0)

"""AdvisoryController tests: worker thread ownership and store hand-off."""

import time
from unittest.mock import MagicMock, patch

import pytest
from PySide6.QtCore import QCoreApplication

from lumina.controllers.advisory_controller import AdvisoryController
from lumina.services.advisory_service import AdvisoryService, SuggestedSegment
from lumina.services.project_store import ProjectStore
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
def store(project):
    return ProjectStore(project)


@pytest.fixture
def settings():
    mgr = SettingsManager(_FakeQSettings())
    mgr.set_gemini_api_key("KEY")
    return mgr


@pytest.fixture
def controller(store, settings):
    return AdvisoryController(store, settings)


def _wait_idle(controller, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while controller.is_running() and time.monotonic() < deadline:
        QCoreApplication.processEvents()
        time.sleep(0.01)


class TestResults:
    def test_finished_applies_suggestions(self, controller, store):
        controller._src = "raw.mp4"
        controller._at_time = 30.0
        controller._on_finished([SuggestedSegment(2.0, 6.0, "hook", 9.0)])
        clip = store.project.tracks[0].clips[-1]
        assert clip.name == "AI Cut 1"
        assert (clip.start_time, clip.duration, clip.src) == (30.0, 4.0, "raw.mp4")
        assert store.can_undo()

    def test_error_reported_on_store(self, controller, store):
        failures = []
        store.advisory_failed.connect(lambda message: failures.append(message))
        controller._on_error("quota exceeded")
        assert failures == ["quota exceeded"]


class TestThreadOwnership:
    def test_second_request_refused_while_busy(self, controller):
        controller._thread = MagicMock()
        assert controller.is_running()
        assert controller.request_suggestions("again") is False

    def test_cancel_when_idle_is_noop(self, controller):
        controller.cancel()
        assert not controller.is_running()

    def test_request_runs_to_completion(self, controller, store, project):
        busy = []
        controller.busy_changed.connect(lambda flag: busy.append(flag))
        segments = [SuggestedSegment(0.0, 3.0, "open", 8.0)]
        with patch.object(AdvisoryService, "analyze_video_content", return_value=segments) as analyze:
            assert controller.request_suggestions("beach day", src="raw.mp4", at_time=40.0)
            _wait_idle(controller)
        assert not controller.is_running()
        assert busy == [True, False]
        analyze.assert_called_once_with("beach day", project.duration, "KEY")
        assert store.project.tracks[0].clips[-1].start_time == 40.0

    def test_failure_runs_to_completion(self, controller, store):
        failures = []
        store.advisory_failed.connect(lambda message: failures.append(message))
        with patch.object(AdvisoryService, "analyze_video_content", side_effect=RuntimeError("offline")):
            assert controller.request_suggestions("beach day")
            _wait_idle(controller)
        assert not controller.is_running()
        assert failures == ["offline"]

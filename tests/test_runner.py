"""Tests for GuideRunner and the high-level run() API."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

import faceguide as fg
from faceguide import GuideConfig, GuideSession
from faceguide.runner import GuideRunner, RunResult, StopRun, source_fps
from faceguide.types import DistanceStatus, Frame

from helpers import FakeBackend, blank_image, make_face


def _frames(n):
    return [blank_image() for _ in range(n)]


class TestGuideRunner:
    def test_run_with_arrays(self):
        backend = FakeBackend([make_face()])
        runner = GuideRunner(GuideSession(GuideConfig(min_frames_in=3), backend=backend))
        result = runner.run(_frames(5))

        assert isinstance(result, RunResult)
        assert result.frame_count == 5
        assert result.capture_allowed_frames == 3
        assert (0, "distance_status", DistanceStatus.OK) in result.transitions
        assert (0, "face_good", True) in result.transitions
        assert (2, "capture_allowed", True) in result.transitions

    def test_frames_processed_in_order(self):
        seen = []
        backend = FakeBackend([make_face()])
        runner = GuideRunner(
            GuideSession(backend=backend),
            on_frame=lambda frame, obs: seen.append(obs.frame_id),
        )
        frames = [Frame(data=blank_image(), frame_id=i) for i in (10, 11, 12)]
        runner.run(frames)
        assert seen == [10, 11, 12]

    def test_max_frames(self):
        backend = FakeBackend()
        result = GuideRunner(GuideSession(backend=backend)).run(_frames(10), max_frames=4)
        assert result.frame_count == 4
        assert backend.calls == 4

    def test_max_frames_zero_processes_nothing(self):
        backend = FakeBackend()
        result = GuideRunner(GuideSession(backend=backend)).run(_frames(5), max_frames=0)
        assert result.frame_count == 0
        assert backend.calls == 0

    def test_stop_run_from_callback(self):
        def on_frame(frame, obs):
            if obs.frame_id == 1:
                raise StopRun()

        backend = FakeBackend()
        result = GuideRunner(GuideSession(backend=backend)).run(_frames(5), on_frame=on_frame)
        assert result.stopped
        assert result.frame_count == 2

    def test_unsized_frames_not_counted(self):
        frames = [np.zeros((0, 0, 3), dtype=np.uint8), blank_image()]
        result = GuideRunner(GuideSession(backend=FakeBackend())).run(frames)
        assert result.frame_count == 1

    def test_face_loss_transitions(self):
        backend = FakeBackend([make_face()] * 6 + [None])
        result = GuideRunner(GuideSession(backend=backend)).run(_frames(8))
        lost = [t for t in result.transitions if t[0] == 6]
        assert lost == [
            (6, "distance_status", DistanceStatus.TOO_FAR),
            (6, "capture_allowed", False),
            (6, "face_good", False),
        ]

    def test_camera_open_failure(self):
        cap = MagicMock()
        cap.isOpened.return_value = False
        with patch("faceguide.runner.cv2.VideoCapture", return_value=cap):
            with pytest.raises(IOError):
                GuideRunner(GuideSession(backend=FakeBackend())).run(0)
        cap.release.assert_called()

    def test_capture_source_frames(self):
        cap = MagicMock()
        cap.isOpened.return_value = True
        cap.read.side_effect = [(True, blank_image()), (True, blank_image()), (False, None)]
        cap.get.return_value = 33.0
        with patch("faceguide.runner.cv2.VideoCapture", return_value=cap):
            result = GuideRunner(GuideSession(backend=FakeBackend())).run("clip.mp4")
        assert result.frame_count == 2
        cap.release.assert_called_once()


class TestSourceFps:
    def test_non_path_default(self):
        assert source_fps(0) == 30.0
        assert source_fps([], default=15.0) == 15.0

    def test_reads_file_fps(self):
        cap = MagicMock()
        cap.isOpened.return_value = True
        cap.get.return_value = 24.0
        with patch("faceguide.runner.cv2.VideoCapture", return_value=cap):
            assert source_fps("clip.mp4") == 24.0


class TestRunApi:
    def test_run_with_backend_instance(self):
        backend = FakeBackend([make_face()])
        result = fg.run(_frames(7), backend=backend, config=GuideConfig(min_frames_in=6))

        assert isinstance(result, fg.Result)
        assert result.frame_count == 7
        assert result.capture_allowed_frames == 2
        assert result.config["min_frames_in"] == 6
        assert backend.cleaned == 1

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            fg.run(_frames(1), backend="nope")

    def test_run_saves_video(self, tmp_path):
        saver = MagicMock()
        with patch("faceguide.display.VideoSaver", return_value=saver) as saver_cls:
            fg.run(_frames(3), backend=FakeBackend(), output=str(tmp_path / "out.mp4"))

        saver_cls.assert_called_once()
        assert saver.update.call_count == 3
        saver.close.assert_called_once()

    def test_backend_cleanup_error_still_releases_outputs(self, tmp_path):
        saver = MagicMock()
        backend = _FailingCleanup([make_face()])
        with patch("faceguide.display.VideoSaver", return_value=saver):
            result = fg.run(_frames(3), backend=backend, output=str(tmp_path / "out.mp4"))

        assert isinstance(result, fg.Result)
        assert result.frame_count == 3
        assert backend.cleaned == 1
        saver.close.assert_called_once()


class _FailingCleanup(FakeBackend):
    def cleanup(self) -> None:
        super().cleanup()
        raise RuntimeError("backend teardown failed")

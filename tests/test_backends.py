"""Tests for landmark backends (mediapipe mocked)."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from faceguide.backends import create_backend
from faceguide.backends.mediapipe import MediaPipeFaceMesh
from faceguide.types import FaceObservation

from helpers import blank_image


def _mp_module(landmark_sets):
    """Fake ``mediapipe`` module whose FaceMesh returns the given landmark sets."""
    mesh = MagicMock()
    faces = [
        SimpleNamespace(landmark=[SimpleNamespace(x=x, y=y, z=0.0) for x, y in pts])
        for pts in landmark_sets
    ]
    mesh.process.return_value = SimpleNamespace(multi_face_landmarks=faces or None)
    mp = MagicMock()
    mp.solutions.face_mesh.FaceMesh.return_value = mesh
    return mp, mesh


class TestMediaPipeFaceMesh:
    def test_detect_scales_to_pixels(self):
        mp, mesh = _mp_module([[(0.5, 0.5), (0.25, 0.75)]])
        with patch.dict(sys.modules, {"mediapipe": mp}):
            backend = MediaPipeFaceMesh()
            backend.initialize()
            faces = backend.detect(blank_image(640, 480))

        assert len(faces) == 1
        face = faces[0]
        assert isinstance(face, FaceObservation)
        assert face.confidence is None
        assert face.keypoints[0] == (320.0, 240.0)
        assert face.keypoints[1] == (160.0, 360.0)

    def test_no_face(self):
        mp, _ = _mp_module([])
        with patch.dict(sys.modules, {"mediapipe": mp}):
            backend = MediaPipeFaceMesh()
            assert backend.detect(blank_image()) == []

    def test_initialize_once_and_cleanup(self):
        mp, mesh = _mp_module([])
        with patch.dict(sys.modules, {"mediapipe": mp}):
            backend = MediaPipeFaceMesh(refine_landmarks=True)
            backend.initialize()
            backend.initialize()
            backend.cleanup()
            backend.cleanup()

        mp.solutions.face_mesh.FaceMesh.assert_called_once()
        assert mp.solutions.face_mesh.FaceMesh.call_args.kwargs["refine_landmarks"] is True
        mesh.close.assert_called_once()

    def test_missing_mediapipe(self):
        with patch.dict(sys.modules, {"mediapipe": None}):
            with pytest.raises(ImportError):
                MediaPipeFaceMesh().initialize()


class TestCreateBackend:
    def test_mediapipe(self):
        assert isinstance(create_backend("mediapipe"), MediaPipeFaceMesh)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_backend("dlib")

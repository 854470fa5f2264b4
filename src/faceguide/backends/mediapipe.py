"""MediaPipe FaceMesh backend for landmark detection."""

import logging
from typing import List, Optional

import cv2
import numpy as np

from faceguide.types import FaceObservation

logger = logging.getLogger(__name__)


class MediaPipeFaceMesh:
    """Landmark backend using MediaPipe FaceMesh in tracking (video) mode.

    Produces 468 landmarks (478 with ``refine_landmarks``) in pixel
    coordinates. FaceMesh reports no per-face confidence, so observations
    carry ``confidence=None`` and the guide's confidence gate passes.

    Args:
        max_num_faces: Faces to track. The guide only uses the first.
        refine_landmarks: Enable iris refinement landmarks.
        min_detection_confidence: Detector threshold [0, 1].
        min_tracking_confidence: Tracker threshold [0, 1].

    Example:
        >>> backend = MediaPipeFaceMesh()
        >>> backend.initialize()
        >>> faces = backend.detect(image)
        >>> backend.cleanup()
    """

    def __init__(
        self,
        max_num_faces: int = 1,
        refine_landmarks: bool = False,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        self._max_num_faces = max_num_faces
        self._refine_landmarks = refine_landmarks
        self._det_conf = max(0.01, min(0.99, float(min_detection_confidence)))
        self._track_conf = max(0.01, min(0.99, float(min_tracking_confidence)))
        self._mesh: Optional[object] = None

    def initialize(self) -> None:
        if self._mesh is not None:
            return

        try:
            import mediapipe as mp
        except ImportError:
            raise ImportError(
                "mediapipe is required for the MediaPipeFaceMesh backend. "
                "Install with: pip install faceguide[mediapipe]"
            )

        self._mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=self._max_num_faces,
            refine_landmarks=self._refine_landmarks,
            min_detection_confidence=self._det_conf,
            min_tracking_confidence=self._track_conf,
        )
        logger.info(
            "MediaPipe FaceMesh initialized (max_faces=%d, refine=%s)",
            self._max_num_faces, self._refine_landmarks,
        )

    def detect(self, image: np.ndarray) -> List[FaceObservation]:
        if self._mesh is None:
            self.initialize()
        if image is None or image.size == 0:
            return []

        h, w = image.shape[:2]
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        results = self._mesh.process(rgb)
        if not results.multi_face_landmarks:
            return []

        faces = []
        for face_landmarks in results.multi_face_landmarks:
            points = [(lm.x * w, lm.y * h) for lm in face_landmarks.landmark]
            faces.append(FaceObservation.from_points(points))
        return faces

    def cleanup(self) -> None:
        if self._mesh is not None:
            self._mesh.close()
            self._mesh = None
            logger.debug("MediaPipe FaceMesh released")


__all__ = ["MediaPipeFaceMesh"]

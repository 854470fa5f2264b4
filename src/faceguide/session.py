"""GuideSession: the per-frame host step for a live capture guide.

Derives the target ellipse from the frame size, runs the landmark
backend, evaluates geometry, advances the decision engine and delivers
change callbacks. One session per guide lifetime; ``close()`` ends it.

Example:
    >>> from faceguide import GuideSession, GuideConfig
    >>> from faceguide.backends.mediapipe import MediaPipeFaceMesh
    >>> with GuideSession(GuideConfig(), backend=MediaPipeFaceMesh(),
    ...                   on_capture_allowed_change=print) as session:
    ...     obs = session.process_frame(frame)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Sequence

import numpy as np

from faceguide.backends.base import LandmarkBackend
from faceguide.config import GuideConfig
from faceguide.engine import DecisionEngine, GuideDecision, GuideState
from faceguide.geometry import GeometryEvaluator
from faceguide.observation import Observation
from faceguide.types import DistanceStatus, FaceObservation, Keypoint, TargetRegion

logger = logging.getLogger(__name__)

SOURCE_NAME = "face.guide"

BoolCallback = Callable[[bool], None]
DistanceCallback = Callable[[DistanceStatus], None]
KeypointsCallback = Callable[[Optional[Sequence[Keypoint]]], None]


class GuideSession:
    """Host-side driver for one guide session.

    Args:
        config: Session configuration. Defaults to GuideConfig().
        backend: Landmark backend; required for process_frame().
        on_face_status: Called with the new face-good value on change.
        on_distance_change: Called with the new DistanceStatus on change.
        on_capture_allowed_change: Called with the new capture gate on change.
        on_keypoints: Called every frame with the keypoints, or None.
    """

    def __init__(
        self,
        config: Optional[GuideConfig] = None,
        backend: Optional[LandmarkBackend] = None,
        *,
        on_face_status: Optional[BoolCallback] = None,
        on_distance_change: Optional[DistanceCallback] = None,
        on_capture_allowed_change: Optional[BoolCallback] = None,
        on_keypoints: Optional[KeypointsCallback] = None,
    ):
        self.config = config or GuideConfig()
        self._backend = backend
        self._evaluator = GeometryEvaluator.from_config(self.config)
        self._engine: Optional[DecisionEngine] = DecisionEngine(self.config)
        self._callbacks = {
            "face_good": on_face_status,
            "distance_status": on_distance_change,
            "capture_allowed": on_capture_allowed_change,
        }
        self._on_keypoints = on_keypoints
        self._backend_ready = False
        self._closed = False

        self._stats_frames = 0
        self._stats_no_face = 0
        self._stats_capture = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> GuideState:
        """Current persistent engine state (live object, read-only by convention)."""
        self._check_open()
        return self._engine.state

    def region_for(self, width: int, height: int) -> TargetRegion:
        return TargetRegion.from_frame_size(width, height, self.config.ellipse_margin)

    def process_frame(self, frame: Any) -> Optional[Observation]:
        """Detect and decide for one frame.

        Args:
            frame: Frame object with ``.data`` (BGR array), or a raw ndarray.

        Returns:
            Observation for this frame, or None if the frame has no size yet.

        Raises:
            RuntimeError: If the session is closed or has no backend.
        """
        self._check_open()
        if self._backend is None:
            raise RuntimeError("GuideSession.process_frame() requires a landmark backend")

        image = frame if isinstance(frame, np.ndarray) else getattr(frame, "data", None)
        if image is None or getattr(image, "ndim", 0) < 2:
            logger.debug("face.guide skipped frame without image data")
            return None
        height, width = image.shape[:2]
        if not width or not height:
            logger.debug("face.guide skipped unsized frame")
            return None

        if not self._backend_ready:
            self._backend.initialize()
            self._backend_ready = True

        t0 = time.perf_counter()
        faces = self._backend.detect(image)
        detect_ms = (time.perf_counter() - t0) * 1000.0

        face = faces[0] if faces else None
        obs = self.process_face(
            face,
            width,
            height,
            frame_id=getattr(frame, "frame_id", self._stats_frames),
            t_ns=getattr(frame, "t_src_ns", 0),
        )
        obs.timing = {"detect_ms": detect_ms, **(obs.timing or {})}
        return obs

    def process_face(
        self,
        face: Optional[FaceObservation],
        width: int,
        height: int,
        *,
        frame_id: int = 0,
        t_ns: int = 0,
    ) -> Observation:
        """Decide for an already-detected face (or None) on a width x height frame."""
        self._check_open()

        t0 = time.perf_counter()
        region = self.region_for(width, height)
        geometry = self._evaluator.evaluate(face, region) if face is not None else None
        decision = self._engine.step(geometry)
        decide_ms = (time.perf_counter() - t0) * 1000.0

        self._stats_frames += 1
        if face is None:
            self._stats_no_face += 1
        if decision.capture_allowed:
            self._stats_capture += 1

        self._deliver(decision, face)

        hyst = self._engine.state.hysteresis
        return Observation(
            source=SOURCE_NAME,
            frame_id=frame_id,
            t_ns=t_ns,
            signals={
                "face_detected": decision.face_detected,
                "face_good": decision.face_good,
                "distance_status": decision.distance_status.value,
                "capture_allowed": decision.capture_allowed,
                "good_streak": hyst.good_streak,
                "bad_streak": hyst.bad_streak,
                "calibrated": decision.calibrated,
            },
            data=decision,
            metadata={"region": region, "face": face},
            timing={"decide_ms": decide_ms},
        )

    def _deliver(self, decision: GuideDecision, face: Optional[FaceObservation]) -> None:
        """Fire change callbacks, plus the every-frame keypoints callback."""
        events = dict(decision.events.items())

        if "distance_status" in events and self._callbacks["distance_status"]:
            self._callbacks["distance_status"](events["distance_status"])

        if self._on_keypoints:
            self._on_keypoints(face.keypoints if face is not None else None)

        for name in ("capture_allowed", "face_good"):
            callback = self._callbacks[name]
            if name in events and callback:
                callback(events[name])

    def close(self) -> None:
        """End the session: drop engine state and release the backend."""
        if self._closed:
            return
        self._closed = True
        self._engine = None

        if self._backend is not None and self._backend_ready:
            self._backend_ready = False
            try:
                self._backend.cleanup()
            except Exception:
                logger.debug("Cleanup error in %s", type(self._backend).__name__, exc_info=True)

        if self._stats_frames > 0:
            logger.info(
                "face.guide summary: %d frames, capture allowed %d (%.0f%%), no face %d",
                self._stats_frames,
                self._stats_capture,
                100.0 * self._stats_capture / self._stats_frames,
                self._stats_no_face,
            )

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("GuideSession is closed")

    def __enter__(self) -> "GuideSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["GuideSession", "SOURCE_NAME"]

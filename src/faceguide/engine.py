"""Decision engine: debounced capture signals from per-frame geometry.

Owns all cross-frame state for one guide session:

- calibration: one-shot eye-distance baseline, captured after
  CALIBRATE_MIN_STREAK consecutive geometry-ok frames and dropped after
  LOST_RESET_STREAK consecutive no-face frames
- hysteresis: good/bad streak counters gating ``capture_allowed``
  (on after ``min_frames_in`` good frames, off after ``min_frames_out``
  bad frames, held in between)
- emitted signals: last value reported per signal, so each frame only
  surfaces the signals that actually changed

One ``step()`` per frame, synchronous, in frame order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Tuple

from faceguide.config import (
    CALIBRATE_MIN_STREAK,
    CLOSE_FACTOR,
    FAR_FACTOR,
    LOST_RESET_STREAK,
    GuideConfig,
)
from faceguide.geometry import GeometryResult
from faceguide.types import DistanceStatus

logger = logging.getLogger(__name__)


@dataclass
class CalibrationState:
    """Eye-distance calibration.

    ``baseline_eye_distance`` is written once and only cleared by a
    no-face streak reaching LOST_RESET_STREAK.
    """

    baseline_eye_distance: Optional[float] = None
    calibrating_streak: int = 0
    lost_streak: int = 0

    @property
    def calibrated(self) -> bool:
        return self.baseline_eye_distance is not None


@dataclass
class HysteresisState:
    """Consecutive good/bad frame counters. At most one is nonzero."""

    good_streak: int = 0
    bad_streak: int = 0

    def mark_good(self) -> None:
        self.good_streak += 1
        self.bad_streak = 0

    def mark_bad(self) -> None:
        self.bad_streak += 1
        self.good_streak = 0


@dataclass
class EmittedSignals:
    """Last value reported to the host for each signal.

    ``distance_status`` starts unset so the first decided status is
    always reported.
    """

    face_good: bool = False
    distance_status: Optional[DistanceStatus] = None
    capture_allowed: bool = False


@dataclass
class GuideState:
    """All persistent per-session state."""

    calibration: CalibrationState = field(default_factory=CalibrationState)
    hysteresis: HysteresisState = field(default_factory=HysteresisState)
    emitted: EmittedSignals = field(default_factory=EmittedSignals)

    def copy(self) -> "GuideState":
        return GuideState(
            calibration=replace(self.calibration),
            hysteresis=replace(self.hysteresis),
            emitted=replace(self.emitted),
        )


@dataclass(frozen=True)
class GuideEvents:
    """Signal transitions produced by one frame. ``None`` means unchanged."""

    face_good: Optional[bool] = None
    distance_status: Optional[DistanceStatus] = None
    capture_allowed: Optional[bool] = None

    def __bool__(self) -> bool:
        return any(v is not None for _, v in self._all())

    def _all(self) -> Tuple[Tuple[str, object], ...]:
        return (
            ("distance_status", self.distance_status),
            ("capture_allowed", self.capture_allowed),
            ("face_good", self.face_good),
        )

    def items(self) -> Iterator[Tuple[str, object]]:
        """Present transitions as (name, value), in delivery order."""
        for name, value in self._all():
            if value is not None:
                yield name, value


@dataclass(frozen=True)
class GuideDecision:
    """Outcome of one decision cycle.

    Attributes:
        face_detected: Whether a face was observed this frame.
        face_good: Current face-good value (frame-level, undebounced).
        distance_status: Current distance classification.
        capture_allowed: Debounced capture gate.
        geometry_ok: Containment + coverage + confidence satisfied.
        events: Only the signals that changed this frame.
        geometry: Geometry measurements, None when no face was observed.
        calibrated: Whether an eye-distance baseline is set.
    """

    face_detected: bool
    face_good: bool
    distance_status: DistanceStatus
    capture_allowed: bool
    geometry_ok: bool
    events: GuideEvents = field(default_factory=GuideEvents)
    geometry: Optional[GeometryResult] = None
    calibrated: bool = False


class DecisionEngine:
    """Per-session decision state machine.

    Args:
        config: Session configuration (thresholds and hysteresis lengths).

    Example:
        >>> engine = DecisionEngine(GuideConfig())
        >>> decision = engine.step(geometry)      # face observed
        >>> decision = engine.step(None)          # no face this frame
        >>> for name, value in decision.events.items():
        ...     print(name, value)
    """

    def __init__(self, config: Optional[GuideConfig] = None):
        self.config = config or GuideConfig()
        self._state = GuideState()

    @property
    def state(self) -> GuideState:
        return self._state

    def reset(self) -> None:
        """Drop all session state (as if the guide had just opened)."""
        self._state = GuideState()

    def step(self, geometry: Optional[GeometryResult]) -> GuideDecision:
        """Advance one frame.

        Args:
            geometry: This frame's measurements, or None when no face was observed.
        """
        if geometry is None:
            return self._step_no_face()
        return self._step_face(geometry)

    # ── Case A: no face ──

    def _step_no_face(self) -> GuideDecision:
        cal = self._state.calibration
        hyst = self._state.hysteresis

        cal.lost_streak += 1
        if cal.lost_streak >= LOST_RESET_STREAK:
            if cal.baseline_eye_distance is not None:
                logger.info(
                    "face.guide calibration cleared after %d no-face frames (baseline=%.1fpx)",
                    cal.lost_streak, cal.baseline_eye_distance,
                )
            cal.baseline_eye_distance = None
            cal.calibrating_streak = 0

        hyst.mark_bad()

        return self._emit(
            face_detected=False,
            face_good=False,
            distance_status=DistanceStatus.TOO_FAR,
            capture_allowed=False,
            geometry_ok=False,
            geometry=None,
        )

    # ── Case B: face observed ──

    def _step_face(self, geometry: GeometryResult) -> GuideDecision:
        cfg = self.config
        cal = self._state.calibration
        hyst = self._state.hysteresis

        geometry_ok = geometry.geometry_ok(cfg.percent_inside_required)

        # lost_streak only resets on well-positioned frames, not mere presence
        if geometry_ok:
            cal.calibrating_streak += 1
            cal.lost_streak = 0
        else:
            cal.calibrating_streak = 0

        if cal.baseline_eye_distance is None and cal.calibrating_streak >= CALIBRATE_MIN_STREAK:
            cal.baseline_eye_distance = geometry.eye_distance
            logger.info(
                "face.guide calibrated: baseline eye distance %.1fpx after %d frames",
                geometry.eye_distance, cal.calibrating_streak,
            )

        distance_status = self._classify_distance(geometry)

        if distance_status is not DistanceStatus.OK:
            hyst.mark_bad()
            face_good = False
            capture_allowed = False
        else:
            face_good = geometry_ok
            if geometry_ok:
                hyst.mark_good()
            else:
                hyst.mark_bad()

            if hyst.good_streak >= cfg.min_frames_in:
                capture_allowed = True
            elif hyst.bad_streak >= cfg.min_frames_out:
                capture_allowed = False
            else:
                capture_allowed = self._state.emitted.capture_allowed

        return self._emit(
            face_detected=True,
            face_good=face_good,
            distance_status=distance_status,
            capture_allowed=capture_allowed,
            geometry_ok=geometry_ok,
            geometry=geometry,
        )

    def _classify_distance(self, geometry: GeometryResult) -> DistanceStatus:
        cfg = self.config
        baseline = self._state.calibration.baseline_eye_distance

        if baseline is not None:
            if geometry.eye_distance < baseline * FAR_FACTOR:
                return DistanceStatus.TOO_FAR
            if geometry.eye_distance > baseline * CLOSE_FACTOR:
                return DistanceStatus.TOO_CLOSE
            return DistanceStatus.OK

        if geometry.relative_eye_distance < cfg.min_eye_ratio:
            return DistanceStatus.TOO_FAR
        if geometry.relative_eye_distance > cfg.max_eye_ratio:
            return DistanceStatus.TOO_CLOSE
        return DistanceStatus.OK

    def _emit(
        self,
        *,
        face_detected: bool,
        face_good: bool,
        distance_status: DistanceStatus,
        capture_allowed: bool,
        geometry_ok: bool,
        geometry: Optional[GeometryResult],
    ) -> GuideDecision:
        """Diff against last-emitted values and record the new ones."""
        emitted = self._state.emitted

        distance_event = None
        if distance_status is not emitted.distance_status:
            distance_event = distance_status
            emitted.distance_status = distance_status

        capture_event = None
        if capture_allowed != emitted.capture_allowed:
            capture_event = capture_allowed
            emitted.capture_allowed = capture_allowed

        face_event = None
        if face_good != emitted.face_good:
            face_event = face_good
            emitted.face_good = face_good

        events = GuideEvents(
            face_good=face_event,
            distance_status=distance_event,
            capture_allowed=capture_event,
        )
        if events:
            logger.debug(
                "face.guide transitions: %s (good=%d bad=%d)",
                dict(events.items()),
                self._state.hysteresis.good_streak,
                self._state.hysteresis.bad_streak,
            )

        return GuideDecision(
            face_detected=face_detected,
            face_good=face_good,
            distance_status=distance_status,
            capture_allowed=capture_allowed,
            geometry_ok=geometry_ok,
            events=events,
            geometry=geometry,
            calibrated=self._state.calibration.calibrated,
        )


__all__ = [
    "CalibrationState",
    "HysteresisState",
    "EmittedSignals",
    "GuideState",
    "GuideEvents",
    "GuideDecision",
    "DecisionEngine",
]

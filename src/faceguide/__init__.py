"""faceguide - Live face capture guide.

Turns noisy per-frame face landmarks into three stable, edge-triggered
signals: face-good, distance status and capture-allowed.

Quick Start:
    >>> import faceguide as fg
    >>> result = fg.run(0, window=True)

Per-frame use from your own loop:
    >>> from faceguide import GuideSession, GuideConfig
    >>> session = GuideSession(GuideConfig(), backend=my_backend,
    ...                        on_capture_allowed_change=enable_button)
    >>> obs = session.process_frame(frame)
    >>> session.close()
"""

from faceguide.config import GuideConfig
from faceguide.engine import DecisionEngine, GuideDecision, GuideEvents, GuideState
from faceguide.geometry import GeometryEvaluator, GeometryResult
from faceguide.main import Result, run
from faceguide.observation import Observation
from faceguide.session import GuideSession
from faceguide.types import DistanceStatus, FaceObservation, Frame, Keypoint, TargetRegion

__all__ = [
    # Configuration
    "GuideConfig",
    # Types
    "Keypoint",
    "FaceObservation",
    "TargetRegion",
    "DistanceStatus",
    "Frame",
    "Observation",
    # Core
    "GeometryEvaluator",
    "GeometryResult",
    "DecisionEngine",
    "GuideDecision",
    "GuideEvents",
    "GuideState",
    # Host
    "GuideSession",
    # High-level API
    "run",
    "Result",
]

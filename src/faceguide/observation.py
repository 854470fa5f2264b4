"""Observation dataclass for per-frame guide outputs."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Observation:
    """Per-frame output of a guide session.

    Attributes:
        source: Name of the producer (``"face.guide"``).
        frame_id: Frame identifier from the capture source.
        t_ns: Timestamp in nanoseconds (source timeline).
        signals: Flat scalar signals for logging/overlays.
        data: Type-safe output (GuideDecision).
        metadata: Additional metadata about the observation.
        timing: Optional per-component timing in milliseconds.
    """

    source: str
    frame_id: int
    t_ns: int
    signals: Dict[str, Any] = field(default_factory=dict)
    data: Optional[Any] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    timing: Optional[Dict[str, float]] = None  # {"detect_ms": 12.3, "decide_ms": 0.1}

    @property
    def capture_allowed(self) -> bool:
        return bool(self.signals.get("capture_allowed", False))

    @property
    def face_good(self) -> bool:
        return bool(self.signals.get("face_good", False))


__all__ = ["Observation"]

"""Test helpers for faceguide tests."""

from typing import List, Optional, Sequence

import numpy as np

from faceguide.geometry import GeometryResult
from faceguide.types import FaceObservation

FRAME_W = 640
FRAME_H = 480
# TargetRegion for 640x480: cx=320, cy=192, rx=192, ry=148.8
CENTER = (320.0, 192.0)

LEFT_EYE = 33
RIGHT_EYE = 263


def make_face(
    cx: float = CENTER[0],
    cy: float = CENTER[1],
    half_w: float = 60.0,
    half_h: float = 60.0,
    eye_distance: float = 40.0,
    confidence: Optional[float] = None,
    n_cols: int = 15,
    n_rows: int = 20,
) -> FaceObservation:
    """Grid of keypoints filling a box, with eye landmarks set horizontally apart.

    Defaults give 300 keypoints comfortably inside the 640x480 guide ellipse
    and an eye ratio of ~0.13 (between the default min/max ratios).
    """
    xs = np.linspace(cx - half_w, cx + half_w, n_cols)
    ys = np.linspace(cy - half_h, cy + half_h, n_rows)
    points = [(x, y) for y in ys for x in xs]
    points[LEFT_EYE] = (cx - eye_distance / 2, cy)
    points[RIGHT_EYE] = (cx + eye_distance / 2, cy)
    return FaceObservation.from_points(points, confidence=confidence)


def make_geometry(
    ok: bool = True,
    eye_distance: float = 40.0,
    relative: float = 0.12,
    fraction: float = 1.0,
    confidence_ok: bool = True,
) -> GeometryResult:
    """GeometryResult built directly, bypassing keypoints."""
    return GeometryResult(
        bounding_box_inside=ok,
        fraction_inside=fraction,
        confidence_ok=confidence_ok,
        eye_distance=eye_distance,
        relative_eye_distance=relative,
    )


def blank_image(width: int = FRAME_W, height: int = FRAME_H, value: int = 0) -> np.ndarray:
    return np.full((height, width, 3), value, dtype=np.uint8)


class FakeBackend:
    """Landmark backend replaying a scripted list of per-frame results.

    Each script entry is a FaceObservation, None (no face) or a list of
    faces. Once the script is exhausted, the last entry repeats.
    """

    def __init__(self, script: Optional[Sequence] = None):
        self.script = list(script) if script is not None else [make_face()]
        self.calls = 0
        self.initialized = 0
        self.cleaned = 0

    def initialize(self) -> None:
        self.initialized += 1

    def detect(self, image: np.ndarray) -> List[FaceObservation]:
        entry = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if entry is None:
            return []
        if isinstance(entry, list):
            return entry
        return [entry]

    def cleanup(self) -> None:
        self.cleaned += 1

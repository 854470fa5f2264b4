"""Per-frame face geometry against the guide ellipse.

Pure functions of (FaceObservation, TargetRegion); no state is kept
between calls. Callers must pass observations that contain both eye
reference landmarks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from faceguide.config import (
    CONFIDENCE_MIN,
    DEFAULT_LEFT_EYE_INDEX,
    DEFAULT_RIGHT_EYE_INDEX,
)
from faceguide.types import FaceObservation, TargetRegion


@dataclass(frozen=True)
class GeometryResult:
    """Geometry measurements for one observed face.

    Attributes:
        bounding_box_inside: All four keypoint-bbox corners fall inside the
            ellipse (vacuously True when the box check is disabled).
        fraction_inside: Fraction of keypoints individually inside [0, 1].
        confidence_ok: Detector confidence missing, or above CONFIDENCE_MIN.
        eye_distance: Pixel distance between the eye reference landmarks.
        relative_eye_distance: eye_distance normalised by the ellipse's
            smaller diameter; used until calibration completes.
        bounding_box: (min_x, min_y, max_x, max_y) of all keypoints.
    """

    bounding_box_inside: bool
    fraction_inside: float
    confidence_ok: bool
    eye_distance: float
    relative_eye_distance: float
    bounding_box: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    def geometry_ok(self, percent_inside_required: float) -> bool:
        """Containment, coverage and confidence all satisfied."""
        return (
            self.bounding_box_inside
            and self.fraction_inside >= percent_inside_required
            and self.confidence_ok
        )


def bounding_box(points: np.ndarray) -> Tuple[float, float, float, float]:
    """Axis-aligned bounding box (min_x, min_y, max_x, max_y) of an (N, 2) array."""
    mins = points.min(axis=0)
    maxs = points.max(axis=0)
    return float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1])


def is_box_inside(box: Tuple[float, float, float, float], region: TargetRegion) -> bool:
    """True if all four corners of the box lie inside the ellipse."""
    min_x, min_y, max_x, max_y = box
    corners = ((min_x, min_y), (max_x, min_y), (min_x, max_y), (max_x, max_y))
    return all(region.contains(x, y) for x, y in corners)


def fraction_inside(points: np.ndarray, region: TargetRegion) -> float:
    """Fraction of points individually inside the ellipse."""
    return float(np.count_nonzero(region.contains_many(points))) / len(points)


def landmark_distance(face: FaceObservation, i: int, j: int) -> float:
    """Euclidean distance between two landmarks of the observation."""
    a = face.keypoints[i]
    b = face.keypoints[j]
    return math.hypot(a.x - b.x, a.y - b.y)


def confidence_ok(confidence: Optional[float]) -> bool:
    """Missing confidence passes; otherwise it must exceed CONFIDENCE_MIN."""
    if confidence is None:
        return True
    return confidence > CONFIDENCE_MIN


class GeometryEvaluator:
    """Evaluates a face observation against the guide ellipse.

    Args:
        box_inside_required: When False, the bounding-box test is skipped
            and reported as satisfied.
        left_eye_index: Landmark index of the left eye reference point.
        right_eye_index: Landmark index of the right eye reference point.
    """

    def __init__(
        self,
        box_inside_required: bool = True,
        left_eye_index: int = DEFAULT_LEFT_EYE_INDEX,
        right_eye_index: int = DEFAULT_RIGHT_EYE_INDEX,
    ):
        self.box_inside_required = box_inside_required
        self.left_eye_index = left_eye_index
        self.right_eye_index = right_eye_index

    @classmethod
    def from_config(cls, config) -> "GeometryEvaluator":
        left, right = config.eye_indices
        return cls(
            box_inside_required=config.box_inside_required,
            left_eye_index=left,
            right_eye_index=right,
        )

    def evaluate(self, face: FaceObservation, region: TargetRegion) -> GeometryResult:
        eye_px = landmark_distance(face, self.left_eye_index, self.right_eye_index)
        denom = 2 * min(region.rx, region.ry)
        relative = eye_px / max(denom, 1)

        points = face.as_array()
        box = bounding_box(points)
        box_inside = is_box_inside(box, region) if self.box_inside_required else True

        return GeometryResult(
            bounding_box_inside=box_inside,
            fraction_inside=fraction_inside(points, region),
            confidence_ok=confidence_ok(face.confidence),
            eye_distance=eye_px,
            relative_eye_distance=relative,
            bounding_box=box,
        )


__all__ = [
    "GeometryResult",
    "GeometryEvaluator",
    "bounding_box",
    "is_box_inside",
    "fraction_inside",
    "landmark_distance",
    "confidence_ok",
]

"""Face guide domain types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple, Optional, Sequence, Tuple

import numpy as np


class Keypoint(NamedTuple):
    """A single 2D landmark in frame pixel coordinates."""

    x: float
    y: float


class DistanceStatus(str, Enum):
    """Distance classification of the observed face.

    Values match the payload strings delivered to presentation surfaces.
    """

    OK = "ok"
    TOO_FAR = "tooFar"
    TOO_CLOSE = "tooClose"


@dataclass(frozen=True)
class FaceObservation:
    """One detected face: ordered keypoints plus optional in-view confidence.

    Landmark order is defined by the detector (e.g. MediaPipe FaceMesh).

    Attributes:
        keypoints: Ordered landmark locations in pixels.
        confidence: Face-in-view confidence [0, 1], or None when the
            detector does not report one.
    """

    keypoints: Tuple[Keypoint, ...]
    confidence: Optional[float] = None

    @classmethod
    def from_points(
        cls,
        points: Iterable[Sequence[float]],
        confidence: Optional[float] = None,
    ) -> "FaceObservation":
        """Build from any iterable of (x, y[, z]) rows. Extra coordinates are dropped."""
        keypoints = tuple(Keypoint(float(p[0]), float(p[1])) for p in points)
        return cls(keypoints=keypoints, confidence=confidence)

    def as_array(self) -> np.ndarray:
        """Keypoints as an (N, 2) float64 array."""
        return np.asarray(self.keypoints, dtype=np.float64).reshape(-1, 2)

    def __len__(self) -> int:
        return len(self.keypoints)


@dataclass(frozen=True)
class TargetRegion:
    """Elliptical target area, recomputed every frame from the frame size."""

    cx: float
    cy: float
    rx: float
    ry: float

    @classmethod
    def from_frame_size(
        cls, width: float, height: float, margin: float = 1.0
    ) -> "TargetRegion":
        """Derive the guide ellipse for a frame.

        The ellipse sits horizontally centred and slightly above the
        vertical middle, where a face naturally lands in a selfie framing.
        """
        return cls(
            cx=width / 2,
            cy=height / 2.5,
            rx=width * 0.3 * margin,
            ry=height * 0.31 * margin,
        )

    def contains(self, x: float, y: float) -> bool:
        """Ellipse containment test (boundary counts as inside)."""
        return (x - self.cx) ** 2 / self.rx ** 2 + (y - self.cy) ** 2 / self.ry ** 2 <= 1

    def contains_many(self, points: np.ndarray) -> np.ndarray:
        """Vectorised containment for an (N, 2) array; returns a bool mask."""
        dx = points[:, 0] - self.cx
        dy = points[:, 1] - self.cy
        return dx ** 2 / self.rx ** 2 + dy ** 2 / self.ry ** 2 <= 1

    @property
    def center(self) -> Tuple[int, int]:
        return int(round(self.cx)), int(round(self.cy))

    @property
    def axes(self) -> Tuple[int, int]:
        return int(round(self.rx)), int(round(self.ry))


@dataclass
class Frame:
    """A video frame handed from the host loop to the guide session.

    Duck-type compatible with the frames produced by capture sources:
    ``data``, ``frame_id`` and ``t_src_ns`` plus image dimensions.
    """

    data: np.ndarray
    frame_id: int = 0
    t_src_ns: int = 0

    @property
    def height(self) -> int:
        return int(self.data.shape[0]) if self.data is not None and self.data.ndim >= 2 else 0

    @property
    def width(self) -> int:
        return int(self.data.shape[1]) if self.data is not None and self.data.ndim >= 2 else 0


__all__ = ["Keypoint", "DistanceStatus", "FaceObservation", "TargetRegion", "Frame"]

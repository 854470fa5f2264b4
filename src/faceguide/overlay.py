"""Guide overlays: dimmed mask with elliptical cutout, and landmark points."""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import cv2
import numpy as np

from faceguide.types import Keypoint, TargetRegion

COLOR_GOOD = (0, 255, 0)     # BGR green
COLOR_BAD = (0, 0, 255)      # BGR red
MASK_ALPHA = 0.7
STROKE_ALPHA = 0.8
STROKE_THICKNESS = 4


@runtime_checkable
class Overlay(Protocol):
    """Protocol for drawing overlays on frames."""

    def draw(self, frame: np.ndarray, obs: Any) -> np.ndarray:
        """Draw overlay onto frame and return the result.

        Args:
            frame: BGR image array (H, W, 3).
            obs: Observation from a guide session.
        """
        ...


def draw_guide(
    frame: np.ndarray,
    region: TargetRegion,
    face_good: bool,
    mask_alpha: float = MASK_ALPHA,
    stroke_alpha: float = STROKE_ALPHA,
    thickness: int = STROKE_THICKNESS,
) -> np.ndarray:
    """Dim everything outside the guide ellipse and stroke its outline.

    Returns a new array; ``frame`` is left untouched.
    """
    hole = np.zeros(frame.shape[:2], dtype=np.uint8)
    cv2.ellipse(hole, region.center, region.axes, 0, 0, 360, 255, -1)

    dimmed = (frame.astype(np.float32) * (1.0 - mask_alpha)).astype(np.uint8)
    output = np.where(hole[..., None] > 0, frame, dimmed)

    color = COLOR_GOOD if face_good else COLOR_BAD
    stroked = output.copy()
    cv2.ellipse(stroked, region.center, region.axes, 0, 0, 360, color, thickness, cv2.LINE_AA)
    return cv2.addWeighted(stroked, stroke_alpha, output, 1.0 - stroke_alpha, 0)


def draw_keypoints(
    frame: np.ndarray,
    keypoints: Optional[Sequence[Keypoint]],
    color: tuple = (255, 255, 255),
    radius: int = 1,
) -> np.ndarray:
    """Draw landmark dots. ``None`` keypoints leave the frame as is."""
    if not keypoints:
        return frame
    output = frame.copy()
    h, w = output.shape[:2]
    for x, y in keypoints:
        px, py = int(round(x)), int(round(y))
        if 0 <= px < w and 0 <= py < h:
            cv2.circle(output, (px, py), radius, color, -1)
    return output


class GuideOverlay:
    """Renders the guide mask from a guide Observation.

    Reads ``metadata["region"]`` and ``signals["face_good"]``.
    """

    def __init__(self, mask_alpha: float = MASK_ALPHA, thickness: int = STROKE_THICKNESS):
        self._mask_alpha = mask_alpha
        self._thickness = thickness

    def draw(self, frame: np.ndarray, obs: Any) -> np.ndarray:
        metadata = getattr(obs, "metadata", {}) or {}
        region = metadata.get("region")
        if region is None:
            h, w = frame.shape[:2]
            region = TargetRegion.from_frame_size(w, h)
        face_good = bool(getattr(obs, "signals", {}).get("face_good", False))
        return draw_guide(
            frame, region, face_good,
            mask_alpha=self._mask_alpha, thickness=self._thickness,
        )


class KeypointsOverlay:
    """Renders the raw landmark points carried in ``metadata["face"]``."""

    def __init__(self, color: tuple = (255, 255, 255), radius: int = 1):
        self._color = color
        self._radius = radius

    def draw(self, frame: np.ndarray, obs: Any) -> np.ndarray:
        face = (getattr(obs, "metadata", {}) or {}).get("face")
        keypoints = face.keypoints if face is not None else None
        return draw_keypoints(frame, keypoints, self._color, self._radius)


__all__ = [
    "Overlay",
    "GuideOverlay",
    "KeypointsOverlay",
    "draw_guide",
    "draw_keypoints",
    "COLOR_GOOD",
    "COLOR_BAD",
]

"""Configuration for a face guide session.

Example:
    >>> from faceguide.config import GuideConfig
    >>> config = GuideConfig(min_frames_in=10, ellipse_margin=1.1)
    >>> config = GuideConfig.from_dict({"minFramesIn": 10, "boxInsideRequired": False})
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

# Internal constants (not part of the session configuration)
CALIBRATE_MIN_STREAK = 8      # geometry-ok frames before the eye baseline is captured
FAR_FACTOR = 0.85             # eye distance below baseline * FAR_FACTOR -> tooFar
CLOSE_FACTOR = 1.2            # eye distance above baseline * CLOSE_FACTOR -> tooClose
LOST_RESET_STREAK = 12        # no-face frames before calibration is dropped
CONFIDENCE_MIN = 0.95         # face-in-view confidence must be strictly above this

# MediaPipe FaceMesh outer eye corners
DEFAULT_LEFT_EYE_INDEX = 33
DEFAULT_RIGHT_EYE_INDEX = 263

# camelCase keys accepted by from_dict() for drop-in use of existing settings
_CAMEL_KEYS = {
    "minFramesIn": "min_frames_in",
    "minFramesOut": "min_frames_out",
    "boxInsideRequired": "box_inside_required",
    "percentInsideRequired": "percent_inside_required",
    "ellipseMargin": "ellipse_margin",
    "minEyeRatio": "min_eye_ratio",
    "maxEyeRatio": "max_eye_ratio",
    "previewFlip": "preview_flip",
    "leftEyeIndex": "left_eye_index",
    "rightEyeIndex": "right_eye_index",
}


@dataclass(frozen=True)
class GuideConfig:
    """Session configuration, fixed for the lifetime of a guide session.

    Attributes:
        min_frames_in: Consecutive good frames before capture is allowed.
        min_frames_out: Consecutive bad frames before capture is revoked.
        box_inside_required: Require the keypoint bounding box to fit in the ellipse.
        percent_inside_required: Minimum fraction of keypoints inside the ellipse.
        ellipse_margin: Scale applied to the guide ellipse radii.
        min_eye_ratio: Uncalibrated eye-distance ratio below which the face is too far.
        max_eye_ratio: Uncalibrated eye-distance ratio above which the face is too close.
        preview_flip: Mirror the displayed preview (analysis is never flipped).
        left_eye_index: Landmark index of the left eye reference point.
        right_eye_index: Landmark index of the right eye reference point.
    """

    min_frames_in: int = 6
    min_frames_out: int = 3
    box_inside_required: bool = True
    percent_inside_required: float = 0.95
    ellipse_margin: float = 1.0
    min_eye_ratio: float = 0.08
    max_eye_ratio: float = 0.18
    preview_flip: bool = True
    left_eye_index: int = DEFAULT_LEFT_EYE_INDEX
    right_eye_index: int = DEFAULT_RIGHT_EYE_INDEX

    def __post_init__(self) -> None:
        if self.min_frames_in < 1:
            raise ValueError(f"min_frames_in must be >= 1, got {self.min_frames_in}")
        if self.min_frames_out < 1:
            raise ValueError(f"min_frames_out must be >= 1, got {self.min_frames_out}")
        if not 0.0 <= self.percent_inside_required <= 1.0:
            raise ValueError(
                f"percent_inside_required must be in [0, 1], got {self.percent_inside_required}"
            )
        if self.ellipse_margin <= 0:
            raise ValueError(f"ellipse_margin must be > 0, got {self.ellipse_margin}")
        if self.min_eye_ratio < 0 or self.max_eye_ratio < 0:
            raise ValueError("eye ratios must be non-negative")
        if self.min_eye_ratio > self.max_eye_ratio:
            raise ValueError(
                f"min_eye_ratio ({self.min_eye_ratio}) exceeds max_eye_ratio ({self.max_eye_ratio})"
            )
        if self.left_eye_index < 0 or self.right_eye_index < 0:
            raise ValueError("eye landmark indices must be non-negative")
        if self.left_eye_index == self.right_eye_index:
            raise ValueError("left and right eye landmark indices must differ")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuideConfig":
        """Create a GuideConfig from a dictionary (e.g. loaded from JSON/YAML).

        Both snake_case field names and the camelCase property names
        (``minFramesIn``, ``percentInsideRequired``, ...) are accepted.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown guide config key: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def eye_indices(self) -> tuple:
        return (self.left_eye_index, self.right_eye_index)


__all__ = [
    "GuideConfig",
    "CALIBRATE_MIN_STREAK",
    "FAR_FACTOR",
    "CLOSE_FACTOR",
    "LOST_RESET_STREAK",
    "CONFIDENCE_MIN",
]

"""Backend protocol for face landmark detection."""

from typing import List, Protocol

import numpy as np

from faceguide.types import FaceObservation


class LandmarkBackend(Protocol):
    """Protocol for face landmark detectors feeding the guide.

    Implementations return zero or more faces per image; the guide only
    ever considers the first one. Keypoints are in pixel coordinates of
    the input image, in the detector's fixed landmark order.
    """

    def initialize(self) -> None:
        """Load models. Called once before the first detect()."""
        ...

    def detect(self, image: np.ndarray) -> List[FaceObservation]:
        """Detect faces in a BGR image (H, W, 3)."""
        ...

    def cleanup(self) -> None:
        """Release resources and unload models."""
        ...


__all__ = ["LandmarkBackend"]

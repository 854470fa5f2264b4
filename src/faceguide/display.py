"""Live preview window and annotated video writer."""

from typing import Any, List, Optional

import cv2
import numpy as np

from faceguide.overlay import GuideOverlay, KeypointsOverlay, Overlay


def _default_overlays(show_keypoints: bool) -> List[Overlay]:
    overlays: List[Overlay] = [GuideOverlay()]
    if show_keypoints:
        overlays.append(KeypointsOverlay())
    return overlays


def compose(
    frame: Any,
    obs: Any,
    overlays: List[Overlay],
    flip: bool = False,
) -> np.ndarray:
    """Apply overlays to a copy of the frame, then mirror it if requested.

    Mirroring happens after drawing so overlays stay in analysis coordinates.
    """
    img = frame if isinstance(frame, np.ndarray) else frame.data
    output = img.copy()
    if obs is not None:
        for overlay in overlays:
            output = overlay.draw(output, obs)
    if flip:
        output = cv2.flip(output, 1)
    return output


class GuideDisplay:
    """Live display window using cv2.imshow. ESC to quit.

    Args:
        title: Window title.
        flip: Mirror the preview horizontally (selfie view).
        overlays: Overlays to apply; defaults to the guide mask (+ keypoints).
        show_keypoints: Draw landmark points with the default overlays.
        wait_ms: cv2.waitKey delay in milliseconds.
    """

    def __init__(
        self,
        title: str = "faceguide",
        flip: bool = True,
        overlays: Optional[List[Overlay]] = None,
        show_keypoints: bool = False,
        wait_ms: int = 1,
    ):
        self._title = title
        self._flip = flip
        self._overlays = overlays if overlays is not None else _default_overlays(show_keypoints)
        self._wait_ms = wait_ms

    def update(self, frame: Any, obs: Any) -> bool:
        """Draw overlays and display the frame.

        Returns:
            True to continue, False if user pressed ESC.
        """
        cv2.imshow(self._title, compose(frame, obs, self._overlays, self._flip))
        key = cv2.waitKey(self._wait_ms) & 0xFF
        return key != 27  # ESC

    def close(self) -> None:
        cv2.destroyAllWindows()


class VideoSaver:
    """Save annotated guide frames to a video file.

    Args:
        path: Output file path (e.g., "guide.mp4").
        fps: Output video FPS.
        width: Frame width.
        height: Frame height.
        flip: Mirror frames like the live preview.
        overlays: Overlays to apply; defaults to the guide mask.
        codec: FourCC codec string (default "mp4v").
    """

    def __init__(
        self,
        path: str,
        fps: float,
        width: int,
        height: int,
        flip: bool = False,
        overlays: Optional[List[Overlay]] = None,
        codec: str = "mp4v",
    ):
        self._path = path
        self._flip = flip
        self._overlays = overlays if overlays is not None else _default_overlays(False)
        fourcc = cv2.VideoWriter_fourcc(*codec)
        self._writer = cv2.VideoWriter(path, fourcc, fps, (width, height))
        if not self._writer.isOpened():
            raise IOError(f"Failed to open video writer: {path}")

    def update(self, frame: Any, obs: Any) -> None:
        self._writer.write(compose(frame, obs, self._overlays, self._flip))

    def close(self) -> None:
        """Release the video writer."""
        self._writer.release()


__all__ = ["GuideDisplay", "VideoSaver", "compose"]

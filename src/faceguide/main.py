"""High-level API for faceguide.

    >>> import faceguide as fg
    >>> result = fg.run(0, window=True)
    >>> print(f"Capture allowed on {result.capture_allowed_frames} frames")

All execution goes through a single path:
    fg.run() → GuideSession + GuideRunner
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from faceguide.backends import LandmarkBackend, create_backend
from faceguide.config import GuideConfig
from faceguide.runner import GuideRunner, StopRun, source_fps
from faceguide.session import GuideSession

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "mediapipe"


@dataclass
class Result:
    """Result from fg.run().

    Attributes:
        frame_count: Frames decided.
        capture_allowed_frames: Frames on which capture was allowed.
        transitions: ``(frame_id, signal_name, value)`` per emitted change.
        config: Effective session configuration.
    """

    frame_count: int = 0
    capture_allowed_frames: int = 0
    transitions: List[Tuple[int, str, Any]] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)


def run(
    source: Union[int, str, Any],
    *,
    config: Optional[GuideConfig] = None,
    backend: Union[str, LandmarkBackend] = DEFAULT_BACKEND,
    window: bool = False,
    output: Optional[str] = None,
    max_frames: Optional[int] = None,
    show_keypoints: bool = False,
) -> Result:
    """Run the capture guide on a camera, video file or frame iterable.

    Args:
        source: Camera index, video path, or iterable of frames.
        config: Session configuration (defaults to GuideConfig()).
        backend: Backend name or a LandmarkBackend instance.
        window: Show a live preview window (ESC to stop).
        output: Write the annotated preview to this video path.
        max_frames: Stop after this many frames.
        show_keypoints: Draw landmark points in the preview.

    Returns:
        Result with frame counts and signal transitions.
    """
    config = config or GuideConfig()
    landmark_backend = create_backend(backend) if isinstance(backend, str) else backend

    display = None
    saver = None
    if window:
        from faceguide.display import GuideDisplay

        display = GuideDisplay(flip=config.preview_flip, show_keypoints=show_keypoints)

    def on_frame(frame, obs):
        nonlocal saver
        if output and saver is None:
            from faceguide.display import VideoSaver

            saver = VideoSaver(
                output,
                fps=source_fps(source),
                width=frame.width,
                height=frame.height,
                flip=config.preview_flip,
            )
        if saver is not None:
            saver.update(frame, obs)
        if display is not None and not display.update(frame, obs):
            raise StopRun()

    session = GuideSession(config, backend=landmark_backend)
    runner = GuideRunner(session)
    try:
        run_result = runner.run(
            source,
            max_frames=max_frames,
            on_frame=on_frame if (display or output) else None,
        )
    finally:
        try:
            session.close()
        finally:
            try:
                if saver is not None:
                    saver.close()
            finally:
                if display is not None:
                    display.close()

    return Result(
        frame_count=run_result.frame_count,
        capture_allowed_frames=run_result.capture_allowed_frames,
        transitions=run_result.transitions,
        config=config.to_dict(),
    )


__all__ = ["Result", "run", "DEFAULT_BACKEND"]

"""GuideRunner - frame-synchronous loop driving a GuideSession.

Exactly one frame is in flight at a time: the next frame is read only
after the current one has been detected, decided and handed to
``on_frame``.

Example:
    >>> from faceguide.runner import GuideRunner
    >>> runner = GuideRunner(session)
    >>> result = runner.run(0, max_frames=300)       # camera 0
    >>> result = runner.run("selfie.mp4")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, Union

import cv2
import numpy as np

from faceguide.observation import Observation
from faceguide.session import GuideSession
from faceguide.types import Frame

logger = logging.getLogger(__name__)

FrameCallback = Callable[[Frame, Observation], None]


class StopRun(Exception):
    """Raise from ``on_frame`` to end the loop early (e.g. ESC pressed)."""


@dataclass
class RunResult:
    """Result of a GuideRunner.run() invocation.

    Attributes:
        frame_count: Frames decided (unsized frames are not counted).
        capture_allowed_frames: Frames on which capture was allowed.
        transitions: ``(frame_id, signal_name, value)`` per emitted change.
        stopped: True if ``on_frame`` ended the loop early.
    """

    frame_count: int = 0
    capture_allowed_frames: int = 0
    transitions: List[Tuple[int, str, Any]] = field(default_factory=list)
    stopped: bool = False


class GuideRunner:
    """Feeds frames from a source into a GuideSession, one at a time.

    Args:
        session: Open guide session with a landmark backend.
        on_frame: Callback ``(frame, obs)`` fired after each decided frame.
    """

    def __init__(self, session: GuideSession, *, on_frame: Optional[FrameCallback] = None):
        self._session = session
        self._on_frame = on_frame

    def run(
        self,
        source: Union[int, str, Iterable[Any]],
        *,
        max_frames: Optional[int] = None,
        on_frame: Optional[FrameCallback] = None,
    ) -> RunResult:
        """Run the guide over a source.

        Args:
            source: Camera index (int), video path (str), or iterable of
                Frame objects / BGR arrays.
            max_frames: Stop after this many decided frames.
            on_frame: Per-run callback override.

        Raises:
            IOError: If a camera or video source cannot be opened.
        """
        frame_cb = on_frame or self._on_frame
        result = RunResult()

        for frame in _iter_frames(source):
            if max_frames is not None and result.frame_count >= max_frames:
                break
            obs = self._session.process_frame(frame)
            if obs is None:
                continue

            result.frame_count += 1
            if obs.capture_allowed:
                result.capture_allowed_frames += 1
            for name, value in obs.data.events.items():
                result.transitions.append((obs.frame_id, name, value))

            if frame_cb:
                try:
                    frame_cb(frame, obs)
                except StopRun:
                    result.stopped = True
                    break

        logger.debug(
            "GuideRunner finished: %d frames, %d transitions",
            result.frame_count, len(result.transitions),
        )
        return result


def _iter_frames(source: Union[int, str, Iterable[Any]]) -> Iterator[Frame]:
    if isinstance(source, (int, str)):
        return iter(_CaptureIterable(source))
    return _wrap_frames(source)


def _wrap_frames(frames: Iterable[Any]) -> Iterator[Frame]:
    for index, item in enumerate(frames):
        if isinstance(item, np.ndarray):
            yield Frame(data=item, frame_id=index)
        else:
            yield item


class _CaptureIterable:
    """Wraps cv2.VideoCapture in an iterable with open/release management."""

    def __init__(self, source: Union[int, str]):
        self._source = source

    def __iter__(self) -> Iterator[Frame]:
        cap = cv2.VideoCapture(self._source)
        if not cap.isOpened():
            cap.release()
            raise IOError(f"Failed to open capture source: {self._source!r}")
        logger.info("Capture opened: %r", self._source)
        try:
            frame_id = 0
            while True:
                ok, image = cap.read()
                if not ok or image is None:
                    break
                t_ns = int(cap.get(cv2.CAP_PROP_POS_MSEC) * 1_000_000)
                yield Frame(data=image, frame_id=frame_id, t_src_ns=t_ns)
                frame_id += 1
        finally:
            cap.release()


def source_fps(source: Any, default: float = 30.0) -> float:
    """Best-effort FPS of a video file, for the video writer.

    Cameras and in-memory sources report ``default``.
    """
    if not isinstance(source, str):
        return default
    cap = cv2.VideoCapture(source)
    try:
        fps = cap.get(cv2.CAP_PROP_FPS) if cap.isOpened() else 0.0
    finally:
        cap.release()
    return float(fps) if fps and fps > 0 else default


__all__ = ["GuideRunner", "RunResult", "StopRun", "source_fps"]

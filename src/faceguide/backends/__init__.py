"""Landmark detector backends.

    from faceguide.backends.mediapipe import MediaPipeFaceMesh
"""

from faceguide.backends.base import LandmarkBackend

__all__ = ["LandmarkBackend", "create_backend"]


def create_backend(name: str) -> LandmarkBackend:
    """Instantiate a backend by name (currently ``"mediapipe"``)."""
    if name == "mediapipe":
        from faceguide.backends.mediapipe import MediaPipeFaceMesh

        return MediaPipeFaceMesh()
    raise ValueError(f"Unknown landmark backend: {name!r}")

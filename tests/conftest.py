"""Shared test fixtures and helpers for faceguide tests."""

import importlib.util
import sys
from pathlib import Path

import pytest

# Load helpers module from the tests directory using importlib to avoid
# polluting sys.path.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from helpers import FakeBackend, make_face  # noqa: E402


@pytest.fixture
def good_face():
    """Well-placed face at a comfortable distance for a 640x480 frame."""
    return make_face()


@pytest.fixture
def fake_backend():
    return FakeBackend()

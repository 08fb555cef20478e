import os
from pathlib import Path

import pytest

# Qt must not try to open a display while testing.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QSettings

from ntg.core.geometry_utils import Point
from ntg.core.touch_sample import RawTouch, TouchPhase, TouchSample


@pytest.fixture
def tmp_settings(tmp_path: Path):
    """Redirect QSettings into a temporary folder to keep tests isolated."""
    for fmt in (QSettings.NativeFormat, QSettings.IniFormat):
        QSettings.setPath(fmt, QSettings.UserScope, str(tmp_path))
    s = QSettings("ntg.org", "NTG")
    s.clear()
    yield s
    s.clear()


def sample_set(*entries):
    """sample_set((1, (0, 0)), (2, (10, 0))) -> frozenset of TouchSample"""
    return frozenset(TouchSample(cid, Point(*xy)) for cid, xy in entries)


def touches(phase, *entries):
    """touches(TouchPhase.BEGAN, (1, (0, 0))) -> list of RawTouch"""
    return [RawTouch(cid, Point(*xy), phase) for cid, xy in entries]


@pytest.fixture
def began():
    return lambda *entries: touches(TouchPhase.BEGAN, *entries)


@pytest.fixture
def moved():
    return lambda *entries: touches(TouchPhase.MOVED, *entries)


@pytest.fixture
def ended():
    return lambda *entries: touches(TouchPhase.ENDED, *entries)


@pytest.fixture
def cancelled():
    return lambda *entries: touches(TouchPhase.CANCELLED, *entries)

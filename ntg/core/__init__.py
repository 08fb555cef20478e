"""Core components layer - geometry and the touch sample data model."""

from ntg.core.affine import AffineTransform
from ntg.core.geometry_utils import (
    Point,
    direction,
    distance,
    joined,
    magnitude,
    negated,
)
from ntg.core.touch_sample import (
    GesturePhase,
    RawTouch,
    SampleSet,
    SampleUpdate,
    TouchPhase,
    TouchSample,
)

__all__ = [
    "AffineTransform",
    "Point",
    "direction",
    "distance",
    "joined",
    "magnitude",
    "negated",
    "GesturePhase",
    "RawTouch",
    "SampleSet",
    "SampleUpdate",
    "TouchPhase",
    "TouchSample",
]

from ntg.gestures.natural_transform import NaturalTransformRecognizer
from ntg.gestures.sample_tracker import TouchSampleTracker
from ntg.gestures.transform_recovery import (
    match_samples,
    transform_from_pinch,
    transform_from_samples,
)
__all__ = [
    "NaturalTransformRecognizer",
    "TouchSampleTracker",
    "match_samples",
    "transform_from_pinch",
    "transform_from_samples",
]

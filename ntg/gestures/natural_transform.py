"""Natural (map-style) transform recognizer for 1-2 finger gestures."""
from __future__ import annotations

import logging

from ntg.core.affine import AffineTransform
from ntg.core.touch_sample import SampleSet, SampleUpdate
from ntg.gestures.sample_tracker import TouchSampleTracker
from ntg.gestures.transform_recovery import transform_from_samples

logger = logging.getLogger(__name__)


class NaturalTransformRecognizer(TouchSampleTracker):
    """
    Tracker exposing the incremental transform of the last update.

    ``transform_from_last_change`` is the change between the samples before
    and after the most recent update. Observers registered after
    construction can read it from inside their callback.
    """

    def __init__(self,
                 transform: AffineTransform | None = None,
                 pre_transform: AffineTransform | None = None,
                 raise_callback_errors: bool = False):
        super().__init__(transform, raise_callback_errors=raise_callback_errors)
        # Usually the current effective transform of the manipulated object
        self.pre_transform: AffineTransform = pre_transform or AffineTransform.identity()
        self._previous_samples: SampleSet = frozenset()
        self.add_samples_updated_callback(self._record_previous_samples)

    @property
    def previous_samples(self) -> SampleSet:
        return self._previous_samples

    @property
    def transform_from_last_change(self) -> AffineTransform:
        return transform_from_samples(self._previous_samples, self.samples, self.pre_transform)

    def reset(self) -> None:
        super().reset()
        self._previous_samples = frozenset()

    def _record_previous_samples(self, update: SampleUpdate) -> None:
        self._previous_samples = update.previous_samples

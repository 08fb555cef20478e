"""Touch sample tracker - keeps the latest sample of every active contact."""
from __future__ import annotations

import logging
from typing import Callable, Iterable

from ntg.core.affine import AffineTransform
from ntg.core.touch_sample import (
    GesturePhase,
    RawTouch,
    SampleSet,
    SampleUpdate,
    TouchPhase,
    TouchSample,
)

logger = logging.getLogger(__name__)

SamplesUpdatedCallback = Callable[[SampleUpdate], None]


class TouchSampleTracker:
    """
    Tracks all active touch contacts and their most recent locations.

    Every lifecycle event (began / moved / cancelled / ended) captures the
    current sample set, computes the new one, updates the gesture phase
    and notifies observers with both sets.

    Locations are mapped through ``transform`` when sampled, so the
    tracker doesn't depend on any view hierarchy.

    Usage:
        tracker = TouchSampleTracker()
        tracker.add_samples_updated_callback(on_update)
        tracker.touches_began([RawTouch(1, Point(0, 0), TouchPhase.BEGAN)])
    """

    def __init__(self,
                 transform: AffineTransform | None = None,
                 raise_callback_errors: bool = False):
        self.transform: AffineTransform = transform or AffineTransform.identity()
        # Development runs re-raise observer errors after logging them
        self.raise_callback_errors = raise_callback_errors
        self._samples: SampleSet = frozenset()
        self._phase: GesturePhase = GesturePhase.POSSIBLE
        self._on_samples_updated_callbacks: list[SamplesUpdatedCallback] = []

    @property
    def samples(self) -> SampleSet:
        """Current sample set (read-only snapshot)."""
        return self._samples

    @property
    def phase(self) -> GesturePhase:
        return self._phase

    @property
    def contact_ids(self) -> frozenset:
        return frozenset(s.contact_id for s in self._samples)

    def add_samples_updated_callback(self, callback: SamplesUpdatedCallback) -> None:
        """
        Add a callback for sample updates.

        Callback signature: callback(update: SampleUpdate) -> None
        """
        self._on_samples_updated_callbacks.append(callback)

    def remove_samples_updated_callback(self, callback: SamplesUpdatedCallback) -> None:
        self._on_samples_updated_callbacks.remove(callback)

    # =====================================================
    # Lifecycle events
    # =====================================================

    def touches_began(self, touches: Iterable[RawTouch]) -> None:
        touches = tuple(touches)
        new_samples = self._samples | {self._sample(t) for t in touches}
        phase = GesturePhase.BEGAN if len(new_samples) == 1 else GesturePhase.CHANGED
        self._update(new_samples, phase, touches)

    def touches_moved(self, touches: Iterable[RawTouch]) -> None:
        touches = tuple(touches)
        moved = {t.contact_id: t for t in touches}
        new_samples = frozenset(
            self._sample(moved[s.contact_id]) if s.contact_id in moved else s
            for s in self._samples
        )
        self._update(new_samples, GesturePhase.CHANGED, touches)

    def touches_cancelled(self, touches: Iterable[RawTouch]) -> None:
        touches = tuple(touches)
        self._remove(touches, TouchPhase.CANCELLED)

    def touches_ended(self, touches: Iterable[RawTouch]) -> None:
        touches = tuple(touches)
        self._remove(touches, TouchPhase.ENDED)

    def reset(self) -> None:
        """Forget every contact. Observers are not notified."""
        self._samples = frozenset()
        self._phase = GesturePhase.POSSIBLE
        logger.debug("Touch sample tracker reset")

    # =====================================================
    # Internals
    # =====================================================

    def _sample(self, touch: RawTouch) -> TouchSample:
        return TouchSample.from_touch(touch, self.transform)

    def _remove(self, touches: tuple[RawTouch, ...], phase: TouchPhase) -> None:
        finished = {t.contact_id for t in touches if t.phase is phase}
        new_samples = frozenset(s for s in self._samples if s.contact_id not in finished)
        next_phase = GesturePhase.ENDED if not new_samples else GesturePhase.CHANGED
        self._update(new_samples, next_phase, touches)

    def _update(self,
                new_samples: Iterable[TouchSample],
                phase: GesturePhase,
                touches: tuple[RawTouch, ...]) -> None:
        previous_samples = self._samples
        self._samples = frozenset(new_samples)
        self._phase = phase
        logger.debug("Samples updated: %d -> %d (%s)",
                     len(previous_samples), len(self._samples), phase.name)
        self._notify_samples_updated(
            SampleUpdate(previous_samples, self._samples, phase, touches)
        )

    def _notify_samples_updated(self, update: SampleUpdate) -> None:
        """Notify callbacks of sample updates."""
        for callback in self._on_samples_updated_callbacks:
            try:
                callback(update)
            except Exception as e:
                logger.exception(f"Error in samples updated callback: {e}")
                if self.raise_callback_errors:
                    raise

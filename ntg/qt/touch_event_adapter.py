"""Qt adapter - feeds QTouchEvents into a touch sample tracker."""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QEventPoint
from PySide6.QtWidgets import QWidget

from ntg.core.geometry_utils import Point
from ntg.core.touch_sample import RawTouch, TouchPhase
from ntg.gestures.sample_tracker import TouchSampleTracker

logger = logging.getLogger(__name__)


class EventPointLike(Protocol):
    def id(self) -> int: ...
    def position(self): ...
    def state(self) -> QEventPoint.State: ...


# Qt point state -> contact phase
POINT_STATE_PHASES: dict[QEventPoint.State, TouchPhase] = {
    QEventPoint.State.Pressed: TouchPhase.BEGAN,
    QEventPoint.State.Updated: TouchPhase.MOVED,
    QEventPoint.State.Stationary: TouchPhase.STATIONARY,
    QEventPoint.State.Released: TouchPhase.ENDED,
}

TOUCH_EVENT_TYPES = (
    QEvent.Type.TouchBegin,
    QEvent.Type.TouchUpdate,
    QEvent.Type.TouchEnd,
    QEvent.Type.TouchCancel,
)


def raw_touch_from_point(point: EventPointLike) -> RawTouch:
    """Convert a QEventPoint into a RawTouch in widget coordinates."""
    pos = point.position()
    phase = POINT_STATE_PHASES.get(point.state(), TouchPhase.STATIONARY)
    return RawTouch(contact_id=point.id(), location=Point(pos.x(), pos.y()), phase=phase)


class TouchEventAdapter(QObject):
    """
    Event filter translating Qt touch events into tracker lifecycle calls.

    A single Qt event can carry pressed, moved and released points at
    once; they are dispatched as separate began / moved / ended calls in
    that order. Stationary points are not reported as moves.
    """

    def __init__(self, tracker: TouchSampleTracker, widget: Optional[QWidget] = None):
        super().__init__(widget)
        self.tracker = tracker
        if widget is not None:
            widget.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
            widget.installEventFilter(self)

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if event.type() in TOUCH_EVENT_TYPES:
            self.dispatch_points(event.type(), event.points())
            return True
        return super().eventFilter(obj, event)

    def dispatch_points(self, event_type: QEvent.Type, points: Iterable[EventPointLike]) -> None:
        if event_type == QEvent.Type.TouchCancel:
            self.cancel_all()
            return

        touches = [raw_touch_from_point(p) for p in points]
        began = [t for t in touches if t.phase is TouchPhase.BEGAN]
        moved = [t for t in touches if t.phase is TouchPhase.MOVED]
        ended = [t for t in touches if t.phase is TouchPhase.ENDED]

        if began:
            self.tracker.touches_began(began)
        if moved:
            self.tracker.touches_moved(moved)
        if ended:
            self.tracker.touches_ended(ended)

    def cancel_all(self) -> None:
        """Cancel every contact the tracker currently knows about."""
        samples = self.tracker.samples
        if not samples:
            return
        logger.info("Touch sequence cancelled with %d active contacts", len(samples))
        self.tracker.touches_cancelled(
            RawTouch(s.contact_id, s.location, TouchPhase.CANCELLED) for s in samples
        )

"""Touch sample data model shared by the tracker and transform recovery."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import FrozenSet, Hashable

from ntg.core.affine import AffineTransform
from ntg.core.geometry_utils import Point

ContactId = Hashable


class TouchPhase(Enum):
    """Phase of a single contact as reported by the host input system."""
    BEGAN = auto()
    MOVED = auto()
    STATIONARY = auto()
    ENDED = auto()
    CANCELLED = auto()


class GesturePhase(Enum):
    """Recognizer-level phase emitted per update."""
    POSSIBLE = auto()
    BEGAN = auto()
    CHANGED = auto()
    ENDED = auto()


@dataclass(frozen=True)
class RawTouch:
    """One contact inside a host touch event, location in host coordinates."""
    contact_id: ContactId
    location: Point
    phase: TouchPhase = TouchPhase.MOVED


@dataclass(frozen=True)
class TouchSample:
    """
    Location of one contact at one point in time.

    Equality and hashing include the location, so a moved contact is a
    new value rather than an updated one.
    """
    contact_id: ContactId
    location: Point

    @classmethod
    def from_touch(cls, touch: RawTouch, transform: AffineTransform) -> TouchSample:
        """Sample a touch, mapping its location into the reference space."""
        return cls(contact_id=touch.contact_id, location=transform.apply(touch.location))

    def __str__(self) -> str:
        return f"#{self.contact_id}@{self.location}"


SampleSet = FrozenSet[TouchSample]


@dataclass(frozen=True)
class SampleUpdate:
    """Observation delivered to observers after every tracker transition."""
    previous_samples: SampleSet
    samples: SampleSet
    phase: GesturePhase
    touches: tuple[RawTouch, ...] = ()

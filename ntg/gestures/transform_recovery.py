"""
Recover the incremental affine transform implied by two consecutive
touch sample sets.

One matched contact gives a pure translation. Two matched contacts give
rotation + uniform scale + translation, fitted so that the segment
between the previous locations lands on the segment between the current
ones. Anything else is left alone (identity).
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from ntg.core.affine import AffineTransform
from ntg.core.geometry_utils import Point, joined, magnitude, midpoint
from ntg.core.touch_sample import ContactId, SampleSet, TouchSample

logger = logging.getLogger(__name__)

LineSegment = Tuple[Point, Point]
MatchedPairs = dict[ContactId, Tuple[TouchSample, TouchSample]]


def match_samples(previous_samples: SampleSet, samples: SampleSet) -> MatchedPairs:
    """
    Join two sample sets by contact id.

    Contacts that appeared or disappeared between the two sets are dropped.
    """
    return joined(previous_samples, samples, key=lambda s: s.contact_id)


def transform_from_samples(
        previous_samples: SampleSet,
        samples: SampleSet,
        pre_transform: AffineTransform | None = None,
) -> AffineTransform:
    """
    Incremental transform explaining the motion from previous_samples to samples.

    :param previous_samples: Sample set before the update
    :param samples: Sample set after the update
    :param pre_transform: Applied to every location first, usually the current
        transform of the manipulated object
    :return: Transform to apply on top of the current object state
    """
    if not previous_samples or not samples:
        return AffineTransform.identity()

    pre = pre_transform or AffineTransform.identity()
    pairs = list(match_samples(previous_samples, samples).values())

    if len(pairs) == 1:
        previous_sample, sample = pairs[0]
        translation = pre.apply(sample.location) - pre.apply(previous_sample.location)
        return AffineTransform.translation(translation.x, translation.y)

    if len(pairs) == 2:
        (previous_a, sample_a), (previous_b, sample_b) = pairs
        return transform_from_pinch(
            (pre.apply(previous_a.location), pre.apply(previous_b.location)),
            (pre.apply(sample_a.location), pre.apply(sample_b.location)),
        )

    # no matched contact, or more than two fingers
    logger.debug("No transform for %d matched contacts", len(pairs))
    return AffineTransform.identity()


def pivot_point(start_segment: LineSegment, end_segment: LineSegment) -> Optional[Point]:
    """
    Intersection of the lines through both segments.

    :return: Intersection point, or None when the lines are parallel
    """
    a, b = start_segment
    a2, b2 = end_segment

    u_ad = (b2.y - a2.y) * (b.x - a.x) - (b2.x - a2.x) * (b.y - a.y)
    if u_ad == 0:
        return None

    u_an = (b2.x - a2.x) * (a.y - a2.y) - (b2.y - a2.y) * (a.x - a2.x)
    u_a = u_an / u_ad
    return Point(a.x + u_a * (b.x - a.x), a.y + u_a * (b.y - a.y))


def transform_from_pinch(start_segment: LineSegment, end_segment: LineSegment) -> AffineTransform:
    """
    Calculate the transform that maps start_segment onto end_segment.

    Rotation happens about the intersection of the two segment lines (about
    the origin when they are parallel), then a uniform scale about the
    midpoint brings the rotated midpoint onto the final one. A zero-length
    start segment has no defined scale and yields identity.
    """
    a, b = start_segment
    a2, b2 = end_segment

    displacement = b - a
    displacement2 = b2 - a2

    start_length = magnitude(displacement)
    if start_length == 0:
        logger.debug("Degenerate pinch: coincident start points %s", a)
        return AffineTransform.identity()

    rotation_angle = (math.atan2(displacement2.y, displacement2.x)
                      - math.atan2(displacement.y, displacement.x))
    scale_factor = magnitude(displacement2) / start_length
    initial_midpoint = midpoint(a, b)
    final_midpoint = midpoint(a2, b2)

    pivot = pivot_point(start_segment, end_segment)
    if pivot is None:
        # parallel segments: rotate about the origin, the scale step re-centres
        rotation_transform = AffineTransform.rotation(rotation_angle)
    else:
        rotation_transform = (AffineTransform.translation(-pivot.x, -pivot.y)
                              .rotated(rotation_angle)
                              .translated(pivot.x, pivot.y))

    rotated_midpoint = rotation_transform.apply(initial_midpoint)
    scale_transform = (AffineTransform.translation(-rotated_midpoint.x, -rotated_midpoint.y)
                       .scaled(scale_factor)
                       .translated(final_midpoint.x, final_midpoint.y))

    return rotation_transform.concatenating(scale_transform)

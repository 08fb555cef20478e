"""Geometry utility functions for 2D point and vector operations."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class Point:
    """Immutable 2D point, also used as a vector."""
    x: float
    y: float

    def __post_init__(self):
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    @classmethod
    def unit(cls, n: float = 1.0) -> Point:
        return cls(n, n)

    def as_tuple(self) -> tuple[float, float]:
        return self.x, self.y

    def map(self, fn: Callable[[float], float]) -> Point:
        """Apply fn to both coordinates."""
        return Point(fn(self.x), fn(self.y))

    def zip(self, other: Point, fn: Callable[[float, float], float]) -> Point:
        """Combine coordinates pairwise with fn."""
        return Point(fn(self.x, other.x), fn(self.y, other.y))

    def __add__(self, other: Point) -> Point:
        return self.zip(other, lambda a, b: a + b)

    def __sub__(self, other: Point) -> Point:
        return self.zip(other, lambda a, b: a - b)

    def __neg__(self) -> Point:
        return negated(self)

    def __mul__(self, other: Point | float) -> Point:
        if isinstance(other, Point):
            return self.zip(other, lambda a, b: a * b)
        return self.map(lambda v: v * other)

    def __rmul__(self, scalar: float) -> Point:
        return self.map(lambda v: v * scalar)

    def __truediv__(self, other: Point) -> Point:
        return self.zip(other, lambda a, b: a / b)

    @property
    def reciprocal(self) -> Point:
        return Point.unit(1.0) / self

    @property
    def floored(self) -> Point:
        return self.map(math.floor)

    @property
    def rounded(self) -> Point:
        return self.map(lambda v: math.floor(v + 0.5))

    @property
    def magnitude(self) -> float:
        return magnitude(self)

    @property
    def direction(self) -> float:
        return direction(self)

    def distance_to(self, other: Point) -> float:
        return distance(self, other)

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f})"


ORIGIN = Point(0.0, 0.0)


def negated(point: Point) -> Point:
    """Elementwise negation."""
    return point.map(lambda v: -v)


def magnitude(vector: Point) -> float:
    """
    Calculate the length of a vector.

    :param vector: Vector (x, y)
    :return: Magnitude of the vector
    """
    return math.sqrt(vector.x * vector.x + vector.y * vector.y)


def distance(start_point: Point, end_point: Point) -> float:
    """
    Calculate the distance between two points.

    :param start_point: Starting point (x, y)
    :param end_point: Ending point (x, y)
    :return: Distance between the two points
    """
    return magnitude(end_point - start_point)


def direction(vector: Point) -> float:
    """
    Angle of a vector in radians, normalized into [0, 2*pi).

    :param vector: Vector (x, y)
    :return: Angle from the positive x axis
    """
    out = math.atan2(vector.y, vector.x)
    if out < 0:
        out += 2 * math.pi
        if out >= 2 * math.pi:
            out = 0.0
    return out


def midpoint(start_point: Point, end_point: Point) -> Point:
    return 0.5 * (end_point - start_point) + start_point


def joined(
        left: Iterable[T],
        right: Iterable[T],
        key: Callable[[T], K],
) -> dict[K, tuple[T, T]]:
    """
    SQL-like inner join of two iterables on a key.

    Items whose key appears on only one side are dropped. When a key is
    repeated on one side, the last item with that key wins.

    >>> joined([1, 2, 3, 4], [4, 5], key=lambda v: v % 2)
    {0: (4, 4), 1: (3, 5)}

    :param left: Items providing the first element of each pair
    :param right: Items providing the second element of each pair
    :param key: Join key extractor
    :return: key -> (left_item, right_item)
    """
    keyed: dict[K, T] = {}
    for item in left:
        keyed[key(item)] = item

    out: dict[K, tuple[T, T]] = {}
    for item in right:
        k = key(item)
        if k in keyed:
            out[k] = (keyed[k], item)
    return out

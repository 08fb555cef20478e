"""2D affine transform value type."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace, astuple
from typing import Any, Mapping, Sequence

import numpy as np
from PySide6.QtGui import QTransform

from ntg.core.geometry_utils import Point

FIELDS = ("a", "b", "c", "d", "tx", "ty")


@dataclass(frozen=True)
class AffineTransform:
    """
    Affine transform with a 2x2 linear part and a translation.

    Points are row vectors, same layout as QTransform:

        x' = a * x + c * y + tx
        y' = b * x + d * y + ty

    ``t1.concatenating(t2)`` applies t1 first, then t2.
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    # ---------- constructors ----------
    @classmethod
    def identity(cls) -> AffineTransform:
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> AffineTransform:
        return cls(tx=tx, ty=ty)

    @classmethod
    def rotation(cls, angle: float) -> AffineTransform:
        """Counter-clockwise rotation about the origin, angle in radians."""
        cos, sin = math.cos(angle), math.sin(angle)
        return cls(a=cos, b=sin, c=-sin, d=cos)

    @classmethod
    def scale(cls, sx: float, sy: float | None = None) -> AffineTransform:
        return cls(a=sx, d=sx if sy is None else sy)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AffineTransform:
        """Build from a mapping with the six fields a, b, c, d, tx, ty."""
        missing = [k for k in FIELDS if k not in data]
        if missing:
            raise KeyError(f"Missing transform fields: {missing}")
        return cls(*(float(data[k]) for k in FIELDS))

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> AffineTransform:
        if len(values) != len(FIELDS):
            raise ValueError(f"Expected {len(FIELDS)} values, got {len(values)}")
        return cls(*(float(v) for v in values))

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> AffineTransform:
        m = np.asarray(matrix, dtype=float)
        if m.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {m.shape}")
        return cls(m[0, 0], m[0, 1], m[1, 0], m[1, 1], m[2, 0], m[2, 1])

    @classmethod
    def from_qtransform(cls, transform: QTransform) -> AffineTransform:
        return cls(transform.m11(), transform.m12(),
                   transform.m21(), transform.m22(),
                   transform.dx(), transform.dy())

    # ---------- algebra ----------
    def concatenating(self, other: AffineTransform) -> AffineTransform:
        """Return the transform applying self, then other."""
        return AffineTransform(
            a=self.a * other.a + self.b * other.c,
            b=self.a * other.b + self.b * other.d,
            c=self.c * other.a + self.d * other.c,
            d=self.c * other.b + self.d * other.d,
            tx=self.tx * other.a + self.ty * other.c + other.tx,
            ty=self.tx * other.b + self.ty * other.d + other.ty,
        )

    def apply(self, point: Point) -> Point:
        return Point(self.a * point.x + self.c * point.y + self.tx,
                     self.b * point.x + self.d * point.y + self.ty)

    def translated(self, tx: float, ty: float) -> AffineTransform:
        return self.concatenating(AffineTransform.translation(tx, ty))

    def rotated(self, angle: float) -> AffineTransform:
        return self.concatenating(AffineTransform.rotation(angle))

    def scaled(self, sx: float, sy: float | None = None) -> AffineTransform:
        return self.concatenating(AffineTransform.scale(sx, sy))

    def with_translation(self, tx: float | None = None, ty: float | None = None) -> AffineTransform:
        return replace(self,
                       tx=self.tx if tx is None else tx,
                       ty=self.ty if ty is None else ty)

    # ---------- inspection ----------
    @property
    def is_identity(self) -> bool:
        return self == AffineTransform()

    @property
    def rotation_angle(self) -> float:
        """Rotation of the linear part, radians in (-pi, pi]."""
        return math.atan2(self.b, self.a)

    @property
    def scale_factor(self) -> float:
        """Uniform scale of the linear part (length of the transformed x axis)."""
        return math.hypot(self.a, self.b)

    @property
    def translation_vector(self) -> Point:
        return Point(self.tx, self.ty)

    def almost_equal(self, other: AffineTransform, tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.as_matrix(), other.as_matrix(), rtol=0.0, atol=tol))

    # ---------- conversion ----------
    def as_matrix(self) -> np.ndarray:
        """3x3 matrix in row-vector layout: ``[x, y, 1] @ M``."""
        return np.array([
            [self.a, self.b, 0.0],
            [self.c, self.d, 0.0],
            [self.tx, self.ty, 1.0],
        ])

    def to_dict(self) -> dict[str, float]:
        return {k: float(v) for k, v in zip(FIELDS, astuple(self))}

    def to_qtransform(self) -> QTransform:
        return QTransform(self.a, self.b, self.c, self.d, self.tx, self.ty)

    def __str__(self) -> str:
        return ("[a={:.4f} b={:.4f} c={:.4f} d={:.4f} tx={:.2f} ty={:.2f}]"
                .format(*astuple(self)))


IDENTITY = AffineTransform()

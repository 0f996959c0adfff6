"""Fat line: implicit line strip bounding the control polygon of a cubic Bezier curve."""

from __future__ import annotations

import math
from dataclasses import dataclass

from bezclip.bezier import BezierCurve
from bezclip.common import Point2D
from bezclip.geom import GeomMath


@dataclass(frozen=True)
class BcFatLine:
    """
    Line L in normalized implicit form a*x + b*y + c = 0 with a^2 + b^2 = 1,
    plus the range [d_min, d_max] of signed distances a curve's control points
    have from L. The strip between the two offset lines contains the curve.

    Attributes:
        a (float): x-coefficient of the normal.
        b (float): y-coefficient of the normal.
        c (float): offset.
        d_min (float): lower distance bound, never positive.
        d_max (float): upper distance bound, never negative.
    """

    a: float
    b: float
    c: float
    d_min: float
    d_max: float

    @classmethod
    def from_curve(cls, curve: BezierCurve, eps: float = 0.0) -> BcFatLine:
        """
        Build the fat line of _curve_.

        The base line runs through p0 and p3. If both coincide (closed or
        point-like curve) the line runs through p0 along the direction of the
        control point farthest from p0; if all control points coincide a
        horizontal line through p0 is used. Zero is part of the distance range,
        so the base line itself always lies in the strip.

        Args:
            curve: The curve to bound.
            eps: Lengths up to eps count as zero.
        """
        p0 = curve.p0
        direction = GeomMath.sub(curve.p3, p0)
        if GeomMath.length(direction) <= eps:
            farthest = max(curve.points, key=lambda p: GeomMath.distance(p0, p))
            direction = GeomMath.sub(farthest, p0)
        length = GeomMath.length(direction)
        if length <= eps or length == 0.0:
            a, b = 0.0, 1.0
        else:
            a, b = -direction[1] / length, direction[0] / length
        c = -(a * p0[0] + b * p0[1])

        distances = [a * p[0] + b * p[1] + c for p in curve.points]
        return cls(a, b, c, min(0.0, *distances), max(0.0, *distances))

    def distance(self, point: Point2D) -> float:
        """Signed distance of _point_ from the base line."""
        return self.a * point[0] + self.b * point[1] + self.c

    @property
    def width(self) -> float:
        """Thickness of the strip."""
        return self.d_max - self.d_min

    def is_normalized(self, eps: float = 1e-12) -> bool:
        """Return True if a^2 + b^2 == 1 within eps."""
        return math.isclose(self.a * self.a + self.b * self.b, 1.0, abs_tol=eps)

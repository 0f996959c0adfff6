"""Cubic Bezier curve value type used by clipping and stitching."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from bezclip.common import Point2D
from bezclip.consts import CLOSEST_POINT_ITERATIONS, CLOSEST_POINT_SAMPLES
from bezclip.geom import BcBox, GeomMath


@dataclass(frozen=True)
class BezierCurve:
    """Immutable cubic Bezier curve given by its four control points.

    Lines and quadratic curves are expressed as degree-elevated cubics, so a
    single representation covers every drawing element of a path.

    Attributes:
        p0: Start point.
        p1: First control point.
        p2: Second control point.
        p3: End point.
    """

    p0: Point2D
    p1: Point2D
    p2: Point2D
    p3: Point2D

    @classmethod
    def from_points(cls, points: Union[Sequence[Sequence[float]], NDArray[np.float64]]) -> BezierCurve:
        """
        Create a curve from 4 control points.

        Args:
            points: Control points as sequence of (x, y) or array of shape (4, 2+)

        Raises:
            ValueError: If not exactly 4 points with at least 2 coordinates are given.
        """
        points_array = np.asarray(points, dtype=np.float64)
        if points_array.ndim != 2 or points_array.shape[0] != 4 or points_array.shape[1] < 2:
            raise ValueError(f"A cubic Bezier curve needs 4 (x, y) points, got shape {points_array.shape}")
        pts = [(float(p[0]), float(p[1])) for p in points_array]
        return cls(pts[0], pts[1], pts[2], pts[3])

    @classmethod
    def from_line(cls, start: Point2D, end: Point2D) -> BezierCurve:
        """Create the cubic representing the straight line from start to end."""
        dx = end[0] - start[0]
        dy = end[1] - start[1]
        return cls(
            (float(start[0]), float(start[1])),
            (start[0] + dx / 3.0, start[1] + dy / 3.0),
            (start[0] + 2.0 * dx / 3.0, start[1] + 2.0 * dy / 3.0),
            (float(end[0]), float(end[1])),
        )

    @classmethod
    def from_quadratic(cls, start: Point2D, control: Point2D, end: Point2D) -> BezierCurve:
        """Create the cubic representing a quadratic Bezier curve (degree elevation)."""
        return cls(
            (float(start[0]), float(start[1])),
            (start[0] + 2.0 / 3.0 * (control[0] - start[0]), start[1] + 2.0 / 3.0 * (control[1] - start[1])),
            (end[0] + 2.0 / 3.0 * (control[0] - end[0]), end[1] + 2.0 / 3.0 * (control[1] - end[1])),
            (float(end[0]), float(end[1])),
        )

    @property
    def points(self) -> Tuple[Point2D, Point2D, Point2D, Point2D]:
        """The four control points as tuple."""
        return (self.p0, self.p1, self.p2, self.p3)

    def __getitem__(self, index: int) -> Point2D:
        return self.points[index]

    def as_array(self) -> NDArray[np.float64]:
        """Control points as array of shape (4, 2)."""
        return np.array(self.points, dtype=np.float64)

    ###########################################################################
    # Evaluation
    ###########################################################################

    def point_at(self, t: float) -> Point2D:
        """Evaluate the curve at parameter t."""
        omt = 1.0 - t
        omt2 = omt * omt
        t2 = t * t
        b0 = omt2 * omt
        b1 = 3.0 * omt2 * t
        b2 = 3.0 * omt * t2
        b3 = t2 * t
        return (
            b0 * self.p0[0] + b1 * self.p1[0] + b2 * self.p2[0] + b3 * self.p3[0],
            b0 * self.p0[1] + b1 * self.p1[1] + b2 * self.p2[1] + b3 * self.p3[1],
        )

    def points_at(self, t: NDArray[np.float64]) -> NDArray[np.float64]:
        """Evaluate the curve at all parameters of _t_, returns array of shape (len(t), 2)."""
        points_array = self.as_array()

        # Cubic Bezier basis functions
        omt = 1 - t
        omt2 = omt**2
        omt3 = omt2 * omt
        t2 = t**2
        t3 = t2 * t

        x = (
            omt3 * points_array[0, 0]
            + 3 * omt2 * t * points_array[1, 0]
            + 3 * omt * t2 * points_array[2, 0]
            + t3 * points_array[3, 0]
        )
        y = (
            omt3 * points_array[0, 1]
            + 3 * omt2 * t * points_array[1, 1]
            + 3 * omt * t2 * points_array[2, 1]
            + t3 * points_array[3, 1]
        )
        return np.column_stack([x, y])

    def derivative_at(self, t: float) -> Point2D:
        """First derivative B'(t)."""
        omt = 1.0 - t
        d0 = GeomMath.sub(self.p1, self.p0)
        d1 = GeomMath.sub(self.p2, self.p1)
        d2 = GeomMath.sub(self.p3, self.p2)
        w0 = 3.0 * omt * omt
        w1 = 6.0 * omt * t
        w2 = 3.0 * t * t
        return (w0 * d0[0] + w1 * d1[0] + w2 * d2[0], w0 * d0[1] + w1 * d1[1] + w2 * d2[1])

    def second_derivative_at(self, t: float) -> Point2D:
        """Second derivative B''(t)."""
        omt = 1.0 - t
        a_x = self.p2[0] - 2.0 * self.p1[0] + self.p0[0]
        a_y = self.p2[1] - 2.0 * self.p1[1] + self.p0[1]
        b_x = self.p3[0] - 2.0 * self.p2[0] + self.p1[0]
        b_y = self.p3[1] - 2.0 * self.p2[1] + self.p1[1]
        return (6.0 * (omt * a_x + t * b_x), 6.0 * (omt * a_y + t * b_y))

    def polygonize(self, steps: int) -> NDArray[np.float64]:
        """
        Polygonize the curve into line segments.

        Args:
            steps: Number of segments to divide the curve into

        Returns:
            NDArray[np.float64] of shape (steps+1, 2) containing the polygonized points (x, y)
        """
        if steps < 1:
            raise ValueError(f"steps must be at least 1, got {steps}")
        return self.points_at(np.linspace(0.0, 1.0, steps + 1, dtype=np.float64))

    ###########################################################################
    # Subdivision
    ###########################################################################

    def split(self, t: float) -> Tuple[BezierCurve, BezierCurve]:
        """Split the curve at t using de Casteljau's algorithm, returns (left, right)."""
        p0, p1, p2, p3 = self.points
        omt = 1.0 - t

        def lerp(pa: Point2D, pb: Point2D) -> Point2D:
            return (omt * pa[0] + t * pb[0], omt * pa[1] + t * pb[1])

        p01 = lerp(p0, p1)
        p12 = lerp(p1, p2)
        p23 = lerp(p2, p3)
        p012 = lerp(p01, p12)
        p123 = lerp(p12, p23)
        mid = lerp(p012, p123)
        return BezierCurve(p0, p01, p012, mid), BezierCurve(mid, p123, p23, p3)

    def subcurve(self, t0: float, t1: float) -> BezierCurve:
        """
        Return the part of the curve between t0 and t1.
        If t0 > t1 the returned curve runs backwards from t0 to t1.
        """
        if t0 > t1:
            return self.subcurve(t1, t0).reversed()
        if t0 >= 1.0:
            return BezierCurve(self.p3, self.p3, self.p3, self.p3)
        right = self if t0 <= 0.0 else self.split(t0)[1]
        if t1 >= 1.0:
            return right
        return right.split((t1 - t0) / (1.0 - t0))[0]

    def reversed(self) -> BezierCurve:
        """The same curve traversed from p3 to p0."""
        return BezierCurve(self.p3, self.p2, self.p1, self.p0)

    ###########################################################################
    # Bounds
    ###########################################################################

    def control_box(self) -> BcBox:
        """Bounding box of the control points; always contains the curve."""
        return BcBox.from_points(self.points)

    def bounding_box(self) -> BcBox:
        """Tight bounding box of the curve itself, using the roots of the derivative."""
        params = [0.0, 1.0]
        for axis in (0, 1):
            d0 = self.p1[axis] - self.p0[axis]
            d1 = self.p2[axis] - self.p1[axis]
            d2 = self.p3[axis] - self.p2[axis]
            # B'(t)/3 = a*t^2 + b*t + c
            coefficients = np.array([d0 - 2.0 * d1 + d2, 2.0 * (d1 - d0), d0], dtype=np.float64)
            if not np.any(coefficients):
                continue
            for root in np.roots(np.trim_zeros(coefficients, "f")):
                if abs(root.imag) < 1e-12 and 0.0 < root.real < 1.0:
                    params.append(float(root.real))
        return BcBox.from_points(self.point_at(t) for t in params)

    def is_point(self, eps: float) -> bool:
        """Return True if all control points coincide within eps."""
        return all(GeomMath.distance(self.p0, p) <= eps for p in (self.p1, self.p2, self.p3))

    ###########################################################################
    # Projection
    ###########################################################################

    def closest_parameter(self, point: Point2D, t_min: float = 0.0, t_max: float = 1.0) -> float:
        """
        Parameter in [t_min, t_max] of the curve point closest to _point_.

        Seeds with uniform samples and refines the best one with Newton
        iterations on (B(t) - P) . B'(t) = 0, clamped to the interval.
        """
        if t_max <= t_min:
            return t_min
        params = np.linspace(t_min, t_max, CLOSEST_POINT_SAMPLES + 1, dtype=np.float64)
        samples = self.points_at(params)
        dists = np.hypot(samples[:, 0] - point[0], samples[:, 1] - point[1])
        best_idx = int(np.argmin(dists))
        best_t = float(params[best_idx])
        best_dist = float(dists[best_idx])

        t = best_t
        for _ in range(CLOSEST_POINT_ITERATIONS):
            diff = GeomMath.sub(self.point_at(t), point)
            deriv = self.derivative_at(t)
            second = self.second_derivative_at(t)
            numerator = GeomMath.dot(diff, deriv)
            denominator = GeomMath.dot(deriv, deriv) + GeomMath.dot(diff, second)
            if denominator == 0.0 or not math.isfinite(denominator):
                break
            t = min(t_max, max(t_min, t - numerator / denominator))
            dist = GeomMath.distance(self.point_at(t), point)
            if dist < best_dist:
                best_t, best_dist = t, dist
        return best_t

"""Handling geometries"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

from bezclip.common import Point2D


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling.

    All comparisons are tolerant: clipping accumulates rounding error with
    every subdivision, so exact float equality is never used.
    """

    @staticmethod
    def tol_equal(value1: float, value2: float, eps: float) -> bool:
        """Return True if both values differ by at most eps."""
        return abs(value1 - value2) <= eps

    @staticmethod
    def sub(point1: Point2D, point2: Point2D) -> Point2D:
        """Vector from point2 to point1."""
        return (point1[0] - point2[0], point1[1] - point2[1])

    @staticmethod
    def dot(vec1: Point2D, vec2: Point2D) -> float:
        """Dot product of two vectors."""
        return vec1[0] * vec2[0] + vec1[1] * vec2[1]

    @staticmethod
    def cross(vec1: Point2D, vec2: Point2D) -> float:
        """z-component of the cross product of two vectors."""
        return vec1[0] * vec2[1] - vec1[1] * vec2[0]

    @staticmethod
    def length(vec: Point2D) -> float:
        """Euclidean length of a vector."""
        return math.hypot(vec[0], vec[1])

    @staticmethod
    def distance(point1: Point2D, point2: Point2D) -> float:
        """Euclidean distance between two points."""
        return math.hypot(point1[0] - point2[0], point1[1] - point2[1])

    @staticmethod
    def normalize(vec: Point2D, eps: float = 0.0) -> Point2D:
        """
        Return the unit vector pointing in the direction of _vec_.

        Raises:
            ValueError: if the vector length is not larger than eps
        """
        length = math.hypot(vec[0], vec[1])
        if length <= eps:
            raise ValueError(f"Cannot normalize vector {vec} of length {length}")
        return (vec[0] / length, vec[1] / length)

    @staticmethod
    def signed_angle(vec1: Point2D, vec2: Point2D) -> float:
        """
        Signed angle turning from vec1 to vec2 in radians, range (-pi, pi].
        Positive values turn counterclockwise (left), negative clockwise (right).
        """
        return math.atan2(GeomMath.cross(vec1, vec2), GeomMath.dot(vec1, vec2))


###############################################################################
# BcBox
###############################################################################
@dataclass
class BcBox:
    """
    Represents an axis-aligned rectangular box.

    Attributes:
        xmin (float): The minimum x-coordinate.
        ymin (float): The minimum y-coordinate.
        xmax (float): The maximum x-coordinate.
        ymax (float): The maximum y-coordinate.
    """

    _xmin: float
    _ymin: float
    _xmax: float
    _ymax: float

    def __init__(self, xmin: float, ymin: float, xmax: float, ymax: float):
        """Initialize BcBox with coordinates.

        Args:
            xmin: The minimum x-coordinate
            ymin: The minimum y-coordinate
            xmax: The maximum x-coordinate
            ymax: The maximum y-coordinate
        """
        self._xmin = float(xmin)
        self._ymin = float(ymin)
        self._xmax = float(xmax)
        self._ymax = float(ymax)

        # Normalize coordinates to ensure xmin <= xmax and ymin <= ymax
        if self._xmin > self._xmax:
            self._xmin, self._xmax = self._xmax, self._xmin
        if self._ymin > self._ymax:
            self._ymin, self._ymax = self._ymax, self._ymin

    @classmethod
    def from_points(cls, points: Iterable[Point2D]) -> BcBox:
        """Create the tightest box around the given points."""
        pts = list(points)
        if not pts:
            return cls(0.0, 0.0, 0.0, 0.0)
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @property
    def xmin(self) -> float:
        """float: The minimum x-coordinate."""
        return self._xmin

    @property
    def ymin(self) -> float:
        """float: The minimum y-coordinate."""
        return self._ymin

    @property
    def xmax(self) -> float:
        """float: The maximum x-coordinate."""
        return self._xmax

    @property
    def ymax(self) -> float:
        """float: The maximum y-coordinate."""
        return self._ymax

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """The extent of the box as Tuple (xmin, ymin, xmax, ymax)."""
        return self._xmin, self._ymin, self._xmax, self._ymax

    @property
    def width(self) -> float:
        """float: The width of the box (difference between xmax and xmin)."""
        return self._xmax - self._xmin

    @property
    def height(self) -> float:
        """float: The height of the box (difference between ymax and ymin)."""
        return self._ymax - self._ymin

    @property
    def diagonal(self) -> float:
        """float: Length of the box diagonal."""
        return math.hypot(self.width, self.height)

    def overlaps(self, other: BcBox, eps: float = 0.0) -> bool:
        """Return True if both boxes share at least one point (touching counts), grown by eps."""
        return (
            self._xmin <= other.xmax + eps
            and other.xmin <= self._xmax + eps
            and self._ymin <= other.ymax + eps
            and other.ymin <= self._ymax + eps
        )

    def union(self, other: BcBox) -> BcBox:
        """Smallest box containing both boxes."""
        return BcBox(
            min(self._xmin, other.xmin),
            min(self._ymin, other.ymin),
            max(self._xmax, other.xmax),
            max(self._ymax, other.ymax),
        )

    def __str__(self):
        """Returns a string representation of the BcBox instance."""
        return (
            f"BcBox(xmin={self.xmin}, ymin={self.ymin}, "
            f"xmax={self.xmax}, ymax={self.ymax}, "
            f"width={self.width}, height={self.height})"
        )

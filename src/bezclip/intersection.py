"""Intersection point between two paths, located on both of them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from bezclip.common import Point2D
from bezclip.consts import DEFAULT_TOLERANCE
from bezclip.geom import GeomMath


@dataclass(frozen=True, eq=False)
class BcIntersectionPoint:
    """
    A located intersection of two paths.

    The point is described from the perspective of one of the two paths:
    element_index1/t1 refer to the path named by _path_tag_ (0 or 1),
    element_index2/t2 to the other one. flipped() changes the perspective.

    Equality compares element indices and t-values within DEFAULT_TOLERANCE
    and does not depend on the perspective: a point equals its flipped form.

    Attributes:
        element_index1 (int): Element index on the own path.
        t1 (float): Curve parameter within that element.
        element_index2 (int): Element index on the other path.
        t2 (float): Curve parameter within that element.
        path_tag (int): Which input path element_index1/t1 belong to.
        point (Point2D): Location of the intersection.
    """

    element_index1: int
    t1: float
    element_index2: int
    t2: float
    path_tag: int = 0
    point: Point2D = (0.0, 0.0)

    def flipped(self) -> BcIntersectionPoint:
        """The same intersection seen from the other path."""
        return BcIntersectionPoint(
            self.element_index2,
            self.t2,
            self.element_index1,
            self.t1,
            1 - self.path_tag,
            self.point,
        )

    def canonical(self) -> BcIntersectionPoint:
        """The same intersection seen from path 0."""
        return self if self.path_tag == 0 else self.flipped()

    @property
    def sort_key(self) -> Tuple[int, int, float]:
        """Ordering along the own path: element first, then parameter."""
        return (self.path_tag, self.element_index1, self.t1)

    @property
    def identity_key(self) -> Tuple[int, int]:
        """Element indices as seen from path 0; equal points share it."""
        canonical = self.canonical()
        return (canonical.element_index1, canonical.element_index2)

    def is_equal_to_intersection(self, other: BcIntersectionPoint, tolerance: float = DEFAULT_TOLERANCE) -> bool:
        """Return True if both describe the same location on both paths."""
        mine = self.canonical()
        theirs = other.canonical()
        return (
            mine.element_index1 == theirs.element_index1
            and mine.element_index2 == theirs.element_index2
            and GeomMath.tol_equal(mine.t1, theirs.t1, tolerance)
            and GeomMath.tol_equal(mine.t2, theirs.t2, tolerance)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BcIntersectionPoint):
            return NotImplemented
        return self.is_equal_to_intersection(other)

    def __hash__(self) -> int:
        return hash(self.identity_key)

    def __lt__(self, other: BcIntersectionPoint) -> bool:
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        return (
            f"BcIntersectionPoint(path={self.path_tag}, "
            f"elem1={self.element_index1}, t1={self.t1:.9g}, "
            f"elem2={self.element_index2}, t2={self.t2:.9g}, "
            f"point=({self.point[0]:.9g}, {self.point[1]:.9g}))"
        )

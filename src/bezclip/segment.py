"""Path fragment between two intersection points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from bezclip.bezier import BezierCurve
from bezclip.common import DegenerateInputError, Point2D
from bezclip.consts import DEFAULT_TOLERANCE
from bezclip.geom import GeomMath
from bezclip.intersection import BcIntersectionPoint

if TYPE_CHECKING:
    from bezclip.path import BcPath  # pylint: disable=unused-import


@dataclass(frozen=True, eq=False)
class BcClippedSegment:
    """
    The portion of a path running from one intersection to the next.

    Segments are read-only; flipped_segment() and reversed_segment() return
    new instances and record the transform in is_flipped / is_reversed.

    Attributes:
        start (BcIntersectionPoint): Intersection at the start of the segment.
        end (BcIntersectionPoint): Intersection at the end of the segment.
        curves (Tuple[BezierCurve, ...]): Geometry from start to end.
        full_path (BcPath): The path this segment was cut from.
        is_reversed (bool): Traversal direction is opposite to full_path.
        is_flipped (bool): Endpoint element-index roles are swapped.
        tolerance (float): Parameter tolerance below which start and end coincide.
    """

    start: BcIntersectionPoint
    end: BcIntersectionPoint
    curves: Tuple[BezierCurve, ...]
    full_path: "BcPath"
    is_reversed: bool = False
    is_flipped: bool = False
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self):
        if self.start.is_equal_to_intersection(self.end, self.tolerance):
            raise DegenerateInputError(f"Clipped segment start and end coincide: {self.start}")
        if not self.curves:
            raise DegenerateInputError("Clipped segment needs at least one curve")
        object.__setattr__(self, "curves", tuple(self.curves))

    @classmethod
    def clipped_pair(
        cls,
        start: BcIntersectionPoint,
        end: BcIntersectionPoint,
        curves: Sequence[BezierCurve],
        full_path: "BcPath",
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> BcClippedSegment:
        """Create a segment in the original direction of _full_path_."""
        return cls(start, end, tuple(curves), full_path, tolerance=tolerance)

    ###########################################################################
    # Chaining
    ###########################################################################

    def can_be_prepended_to(self, other: BcClippedSegment, tolerance: float = DEFAULT_TOLERANCE) -> bool:
        """Return True if _other_ starts where this segment ends."""
        return self.end.is_equal_to_intersection(other.start, tolerance)

    def prepend_to(self, other: BcClippedSegment, tolerance: float = DEFAULT_TOLERANCE) -> List[BcClippedSegment]:
        """
        Chain this segment in front of _other_, geometry stays separate.

        Raises:
            ValueError: if _other_ does not start where this segment ends.
        """
        if not self.can_be_prepended_to(other, tolerance):
            raise ValueError(f"Segment ending at {self.end} cannot be prepended to segment starting at {other.start}")
        return [self, other]

    ###########################################################################
    # Transforms
    ###########################################################################

    def flipped_segment(self) -> BcClippedSegment:
        """
        Swap element_index1 <=> element_index2 of both intersections.
        The direction of the segment remains unchanged.
        """
        return BcClippedSegment(
            self.start.flipped(),
            self.end.flipped(),
            self.curves,
            self.full_path,
            self.is_reversed,
            not self.is_flipped,
            self.tolerance,
        )

    def reversed_segment(self) -> BcClippedSegment:
        """
        Swap start <=> end so the direction of the segment changes.
        The intersections' element indices remain unchanged.
        """
        return BcClippedSegment(
            self.end,
            self.start,
            tuple(curve.reversed() for curve in reversed(self.curves)),
            self.full_path,
            not self.is_reversed,
            self.is_flipped,
            self.tolerance,
        )

    ###########################################################################
    # Tangents
    ###########################################################################

    def start_vector(self) -> Point2D:
        """Unit tangent at the start of the segment."""
        first = self.curves[0]
        p0, _, p2, p3 = first.points
        return self._unit_direction(
            [first.derivative_at(0.0), GeomMath.sub(p2, p0), GeomMath.sub(p3, p0)]
            + [GeomMath.sub(curve.p3, p0) for curve in self.curves[1:]]
        )

    def end_vector(self) -> Point2D:
        """Unit tangent at the end of the segment."""
        last = self.curves[-1]
        p0, p1, _, p3 = last.points
        return self._unit_direction(
            [last.derivative_at(1.0), GeomMath.sub(p3, p1), GeomMath.sub(p3, p0)]
            + [GeomMath.sub(p3, curve.p0) for curve in reversed(self.curves[:-1])]
        )

    @staticmethod
    def _unit_direction(candidates: Sequence[Point2D]) -> Point2D:
        """First candidate that does not vanish, normalized."""
        for vec in candidates:
            if GeomMath.length(vec) > 0.0:
                return GeomMath.normalize(vec)
        raise DegenerateInputError("Cannot derive a direction: clipped segment collapses to a point")

    def angle_between(self, other: BcClippedSegment) -> float:
        """
        Signed turning angle from this segment's end tangent to _other_'s start tangent.

        Returns:
            float: radians in (-pi, pi]; negative values turn right (clockwise).
        """
        return GeomMath.signed_angle(self.end_vector(), other.start_vector())

    ###########################################################################
    # Comparison & geometry
    ###########################################################################

    def _original_endpoints(self) -> Tuple[BcIntersectionPoint, BcIntersectionPoint]:
        """Start and end as they were before any reversal."""
        return (self.end, self.start) if self.is_reversed else (self.start, self.end)

    def is_equal_to_segment(self, other: BcClippedSegment, tolerance: float = DEFAULT_TOLERANCE) -> bool:
        """
        Return True if both segments are cut from the same path between the
        same intersections, ignoring is_reversed / is_flipped.
        """
        if self.full_path is not other.full_path:
            return False
        mine = self._original_endpoints()
        theirs = other._original_endpoints()  # pylint: disable=protected-access
        return mine[0].is_equal_to_intersection(theirs[0], tolerance) and mine[1].is_equal_to_intersection(
            theirs[1], tolerance
        )

    @property
    def start_point(self) -> Point2D:
        """Location of the segment's first point."""
        return self.curves[0].p0

    @property
    def end_point(self) -> Point2D:
        """Location of the segment's last point."""
        return self.curves[-1].p3

    def polygonize(self, steps: int) -> NDArray[np.float64]:
        """Polygonize all curves of the segment, shared joints appear once."""
        parts = [curve.polygonize(steps) for curve in self.curves]
        return np.vstack([parts[0]] + [part[1:] for part in parts[1:]])

    def __str__(self) -> str:
        return (
            f"BcClippedSegment(start={self.start}, end={self.end}, curves={len(self.curves)}, "
            f"reversed={self.is_reversed}, flipped={self.is_flipped})"
        )

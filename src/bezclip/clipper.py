"""Curve/curve intersection by Bezier clipping with fat lines.

Both curves are narrowed alternately: the control points of one curve are
expressed as signed distances to the fat line of the other, the convex hull
of that distance-vs-parameter polygon is cut with the fat line's strip, and
the resulting sub-interval (a superset of all parameters where the curves can
meet) replaces the old one. Branches that stop shrinking are bisected.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from bezclip.bezier import BezierCurve
from bezclip.clip_support import DEFAULT_CLIP_CONFIG, ClipConfig, ClipResult, ClipWorkItem
from bezclip.common import RecursionLimitExceededError
from bezclip.consts import DEFAULT_TOLERANCE
from bezclip.fatline import BcFatLine
from bezclip.geom import GeomMath
from bezclip.hull import BcConvexHull
from bezclip.intersection import BcIntersectionPoint

logger = logging.getLogger(__name__)


class BcBezierClipper:
    """Find all parameter pairs (t1, t2) where two cubic curves meet.

    The recursion of classic Bezier clipping is an explicit LIFO worklist of
    ClipWorkItem entries; the depth of an item counts the bisections that
    produced it. Sub-curves are always cut from the original curves so
    rounding errors do not accumulate across rounds.
    """

    def __init__(self, config: Optional[ClipConfig] = None):
        self._config = config if config is not None else DEFAULT_CLIP_CONFIG

    @property
    def config(self) -> ClipConfig:
        """The clipping parameters."""
        return self._config

    def clip(self, curve1: BezierCurve, curve2: BezierCurve) -> ClipResult:
        """
        Clip both curves against each other.

        If the control boxes of the curves do not overlap the result is empty
        and no clipping round is run at all.

        Returns:
            ClipResult: determined (t1, t2) pairs sorted by t1, plus the branches
                that hit the depth cap or the work-item cap.
        """
        config = self._config
        result = ClipResult()

        box1 = curve1.control_box()
        box2 = curve2.control_box()
        scale = box1.union(box2).diagonal
        slack = config.spatial_slack(scale)
        if not box1.overlaps(box2, slack):
            return result

        stack: List[ClipWorkItem] = [ClipWorkItem((0.0, 1.0), (0.0, 1.0), 0)]
        while stack:
            item = stack.pop()
            if result.work_items >= config.max_work_items:
                result.undetermined.append(item)
                result.undetermined.extend(stack)
                stack.clear()
                logger.warning(
                    "Clipping gave up after %d work items, %d branches undetermined",
                    result.work_items,
                    len(result.undetermined),
                )
                break
            result.work_items += 1

            if item.depth > config.max_depth:
                logger.warning(
                    "Clipping branch t1=%s t2=%s exceeded depth %d", item.interval1, item.interval2, config.max_depth
                )
                result.undetermined.append(item)
                continue

            # Reversed so the first combination is processed first
            stack.extend(reversed(self._process_item(curve1, curve2, item, slack, scale, result)))

        result.parameters.sort()
        return result

    def _process_item(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        curve1: BezierCurve,
        curve2: BezierCurve,
        item: ClipWorkItem,
        slack: float,
        scale: float,
        result: ClipResult,
    ) -> List[ClipWorkItem]:
        """
        Run clipping rounds on one branch until it converges, dies or stalls.

        Returns:
            List[ClipWorkItem]: the bisected sub-branches if the branch stalled,
                otherwise an empty list.
        """
        config = self._config
        tol = config.tolerance
        (a1, b1), (a2, b2) = item.interval1, item.interval2
        stalled_rounds = 0

        for _ in range(config.max_rounds):
            width1 = b1 - a1
            width2 = b2 - a2
            if width1 < tol or width2 < tol:
                self._emit(curve1, curve2, (a1, b1), (a2, b2), scale, result)
                return []

            sub1 = curve1.subcurve(a1, b1)
            sub2 = curve2.subcurve(a2, b2)
            if not sub1.control_box().overlaps(sub2.control_box(), slack):
                return []

            # Narrow curve1 with the fat line of curve2
            clipped = self.clip_interval(sub1, sub2, slack)
            if clipped is None:
                return []
            a1, b1 = a1 + clipped[0] * width1, a1 + clipped[1] * width1
            if b1 - a1 < tol:
                self._emit(curve1, curve2, (a1, b1), (a2, b2), scale, result)
                return []

            # Swap roles: narrow curve2 with the fat line of the narrowed curve1
            sub1 = curve1.subcurve(a1, b1)
            clipped = self.clip_interval(sub2, sub1, slack)
            if clipped is None:
                return []
            a2, b2 = a2 + clipped[0] * width2, a2 + clipped[1] * width2

            ratio = ((b1 - a1) / width1) * ((b2 - a2) / width2)
            stalled_rounds = stalled_rounds + 1 if ratio >= config.stall_ratio else 0
            if stalled_rounds >= config.stall_rounds:
                break

        return ClipWorkItem((a1, b1), (a2, b2), item.depth).bisected()

    @staticmethod
    def clip_interval(target: BezierCurve, other: BezierCurve, slack: float) -> Optional[Tuple[float, float]]:
        """
        Sub-interval of _target_'s parameter range [0, 1] that can meet _other_.

        The sub-interval never excludes a true intersection but may include
        extra region.

        Returns:
            (u_start, u_end) within [0, 1], or None if the curves cannot meet.
        """
        fat_line = BcFatLine.from_curve(other, slack)
        distance_polygon = [(idx / 3.0, fat_line.distance(point)) for idx, point in enumerate(target.points)]
        hull = BcConvexHull.build(distance_polygon)
        span = BcConvexHull.intersect_horizontal_strip(hull, fat_line.d_min - slack, fat_line.d_max + slack)
        if span is None:
            return None
        return (max(0.0, span[0]), min(1.0, span[1]))

    def _emit(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        curve1: BezierCurve,
        curve2: BezierCurve,
        interval1: Tuple[float, float],
        interval2: Tuple[float, float],
        scale: float,
        result: ClipResult,
    ) -> None:
        """Record one intersection for a converged branch, unless rejected or already known."""
        config = self._config
        (a1, b1), (a2, b2) = interval1, interval2

        # The narrower interval fixes its parameter, the other one is projected
        if b1 - a1 <= b2 - a2:
            t1 = 0.5 * (a1 + b1)
            t2 = curve2.closest_parameter(curve1.point_at(t1), a2, b2)
        else:
            t2 = 0.5 * (a2 + b2)
            t1 = curve1.closest_parameter(curve2.point_at(t2), a1, b1)

        gap = GeomMath.distance(curve1.point_at(t1), curve2.point_at(t2))
        if gap > config.accept_distance(scale):
            logger.debug("Rejected candidate t1=%.9g t2=%.9g with gap %.3g", t1, t2, gap)
            return

        merge = config.merge_tolerance
        for known1, known2 in result.parameters:
            if GeomMath.tol_equal(known1, t1, merge) and GeomMath.tol_equal(known2, t2, merge):
                return
        result.parameters.append((t1, t2))

    @staticmethod
    def to_intersection_points(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        result: ClipResult,
        curve1: BezierCurve,
        element_index1: int = 0,
        element_index2: int = 0,
        path_tag: int = 0,
    ) -> List[BcIntersectionPoint]:
        """Promote the parameter pairs of _result_ to intersection points."""
        return [
            BcIntersectionPoint(element_index1, t1, element_index2, t2, path_tag, curve1.point_at(t1))
            for t1, t2 in result.parameters
        ]


def find_intersections(
    # pylint: disable=too-many-arguments,too-many-positional-arguments
    curve1: BezierCurve,
    curve2: BezierCurve,
    tolerance: float = DEFAULT_TOLERANCE,
    element_index1: int = 0,
    element_index2: int = 0,
    config: Optional[ClipConfig] = None,
) -> List[BcIntersectionPoint]:
    """
    All intersections of two cubic curves, sorted by t1.

    Args:
        curve1: First curve, its parameters become t1.
        curve2: Second curve, its parameters become t2.
        tolerance: Parameter-space tolerance; ignored if _config_ is given.
        element_index1: Element index stored for curve1.
        element_index2: Element index stored for curve2.
        config: Full clipping configuration.

    Raises:
        RecursionLimitExceededError: if some branch could not be decided. The
            exception carries the determined points and the undecided branches.
    """
    if config is None:
        config = ClipConfig(tolerance=tolerance)
    result = BcBezierClipper(config).clip(curve1, curve2)
    points = BcBezierClipper.to_intersection_points(result, curve1, element_index1, element_index2)
    if not result.is_determined:
        raise RecursionLimitExceededError(
            f"Intersection undetermined for {len(result.undetermined)} branches",
            intersections=points,
            undetermined=result.undetermined,
        )
    return points

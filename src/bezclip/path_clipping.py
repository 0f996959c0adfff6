"""Path-level clipping: intersect two paths element by element and cut them into segments."""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import KDTree

from bezclip.clip_support import DEFAULT_CLIP_CONFIG, ClipConfig, ClipWorkItem
from bezclip.clipper import BcBezierClipper
from bezclip.common import RecursionLimitExceededError
from bezclip.consts import DEFAULT_TOLERANCE
from bezclip.intersection import BcIntersectionPoint
from bezclip.path import BcPath
from bezclip.segment import BcClippedSegment

logger = logging.getLogger(__name__)


class BcPathClipper:
    """Intersect two paths and cut both of them at the intersections.

    Intersections are reported from the perspective of the first path
    (path_tag 0): element_index1/t1 locate the point on path1,
    element_index2/t2 on path2.
    """

    def __init__(self, config: Optional[ClipConfig] = None):
        self._config = config if config is not None else DEFAULT_CLIP_CONFIG
        self._clipper = BcBezierClipper(self._config)

    @property
    def config(self) -> ClipConfig:
        """The clipping parameters."""
        return self._config

    def find_path_intersections(self, path1: BcPath, path2: BcPath) -> List[BcIntersectionPoint]:
        """
        All intersections between the elements of two paths.

        Every element pair whose control boxes overlap is clipped. Positions
        at the very end of an element move to the start of the following one,
        so an intersection on a shared vertex is found once; remaining
        duplicates are merged.

        Returns:
            List[BcIntersectionPoint]: sorted along path1.

        Raises:
            RecursionLimitExceededError: if some element pair could not be decided.
        """
        config = self._config
        snap = config.merge_tolerance
        scale = max(1.0, path1.bounding_box().union(path2.bounding_box()).diagonal)
        curves1 = path1.curves
        curves2 = path2.curves

        candidates: List[BcIntersectionPoint] = []
        undetermined: List[Tuple[int, int, ClipWorkItem]] = []
        for idx1, curve1 in enumerate(curves1):
            box1 = curve1.control_box()
            for idx2, curve2 in enumerate(curves2):
                if not box1.overlaps(curve2.control_box(), config.spatial_slack(scale)):
                    continue
                result = self._clipper.clip(curve1, curve2)
                undetermined.extend((idx1, idx2, item) for item in result.undetermined)
                for t1, t2 in result.parameters:
                    elem1, pos1 = path1.normalized_position(idx1, t1, snap)
                    elem2, pos2 = path2.normalized_position(idx2, t2, snap)
                    point = curves1[elem1].point_at(pos1)
                    candidates.append(BcIntersectionPoint(elem1, pos1, elem2, pos2, 0, point))

        intersections = sorted(self._merge_duplicates(candidates, config.merge_tolerance * scale))
        logger.debug("Found %d intersections (%d candidates)", len(intersections), len(candidates))

        if undetermined:
            raise RecursionLimitExceededError(
                f"Path intersection undetermined for {len(undetermined)} branches",
                intersections=intersections,
                undetermined=[item for _, _, item in undetermined],
            )
        return intersections

    def _merge_duplicates(self, points: List[BcIntersectionPoint], radius: float) -> List[BcIntersectionPoint]:
        """Drop points that lie within _radius_ of an earlier one and describe the same path positions."""
        if len(points) < 2:
            return list(points)

        tree = KDTree(np.array([point.point for point in points], dtype=np.float64))
        removed: Set[int] = set()
        for idx_a, idx_b in sorted(tree.query_pairs(r=radius)):
            if idx_a in removed or idx_b in removed:
                continue
            if points[idx_a].is_equal_to_intersection(points[idx_b], self._config.merge_tolerance):
                removed.add(idx_b)
        return [point for idx, point in enumerate(points) if idx not in removed]

    def cut_path_at_intersections(
        self, path: BcPath, intersections: Sequence[BcIntersectionPoint]
    ) -> List[BcClippedSegment]:
        """Cut _path_ at _intersections_ (see module function of the same name)."""
        return cut_path_at_intersections(path, intersections, self._config.tolerance)

    def clip_paths(self, path1: BcPath, path2: BcPath) -> Tuple[List[BcClippedSegment], List[BcClippedSegment]]:
        """
        Intersect both paths and cut each of them at the intersections.

        Returns:
            Tuple of the segments of path1 and the segments of path2; the
            intersections of path2's segments are seen from path2.
        """
        intersections = self.find_path_intersections(path1, path2)
        segments1 = cut_path_at_intersections(path1, intersections, self._config.tolerance)
        segments2 = cut_path_at_intersections(
            path2, [point.flipped() for point in intersections], self._config.tolerance
        )
        return segments1, segments2


def cut_path_at_intersections(
    path: BcPath,
    intersections: Sequence[BcIntersectionPoint],
    tolerance: float = DEFAULT_TOLERANCE,
) -> List[BcClippedSegment]:
    """
    Cut a path into the pieces between consecutive intersections.

    The intersections must be seen from _path_ (element_index1/t1 locate the
    point on it). In a closed subpath the last intersection connects to the
    first one around the subpath end; in an open subpath only the pieces
    between two intersections are returned. A subpath with a single
    intersection on it yields nothing.

    Args:
        path: The path to cut.
        intersections: Intersection points on _path_, in any order.
        tolerance: Parameter tolerance for snapping and duplicate removal.

    Returns:
        List[BcClippedSegment]: segments in path order.
    """
    by_subpath: Dict[int, List[BcIntersectionPoint]] = {}
    subpaths = path.subpaths
    for point in intersections:
        elem, t = path.normalized_position(point.element_index1, point.t1, tolerance)
        if (elem, t) != (point.element_index1, point.t1):
            point = dataclasses.replace(point, element_index1=elem, t1=t)
        sub_idx = subpaths.index(path.subpath_of(elem))
        by_subpath.setdefault(sub_idx, []).append(point)

    segments: List[BcClippedSegment] = []
    for sub_idx in sorted(by_subpath):
        subpath = subpaths[sub_idx]
        ordered: List[BcIntersectionPoint] = []
        for point in sorted(by_subpath[sub_idx], key=lambda p: (p.element_index1, p.t1)):
            if ordered and ordered[-1].is_equal_to_intersection(point, tolerance):
                continue
            ordered.append(point)
        if subpath.closed and len(ordered) > 1 and ordered[-1].is_equal_to_intersection(ordered[0], tolerance):
            ordered.pop()

        if len(ordered) < 2:
            if subpath.closed:
                logger.warning(
                    "Skipping single intersection %s on closed subpath %d of %s", ordered[0], sub_idx, path
                )
            continue

        pairs = list(zip(ordered[:-1], ordered[1:]))
        if subpath.closed:
            pairs.append((ordered[-1], ordered[0]))
        for start, end in pairs:
            curves = path.curves_between(start.element_index1, start.t1, end.element_index1, end.t1)
            segments.append(BcClippedSegment.clipped_pair(start, end, curves, path, tolerance))

    return segments

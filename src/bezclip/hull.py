"""Convex hull of a handful of points, as needed for Bezier clipping."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from bezclip.common import Point2D, Polygon2D
from bezclip.geom import GeomMath


class BcConvexHull:
    """Static helpers building and querying convex hulls.

    Hulls are ordered counterclockwise. Zero-area input is valid: collinear
    points collapse to the two extreme points and coincident points to one.
    """

    @staticmethod
    def build(points: Iterable[Point2D], eps: float = 0.0) -> Polygon2D:
        """
        Build the convex hull using Andrew's monotone chain.

        Args:
            points: Input points (typically the 4 control points of a curve).
            eps: Tolerance for treating points as coincident or collinear.

        Returns:
            Polygon2D: Hull vertices in counterclockwise order without repetition
                of the first vertex.
        """
        pts: List[Point2D] = []
        for point in sorted((float(p[0]), float(p[1])) for p in points):
            if not pts or GeomMath.distance(pts[-1], point) > eps:
                pts.append(point)

        if len(pts) <= 2:
            return pts

        def half_hull(ordered: List[Point2D]) -> List[Point2D]:
            chain: List[Point2D] = []
            for point in ordered:
                while (
                    len(chain) >= 2
                    and GeomMath.cross(GeomMath.sub(chain[-1], chain[-2]), GeomMath.sub(point, chain[-2])) <= eps
                ):
                    chain.pop()
                chain.append(point)
            return chain

        # Collinear input: both chains reduce to the two extremes
        lower = half_hull(pts)
        upper = half_hull(list(reversed(pts)))
        return lower[:-1] + upper[:-1]

    @staticmethod
    def contains_point(hull: Polygon2D, point: Point2D, eps: float = 0.0) -> bool:
        """Return True if _point_ lies inside or on the counterclockwise hull, within eps."""
        if not hull:
            return False
        if len(hull) == 1:
            return GeomMath.distance(hull[0], point) <= eps
        if len(hull) == 2:
            seg = GeomMath.sub(hull[1], hull[0])
            rel = GeomMath.sub(point, hull[0])
            seg_len = GeomMath.length(seg)
            if abs(GeomMath.cross(seg, rel)) > eps * seg_len:
                return False
            proj = GeomMath.dot(seg, rel) / (seg_len * seg_len)
            return -eps <= proj * seg_len <= seg_len + eps
        for idx, start in enumerate(hull):
            end = hull[(idx + 1) % len(hull)]
            edge = GeomMath.sub(end, start)
            if GeomMath.cross(edge, GeomMath.sub(point, start)) < -eps * GeomMath.length(edge):
                return False
        return True

    @staticmethod
    def intersect_horizontal_strip(hull: Polygon2D, y_min: float, y_max: float) -> Optional[Tuple[float, float]]:
        """
        Range of x covered by the part of the hull lying within y_min <= y <= y_max.

        Used by the clipper on hulls of distance-vs-parameter polygons, where x
        is the curve parameter and y the distance to a fat line.

        Returns:
            (x_min, x_max) or None if hull and strip do not meet.
        """
        if not hull:
            return None

        xs: List[float] = [x for x, y in hull if y_min <= y <= y_max]

        count = len(hull)
        edges = [(hull[idx], hull[(idx + 1) % count]) for idx in range(count if count > 2 else count - 1)]
        for (x0, y0), (x1, y1) in edges:
            for level in (y_min, y_max):
                if (y0 - level) * (y1 - level) < 0.0:
                    xs.append(x0 + (level - y0) * (x1 - x0) / (y1 - y0))

        if not xs:
            return None
        return (min(xs), max(xs))

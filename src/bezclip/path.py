"""Path representation adapter: command/point paths to cubic elements and back."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import svgpathtools
from numpy.typing import NDArray

from bezclip.bezier import BezierCurve
from bezclip.common import BcPathCmds, Point2D
from bezclip.consts import CIRCLE_KAPPA, POLYGONIZE_STEPS_INTERNAL
from bezclip.geom import BcBox, GeomMath
from bezclip.path_support import BcSubpath, PathSplitter, PathValidator

###############################################################################
# BcPath
###############################################################################


class BcPath:
    """Vector path represented by points and corresponding commands.

    A path contains 0..n subpaths; each subpath starts with M, is followed by
    an arbitrary mix of L/Q/C, and may optionally end with Z.

    The clipping core only sees the cubic elements of a path. Each drawing
    command becomes one element; the element index is the position in
    `curves`, counted across all subpaths.

    Attributes:
        _points: Array of 2D points (shape: n_points, 2)
        _commands: List of commands for the points
        _curves: Cached cubic elements
        _subpaths: Cached subpath element ranges
        _bounding_box: Cached bounding box
    """

    def __init__(
        self,
        points: Optional[Union[Sequence[Sequence[float]], NDArray[np.float64]]] = None,
        commands: Optional[Sequence[BcPathCmds]] = None,
    ):
        """
        Initialize a BcPath from 2D points.

        Args:
            points: a sequence of (x, y); a third column (type) is ignored.
            commands: List of drawing commands corresponding to the points.
        """
        if points is None:
            arr = np.empty((0, 2), dtype=np.float64)
        else:
            arr = np.asarray(points, dtype=np.float64)
            if arr.size == 0:
                arr = arr.reshape(0, 2)

        if arr.ndim != 2:
            raise ValueError(f"points must have 2 dimensions, got {arr.ndim}")
        if arr.shape[1] not in (2, 3):
            raise ValueError(f"points must have shape (n, 2) or (n, 3), got {arr.shape}")

        self._points: NDArray[np.float64] = arr[:, :2].copy()
        self._commands: List[BcPathCmds] = [] if commands is None else list(commands)
        PathValidator.validate(self._commands, self._points)

        self._curves, self._subpaths = PathSplitter.build_elements(self._points, self._commands)
        self._bounding_box: Optional[BcBox] = None

    ###########################################################################
    # Construction
    ###########################################################################

    @classmethod
    def from_curves(cls, curves: Sequence[BezierCurve], closed: Optional[bool] = None, eps: float = 0.0) -> BcPath:
        """
        Create a single-subpath path from consecutive cubic curves.

        Args:
            curves: Curves, each starting where the previous one ends.
            closed: Append Z; None closes if the last curve ends at the first start (within eps).
            eps: Tolerance for the automatic closing test.
        """
        return cls.from_subpath_curves([(list(curves), closed)], eps)

    @classmethod
    def from_subpath_curves(
        cls, subpaths: Sequence[Tuple[Sequence[BezierCurve], Optional[bool]]], eps: float = 0.0
    ) -> BcPath:
        """Create a path from (curves, closed) per subpath, see from_curves."""
        points: List[Point2D] = []
        commands: List[BcPathCmds] = []
        for curves, closed in subpaths:
            if not curves:
                continue
            if closed is None:
                closed = GeomMath.distance(curves[0].p0, curves[-1].p3) <= eps
            points.append(curves[0].p0)
            commands.append("M")
            for curve in curves:
                points.extend([curve.p1, curve.p2, curve.p3])
                commands.append("C")
            if closed:
                commands.append("Z")
        return cls(points, commands)

    @classmethod
    def circle(cls, center: Point2D, radius: float) -> BcPath:
        """Counterclockwise circle made of 4 cubic quarter arcs, starting at angle 0."""
        cx, cy = center
        k = CIRCLE_KAPPA * radius
        r = radius
        points = [
            (cx + r, cy),
            (cx + r, cy + k),
            (cx + k, cy + r),
            (cx, cy + r),
            (cx - k, cy + r),
            (cx - r, cy + k),
            (cx - r, cy),
            (cx - r, cy - k),
            (cx - k, cy - r),
            (cx, cy - r),
            (cx + k, cy - r),
            (cx + r, cy - k),
            (cx + r, cy),
        ]
        return cls(points, ["M", "C", "C", "C", "C", "Z"])

    @classmethod
    def from_svg_path(cls, path_string: str) -> BcPath:
        """
        Create a path from an SVG path string.

        Lines, quadratic and cubic Bezier segments are supported.

        Raises:
            ValueError: if the path contains elliptical arcs.
        """
        parsed = svgpathtools.parse_path(path_string)
        points: List[Point2D] = []
        commands: List[BcPathCmds] = []
        if len(parsed) == 0:
            return cls()

        def to_point(value: complex) -> Point2D:
            return (float(value.real), float(value.imag))

        for subpath in parsed.continuous_subpaths():
            points.append(to_point(subpath.start))
            commands.append("M")
            for segment in subpath:
                if isinstance(segment, svgpathtools.Line):
                    points.append(to_point(segment.end))
                    commands.append("L")
                elif isinstance(segment, svgpathtools.QuadraticBezier):
                    points.extend([to_point(segment.control), to_point(segment.end)])
                    commands.append("Q")
                elif isinstance(segment, svgpathtools.CubicBezier):
                    points.extend([to_point(segment.control1), to_point(segment.control2), to_point(segment.end)])
                    commands.append("C")
                else:
                    raise ValueError(f"Unsupported SVG path segment {type(segment).__name__}")
            if subpath.isclosed():
                commands.append("Z")
        return cls(points, commands)

    ###########################################################################
    # Properties
    ###########################################################################

    @property
    def points(self) -> NDArray[np.float64]:
        """Read-only view of the points."""
        view = self._points.view()
        view.flags.writeable = False
        return view

    @property
    def commands(self) -> List[BcPathCmds]:
        """Copy of the commands."""
        return list(self._commands)

    @property
    def curves(self) -> Tuple[BezierCurve, ...]:
        """Cubic elements of the path, indexed by element index."""
        return tuple(self._curves)

    @property
    def element_count(self) -> int:
        """Number of cubic elements."""
        return len(self._curves)

    @property
    def subpaths(self) -> Tuple[BcSubpath, ...]:
        """Element ranges of all subpaths."""
        return tuple(self._subpaths)

    @property
    def is_closed(self) -> bool:
        """True if the path has subpaths and all of them end with Z."""
        return bool(self._subpaths) and all(sub.closed for sub in self._subpaths)

    ###########################################################################
    # Element navigation
    ###########################################################################

    def subpath_of(self, element_index: int) -> BcSubpath:
        """The subpath containing the given element."""
        for subpath in self._subpaths:
            if element_index in subpath:
                return subpath
        raise IndexError(f"Element index {element_index} out of range (0..{self.element_count - 1})")

    def next_element(self, element_index: int) -> Optional[int]:
        """Element following _element_index_ in its subpath, wrapping in closed subpaths."""
        subpath = self.subpath_of(element_index)
        if element_index + 1 < subpath.stop:
            return element_index + 1
        if subpath.closed:
            return subpath.start
        return None

    def normalized_position(self, element_index: int, t: float, eps: float) -> Tuple[int, float]:
        """
        Canonical (element, t) of a path position.

        t within eps of 1 moves to t=0 of the following element where there is
        one, t within eps of the ends snaps to 0 or 1.
        """
        if t >= 1.0 - eps:
            following = self.next_element(element_index)
            if following is not None:
                return (following, 0.0)
            return (element_index, 1.0)
        if t <= eps:
            return (element_index, 0.0)
        return (element_index, t)

    def curves_between(self, elem_start: int, t_start: float, elem_end: int, t_end: float) -> List[BezierCurve]:
        """
        Geometry of the path from (elem_start, t_start) to (elem_end, t_end).

        In a closed subpath the walk wraps around the subpath end; when both
        positions are on the same element with t_end <= t_start the walk runs
        once around the whole subpath.

        Raises:
            ValueError: if the positions are on different subpaths, or the walk
                would have to wrap in an open subpath.
        """
        subpath = self.subpath_of(elem_start)
        if elem_end not in subpath:
            raise ValueError(f"Elements {elem_start} and {elem_end} are on different subpaths")

        curves = self._curves
        if elem_start == elem_end and t_start < t_end:
            return [curves[elem_start].subcurve(t_start, t_end)]

        if not subpath.closed and (elem_end < elem_start or (elem_end == elem_start and t_end <= t_start)):
            raise ValueError(f"Cannot walk backwards in open subpath from {elem_start} to {elem_end}")

        result: List[BezierCurve] = []
        if t_start < 1.0:
            result.append(curves[elem_start].subcurve(t_start, 1.0))
        idx = self.next_element(elem_start)
        while idx is not None and idx != elem_end:
            result.append(curves[idx])
            idx = self.next_element(idx)
        if t_end > 0.0:
            result.append(curves[elem_end].subcurve(0.0, t_end))
        return result

    ###########################################################################
    # Geometry
    ###########################################################################

    def bounding_box(self) -> BcBox:
        """Tight bounding box around all elements."""
        if self._bounding_box is not None:
            return self._bounding_box

        if not self._curves:
            self._bounding_box = BcBox.from_points(tuple(map(tuple, self._points)))
            return self._bounding_box

        box = self._curves[0].bounding_box()
        for curve in self._curves[1:]:
            box = box.union(curve.bounding_box())
        self._bounding_box = box
        return self._bounding_box

    def polygonize(self, steps: int = POLYGONIZE_STEPS_INTERNAL) -> List[NDArray[np.float64]]:
        """Polygonize every subpath with _steps_ per element; one (n, 2) array per subpath."""
        polylines: List[NDArray[np.float64]] = []
        for subpath in self._subpaths:
            parts = [self._curves[idx].polygonize(steps) for idx in range(subpath.start, subpath.stop)]
            if parts:
                polylines.append(np.vstack([parts[0]] + [part[1:] for part in parts[1:]]))
        return polylines

    @property
    def area(self) -> float:
        """Signed area of the closed subpaths (counterclockwise positive)."""
        total = 0.0
        for subpath, polyline in zip((s for s in self._subpaths if len(s) > 0), self.polygonize()):
            if not subpath.closed:
                continue
            x = polyline[:, 0]
            y = polyline[:, 1]
            total += 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))
        return total

    @property
    def is_ccw(self) -> bool:
        """True if the signed area is positive."""
        return self.area > 0.0

    def reverse(self) -> BcPath:
        """Same path with every subpath traversed backwards; subpath order is kept."""
        return BcPath.from_subpath_curves(
            [
                ([curve.reversed() for curve in reversed(self._curves[sub.start : sub.stop])], sub.closed)
                for sub in self._subpaths
            ]
        )

    ###########################################################################
    # Serialization
    ###########################################################################

    def to_svg_path(self) -> str:
        """SVG path string of the cubic elements (lines and quadratics come out as C)."""
        parts: List[str] = []
        for subpath in self._subpaths:
            curves = self._curves[subpath.start : subpath.stop]
            if not curves:
                continue
            parts.append(f"M {curves[0].p0[0]:g} {curves[0].p0[1]:g}")
            for curve in curves:
                coords = " ".join(f"{value:g}" for point in (curve.p1, curve.p2, curve.p3) for value in point)
                parts.append(f"C {coords}")
            if subpath.closed:
                parts.append("Z")
        return " ".join(parts)

    @classmethod
    def from_dict(cls, data: dict) -> BcPath:
        """Create a BcPath instance from a dictionary."""
        return cls(data.get("points", []), data.get("commands", []))

    def to_dict(self) -> dict:
        """Convert the BcPath instance to a dictionary."""
        return {
            "points": self._points.tolist(),
            "commands": list(self._commands),
        }

    def __str__(self) -> str:
        return f"BcPath(elements={self.element_count}, subpaths={len(self._subpaths)}, closed={self.is_closed})"

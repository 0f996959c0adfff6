"""Central module containing type definitions and exceptions for Bezier clipping."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Literal, Sequence, Tuple

if TYPE_CHECKING:
    from bezclip.clip_support import ClipWorkItem
    from bezclip.intersection import BcIntersectionPoint
    from bezclip.segment import BcClippedSegment

###############################################################################
# Types
###############################################################################

Point2D = Tuple[float, float]

Polygon2D = List[Point2D]

BcPathCmds = Literal[  # Type-Definition for path commands used in BcPath
    # MoveTo (1) - start a new subpath and move the current point to (x,y)
    "M",
    # LineTo (1) - draw a straight line from the current point to (x,y)
    "L",
    # Quadratic Bezier To (2) - one control point and an endpoint (x,y)
    "Q",
    # Cubic Bezier To (3) - two control points and an endpoint (x,y)
    "C",
    # ClosePath (0) - close subpath by drawing a line from the current point to start point
    "Z",
]


###############################################################################
# Exceptions
###############################################################################


class BezierClipError(Exception):
    """Base exception for clipping and stitching errors."""


class DegenerateInputError(BezierClipError, ValueError):
    """Raised when geometry collapses so far that no fallback construction applies."""


class RecursionLimitExceededError(BezierClipError):
    """Raised when clipping could not decide some branches within the depth cap.

    Attributes:
        intersections: Intersections that were determined before giving up.
        undetermined: Work items that were left undecided.
    """

    def __init__(
        self,
        message: str,
        intersections: Sequence[BcIntersectionPoint] = (),
        undetermined: Sequence[ClipWorkItem] = (),
    ):
        super().__init__(message)
        self.intersections = list(intersections)
        self.undetermined = list(undetermined)


class InconsistentSegmentSetError(BezierClipError):
    """Raised when stitching leaves open chains behind.

    Attributes:
        open_chains: The chains that could not be closed.
        closed_loops: The loops that were closed successfully.
    """

    def __init__(
        self,
        message: str,
        open_chains: Sequence[List[BcClippedSegment]] = (),
        closed_loops: Sequence[List[BcClippedSegment]] = (),
    ):
        super().__init__(message)
        self.open_chains = list(open_chains)
        self.closed_loops = list(closed_loops)

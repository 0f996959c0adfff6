"""Stitch clipped segments into closed loops by walking shared intersections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Sequence, Tuple

from bezclip.bezier import BezierCurve
from bezclip.common import InconsistentSegmentSetError
from bezclip.consts import DEFAULT_TOLERANCE
from bezclip.intersection import BcIntersectionPoint
from bezclip.path import BcPath
from bezclip.segment import BcClippedSegment

logger = logging.getLogger(__name__)


class StitchState(Enum):
    """States of the walk that builds one loop."""

    AT_SEGMENT = auto()
    SELECT_NEXT = auto()
    APPEND = auto()
    CLOSED = auto()
    DANGLING = auto()


@dataclass
class StitchResult:
    """Outcome of a stitching pass.

    Attributes:
        closed_loops: Segment chains whose last segment ends where the first starts.
        open_chains: Chains that ran into an intersection without continuation.
    """

    closed_loops: List[List[BcClippedSegment]] = field(default_factory=list)
    open_chains: List[List[BcClippedSegment]] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        """True if every segment ended up in a closed loop."""
        return not self.open_chains

    @property
    def segment_count(self) -> int:
        """Number of segments in loops and chains."""
        return sum(len(chain) for chain in self.closed_loops + self.open_chains)

    def closed_paths(self) -> List[BcPath]:
        """Every closed loop as a single closed BcPath."""
        paths: List[BcPath] = []
        for loop in self.closed_loops:
            curves = [curve for segment in loop for curve in segment.curves]
            last = curves[-1]
            # Both paths meet at the intersection only within tolerance
            curves[-1] = BezierCurve(last.p0, last.p1, last.p2, curves[0].p0)
            paths.append(BcPath.from_curves(curves, closed=True))
        return paths


class BcSegmentStitcher:
    """Walk clipped segments into closed loops.

    Segments are edges of a directed multigraph whose nodes are the
    intersections; two endpoints are the same node when they describe the
    same intersection, regardless of which path they are seen from. Each walk
    starts with the first unused segment and, at every node, continues with
    the candidate that turns rightmost (smallest signed turning angle).
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, allow_reversed: bool = False):
        self._tolerance = tolerance
        self._allow_reversed = allow_reversed

    @property
    def tolerance(self) -> float:
        """Tolerance of the intersection matching."""
        return self._tolerance

    def _node_ids(self, segments: Sequence[BcClippedSegment]) -> List[Tuple[int, int]]:
        """(start node, end node) per segment."""
        nodes: List[BcIntersectionPoint] = []

        def node_of(point: BcIntersectionPoint) -> int:
            for idx, node in enumerate(nodes):
                if node.is_equal_to_intersection(point, self._tolerance):
                    return idx
            nodes.append(point)
            return len(nodes) - 1

        return [(node_of(segment.start), node_of(segment.end)) for segment in segments]

    def stitch(self, segments: Sequence[BcClippedSegment]) -> StitchResult:
        """
        Consume all segments into closed loops and open chains.

        Every segment is used at most once. With allow_reversed, an unused
        segment may also be walked backwards.
        """
        segments = list(segments)
        node_ids = self._node_ids(segments)
        consumed = [False] * len(segments)
        result = StitchResult()

        for first_idx, first in enumerate(segments):
            if consumed[first_idx]:
                continue
            consumed[first_idx] = True
            loop_start, current_node = node_ids[first_idx]
            chain = [first]
            state = StitchState.AT_SEGMENT

            while state not in (StitchState.CLOSED, StitchState.DANGLING):
                if state is StitchState.AT_SEGMENT:
                    state = StitchState.CLOSED if current_node == loop_start else StitchState.SELECT_NEXT

                elif state is StitchState.SELECT_NEXT:
                    candidates: List[Tuple[int, BcClippedSegment, int]] = []
                    for idx, segment in enumerate(segments):
                        if consumed[idx]:
                            continue
                        start_node, end_node = node_ids[idx]
                        if start_node == current_node:
                            candidates.append((idx, segment, end_node))
                        elif self._allow_reversed and end_node == current_node:
                            candidates.append((idx, segment.reversed_segment(), start_node))
                    if not candidates:
                        state = StitchState.DANGLING
                    else:
                        choice = self.select_next(chain[-1], [segment for _, segment, _ in candidates])
                        state = StitchState.APPEND

                elif state is StitchState.APPEND:
                    idx, segment, current_node = candidates[choice]
                    consumed[idx] = True
                    chain.append(segment)
                    state = StitchState.AT_SEGMENT

            if state is StitchState.CLOSED:
                result.closed_loops.append(chain)
            else:
                logger.debug("Chain of %d segments dangles at %s", len(chain), chain[-1].end)
                result.open_chains.append(chain)

        return result

    @staticmethod
    def select_next(current: BcClippedSegment, candidates: Sequence[BcClippedSegment]) -> int:
        """
        Index of the candidate to continue _current_ with.

        The candidate with the smallest signed turning angle wins, so the walk
        always takes the rightmost turn; on equal angles the earlier candidate
        wins.

        Raises:
            ValueError: if there are no candidates.
        """
        if not candidates:
            raise ValueError("No candidates to continue with")
        best_idx = 0
        best_angle = current.angle_between(candidates[0])
        for idx in range(1, len(candidates)):
            angle = current.angle_between(candidates[idx])
            if angle < best_angle:
                best_idx, best_angle = idx, angle
        return best_idx


def stitch_closed_paths(
    segments: Sequence[BcClippedSegment],
    tolerance: float = DEFAULT_TOLERANCE,
    strict: bool = False,
) -> StitchResult:
    """
    Stitch segments into closed loops, reporting the chains that stay open.

    Args:
        segments: Segments of one or more cut paths.
        tolerance: Tolerance of the intersection matching.
        strict: Raise instead of warning when chains stay open.

    Raises:
        InconsistentSegmentSetError: in strict mode, if any chain stays open.
    """
    result = BcSegmentStitcher(tolerance).stitch(segments)
    if not result.is_consistent:
        message = (
            f"{len(result.open_chains)} open chains left after stitching {len(segments)} segments "
            f"into {len(result.closed_loops)} loops"
        )
        if strict:
            raise InconsistentSegmentSetError(message, result.open_chains, result.closed_loops)
        logger.warning("%s", message)
    return result

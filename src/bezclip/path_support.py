"""Supporting utilities for BcPath.

This module contains command metadata, validation helpers, and the
conversion of command sequences into cubic elements.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from numpy.typing import NDArray

from bezclip.bezier import BezierCurve
from bezclip.common import BcPathCmds
from bezclip.geom import GeomMath

###############################################################################
# Command registry
###############################################################################


# Points consumed per command
COMMAND_POINTS = {
    "M": 1,
    "L": 1,
    "Q": 2,
    "C": 3,
    "Z": 0,
}


###############################################################################
# BcSubpath
###############################################################################


@dataclass(frozen=True)
class BcSubpath:
    """Range of elements forming one subpath (from one MoveTo to the next).

    Attributes:
        start: Index of the first element.
        stop: Index after the last element.
        closed: Whether the subpath ends with Z.
    """

    start: int
    stop: int
    closed: bool

    def __contains__(self, element_index: int) -> bool:
        return self.start <= element_index < self.stop

    def __len__(self) -> int:
        return self.stop - self.start


###############################################################################
# PathValidator
###############################################################################


class PathValidator:
    """Validates path structure."""

    @staticmethod
    def validate(commands: List[BcPathCmds], points: NDArray[np.float64]) -> None:
        """Validate commands against points.

        Args:
            commands: List of path commands.
            points: Array of path points.

        Raises:
            ValueError: If the path structure is invalid.
        """
        if not commands:
            if points.shape[0] != 0:
                raise ValueError("Empty command list must have zero points")
            return

        for idx, cmd in enumerate(commands):
            if cmd not in COMMAND_POINTS:
                raise ValueError(f"Unsupported command '{cmd}' at position {idx}")

        segments = PathSplitter.split_commands_into_segments(commands)

        idx = 0
        for seg_idx, (seg_cmds, _) in enumerate(segments):
            if seg_cmds[0] != "M":
                raise ValueError(
                    f"Each segment must start with 'M' command (segment {seg_idx} starts with '{seg_cmds[0]}')"
                )

            # Z may only terminate a segment
            for cmd_idx, cmd in enumerate(seg_cmds):
                if cmd == "Z" and cmd_idx < len(seg_cmds) - 1:
                    raise ValueError(
                        f"'Z' must terminate a segment "
                        f"(found 'Z' at position {idx + cmd_idx} followed by '{seg_cmds[cmd_idx + 1]}')"
                    )

            idx += len(seg_cmds)

        total_expected = sum(point_count for _, point_count in segments)
        if points.shape[0] != total_expected:
            raise ValueError(
                f"Number of points ({points.shape[0]}) does not match commands (requires {total_expected} points)"
            )


###############################################################################
# PathSplitter
###############################################################################


class PathSplitter:
    """Utility class for splitting command sequences into subpaths and elements."""

    @staticmethod
    def split_commands_into_segments(commands: List[BcPathCmds]) -> List[Tuple[List[BcPathCmds], int]]:
        """Split commands into segments, returning list of (commands, point_count) tuples."""
        if not commands:
            return []

        segments: List[Tuple[List[BcPathCmds], int]] = []
        current_cmds: List[BcPathCmds] = []
        current_point_count = 0

        for cmd in commands:
            if cmd == "M":
                if current_cmds:
                    segments.append((current_cmds, current_point_count))
                current_cmds = ["M"]
                current_point_count = 1
            else:
                current_cmds.append(cmd)
                current_point_count += COMMAND_POINTS[cmd]

        if current_cmds:
            segments.append((current_cmds, current_point_count))

        return segments

    @staticmethod
    def build_elements(
        points: NDArray[np.float64], commands: List[BcPathCmds]
    ) -> Tuple[List[BezierCurve], List[BcSubpath]]:
        """Convert a validated command sequence into cubic elements.

        Every drawing command yields one cubic element. A Z whose subpath does
        not end at its start point adds a closing line element.

        Args:
            points: Array of path points, shape (n, 2)
            commands: List of path commands

        Returns:
            Tuple of the element curves and the subpath ranges.
        """
        curves: List[BezierCurve] = []
        subpaths: List[BcSubpath] = []
        point_idx = 0

        def take(count: int) -> List[Tuple[float, float]]:
            nonlocal point_idx
            taken = [(float(p[0]), float(p[1])) for p in points[point_idx : point_idx + count]]
            point_idx += count
            return taken

        for seg_cmds, _ in PathSplitter.split_commands_into_segments(commands):
            start_elem = len(curves)
            (start_point,) = take(1)
            current = start_point
            closed = False

            for cmd in seg_cmds[1:]:
                if cmd == "L":
                    (end,) = take(1)
                    curves.append(BezierCurve.from_line(current, end))
                    current = end
                elif cmd == "Q":
                    control, end = take(2)
                    curves.append(BezierCurve.from_quadratic(current, control, end))
                    current = end
                elif cmd == "C":
                    control1, control2, end = take(3)
                    curves.append(BezierCurve(current, control1, control2, end))
                    current = end
                elif cmd == "Z":
                    closed = True
                    if GeomMath.distance(current, start_point) > 0.0:
                        curves.append(BezierCurve.from_line(current, start_point))
                        current = start_point

            subpaths.append(BcSubpath(start_elem, len(curves), closed))

        return curves, subpaths

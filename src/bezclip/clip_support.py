"""Supporting configuration and record types for Bezier clipping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from bezclip.consts import (
    DEFAULT_TOLERANCE,
    MAX_CLIP_DEPTH,
    MAX_CLIP_ROUNDS,
    MAX_CLIP_WORK_ITEMS,
    MERGE_FACTOR,
    STALL_ROUNDS,
    STALL_SHRINK_RATIO,
)

###############################################################################
# ClipConfig
###############################################################################


@dataclass(frozen=True)
class ClipConfig:
    """Tunable parameters of the clipper.

    Attributes:
        tolerance: Parameter-space interval width at which a branch emits an
            intersection. Every other tolerance is derived from it, scaled by
            the coordinate extent of the curves.
        max_depth: Hard cap on bisections along one branch.
        stall_ratio: Combined shrink ratio at or above which a round counts as stalled.
        stall_rounds: Consecutive stalled rounds before bisecting.
        max_rounds: Rounds per work item before bisecting regardless of progress.
        max_work_items: Work items per curve pair before giving up on the rest.
        merge_factor: Intersections closer than tolerance * merge_factor are merged.
    """

    tolerance: float = DEFAULT_TOLERANCE
    max_depth: int = MAX_CLIP_DEPTH
    stall_ratio: float = STALL_SHRINK_RATIO
    stall_rounds: int = STALL_ROUNDS
    max_rounds: int = MAX_CLIP_ROUNDS
    max_work_items: int = MAX_CLIP_WORK_ITEMS
    merge_factor: float = MERGE_FACTOR

    def __post_init__(self):
        if not self.tolerance > 0.0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if not 0.0 < self.stall_ratio <= 1.0:
            raise ValueError(f"stall_ratio must be in (0, 1], got {self.stall_ratio}")
        if self.stall_rounds < 1:
            raise ValueError(f"stall_rounds must be at least 1, got {self.stall_rounds}")

    @property
    def merge_tolerance(self) -> float:
        """Parameter distance below which two intersections count as one."""
        return self.tolerance * self.merge_factor

    def spatial_slack(self, scale: float) -> float:
        """Slack added to fat-line strips and box tests for curves of the given extent."""
        return self.tolerance * self.tolerance * max(1.0, scale)

    def accept_distance(self, scale: float) -> float:
        """Maximum distance of two curve points accepted as an intersection."""
        return self.tolerance * max(1.0, scale)

    def to_dict(self) -> dict:
        """Convert the configuration to a dictionary for serialization."""
        return {
            "tolerance": self.tolerance,
            "max_depth": self.max_depth,
            "stall_ratio": self.stall_ratio,
            "stall_rounds": self.stall_rounds,
            "max_rounds": self.max_rounds,
            "max_work_items": self.max_work_items,
            "merge_factor": self.merge_factor,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ClipConfig:
        """Create a ClipConfig from a dictionary, missing keys take the defaults."""
        return cls(
            tolerance=data.get("tolerance", DEFAULT_TOLERANCE),
            max_depth=data.get("max_depth", MAX_CLIP_DEPTH),
            stall_ratio=data.get("stall_ratio", STALL_SHRINK_RATIO),
            stall_rounds=data.get("stall_rounds", STALL_ROUNDS),
            max_rounds=data.get("max_rounds", MAX_CLIP_ROUNDS),
            max_work_items=data.get("max_work_items", MAX_CLIP_WORK_ITEMS),
            merge_factor=data.get("merge_factor", MERGE_FACTOR),
        )


DEFAULT_CLIP_CONFIG = ClipConfig()


###############################################################################
# ClipWorkItem
###############################################################################


@dataclass(frozen=True)
class ClipWorkItem:
    """One pending branch of the clipping worklist.

    Attributes:
        interval1: Parameter interval (t_start, t_end) on the first curve.
        interval2: Parameter interval (t_start, t_end) on the second curve.
        depth: Number of bisections that led to this branch.
    """

    interval1: Tuple[float, float]
    interval2: Tuple[float, float]
    depth: int = 0

    @property
    def width1(self) -> float:
        """Width of the interval on the first curve."""
        return self.interval1[1] - self.interval1[0]

    @property
    def width2(self) -> float:
        """Width of the interval on the second curve."""
        return self.interval2[1] - self.interval2[0]

    def bisected(self) -> List[ClipWorkItem]:
        """The four combinations of both intervals split at their midpoints."""
        (a1, b1), (a2, b2) = self.interval1, self.interval2
        m1 = 0.5 * (a1 + b1)
        m2 = 0.5 * (a2 + b2)
        return [
            ClipWorkItem(half1, half2, self.depth + 1)
            for half1 in ((a1, m1), (m1, b1))
            for half2 in ((a2, m2), (m2, b2))
        ]


###############################################################################
# ClipResult
###############################################################################


@dataclass
class ClipResult:
    """Outcome of clipping one curve pair.

    Attributes:
        parameters: Determined (t1, t2) pairs, sorted by t1.
        undetermined: Branches given up on because of the depth or work cap.
        work_items: Number of worklist items processed.
    """

    parameters: List[Tuple[float, float]] = field(default_factory=list)
    undetermined: List[ClipWorkItem] = field(default_factory=list)
    work_items: int = 0

    @property
    def is_determined(self) -> bool:
        """True if no branch was left undecided."""
        return not self.undetermined

"""Central module containing constants for Bezier clipping and stitching"""

from __future__ import annotations

# Parameter-space width below which a clipping branch emits an intersection.
# Derived spatial tolerances scale with it, see ClipConfig.
DEFAULT_TOLERANCE: float = 1.0e-6

# Hard cap on the number of bisections along one clipping branch
MAX_CLIP_DEPTH: int = 64

# A clipping round whose combined interval shrink ratio stays at or above this
# value counts as stalled
STALL_SHRINK_RATIO: float = 0.8

# Consecutive stalled rounds before both curves are bisected
STALL_ROUNDS: int = 3

# Rounds per work item before it is bisected regardless of progress
MAX_CLIP_ROUNDS: int = 500

# Work items processed per curve pair before the rest is reported undetermined
MAX_CLIP_WORK_ITEMS: int = 4096

# Intersections closer than tolerance * MERGE_FACTOR on both curves are merged
MERGE_FACTOR: float = 100.0

# Samples used to seed closest-point projection on a curve
CLOSEST_POINT_SAMPLES: int = 16

# Newton iterations used to refine closest-point projection
CLOSEST_POINT_ITERATIONS: int = 8

# Steps used when polygonizing curves for areas and orientation
POLYGONIZE_STEPS_INTERNAL: int = 50

# Magic constant for approximating a quarter circle by a cubic Bezier
CIRCLE_KAPPA: float = 0.5522847498307936

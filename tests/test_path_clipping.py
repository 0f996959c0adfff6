"""Test module for bezclip.path_clipping

The tests are run using pytest.
"""

import logging

import numpy as np
import pytest

from bezclip.clip_support import ClipConfig
from bezclip.common import RecursionLimitExceededError
from bezclip.intersection import BcIntersectionPoint
from bezclip.path import BcPath
from bezclip.path_clipping import BcPathClipper, cut_path_at_intersections

CIRCLE_A = BcPath.circle((0.0, 0.0), 1.0)
CIRCLE_B = BcPath.circle((1.0, 0.0), 1.0)
HALF_SQRT3 = 0.8660254037844386


class TestFindPathIntersections:
    """Test intersections between whole paths."""

    def test_lens(self):
        """Test two overlapping unit circles."""
        points = BcPathClipper().find_path_intersections(CIRCLE_A, CIRCLE_B)

        assert len(points) == 2
        upper, lower = points
        assert (upper.element_index1, upper.element_index2) == (0, 1)
        assert (lower.element_index1, lower.element_index2) == (3, 2)
        assert np.allclose(upper.point, (0.5, HALF_SQRT3), atol=2e-3)
        assert np.allclose(lower.point, (0.5, -HALF_SQRT3), atol=2e-3)
        assert all(point.path_tag == 0 for point in points)

    def test_symmetry(self):
        """Test that swapping the paths swaps the roles."""
        clipper = BcPathClipper()
        forward = clipper.find_path_intersections(CIRCLE_A, CIRCLE_B)
        backward = clipper.find_path_intersections(CIRCLE_B, CIRCLE_A)

        assert len(forward) == len(backward)
        for point in forward:
            matches = [
                other
                for other in backward
                if other.element_index1 == point.element_index2 and other.element_index2 == point.element_index1
            ]
            assert len(matches) == 1
            assert matches[0].t1 == pytest.approx(point.t2, abs=1e-5)
            assert matches[0].t2 == pytest.approx(point.t1, abs=1e-5)

    def test_disjoint_paths(self):
        """Test paths far apart."""
        far_away = BcPath.circle((10.0, 10.0), 1.0)
        assert BcPathClipper().find_path_intersections(CIRCLE_A, far_away) == []

    def test_vertex_hits_are_found_once(self):
        """Test that intersections on shared element ends are not duplicated."""
        square = BcPath([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)], ["M", "L", "L", "L", "Z"])
        diagonal = BcPath([(-1.0, -1.0), (3.0, 3.0)], ["M", "L"])

        points = BcPathClipper().find_path_intersections(square, diagonal)

        assert len(points) == 2
        assert [(p.element_index1, p.t1) for p in points] == [(0, 0.0), (2, 0.0)]
        assert np.allclose(points[0].point, (0.0, 0.0), atol=1e-6)
        assert np.allclose(points[1].point, (2.0, 2.0), atol=1e-6)

    def test_undetermined_raises(self):
        """Test that coincident paths are reported instead of guessed."""
        clipper = BcPathClipper(ClipConfig(max_work_items=16))
        with pytest.raises(RecursionLimitExceededError) as exc_info:
            clipper.find_path_intersections(CIRCLE_A, CIRCLE_A)
        assert exc_info.value.undetermined


class TestCutPathAtIntersections:
    """Test cutting paths into clipped segments."""

    def test_closed_path_wraps(self):
        """Test that the last intersection connects to the first one."""
        points = BcPathClipper().find_path_intersections(CIRCLE_A, CIRCLE_B)
        segments = cut_path_at_intersections(CIRCLE_A, points)

        assert len(segments) == 2
        outer, inner = segments
        assert outer.start == points[0] and outer.end == points[1]
        assert inner.start == points[1] and inner.end == points[0]
        assert len(outer.curves) == 4
        assert len(inner.curves) == 2
        assert np.allclose(outer.start_point, points[0].point, atol=1e-9)
        assert np.allclose(inner.end_point, points[0].point, atol=1e-9)
        assert all(segment.full_path is CIRCLE_A for segment in segments)

    def test_open_path_keeps_inner_pieces(self):
        """Test that an open path yields only the pieces between intersections."""
        line = BcPath([(0.0, 0.0), (10.0, 0.0)], ["M", "L"])
        points = [BcIntersectionPoint(0, t, 0, 0.5) for t in (0.8, 0.2, 0.5)]

        segments = cut_path_at_intersections(line, points)

        assert len(segments) == 2
        assert np.allclose(segments[0].start_point, (2.0, 0.0))
        assert np.allclose(segments[0].end_point, (5.0, 0.0))
        assert np.allclose(segments[1].end_point, (8.0, 0.0))

    def test_duplicates_are_ignored(self):
        """Test that repeated intersections do not create zero-length segments."""
        line = BcPath([(0.0, 0.0), (10.0, 0.0)], ["M", "L"])
        points = [BcIntersectionPoint(0, t, 0, 0.5) for t in (0.2, 0.2 + 1e-9, 0.5)]
        assert len(cut_path_at_intersections(line, points)) == 1

    def test_fine_tolerance_keeps_close_intersections(self):
        """Test that a finer tolerance separates intersections closer than the default one."""
        line = BcPath([(0.0, 0.0), (1000.0, 0.0)], ["M", "L"])
        points = [BcIntersectionPoint(0, t, 0, 0.5) for t in (0.2, 0.2 + 5e-7, 0.5)]

        segments = cut_path_at_intersections(line, points, tolerance=1e-9)

        assert len(segments) == 2
        assert all(segment.tolerance == 1e-9 for segment in segments)
        assert np.allclose(segments[0].start_point, (200.0, 0.0))
        assert np.allclose(segments[0].end_point, (200.0005, 0.0))
        assert np.allclose(segments[1].end_point, (500.0, 0.0))

    def test_element_out_of_range_raises(self):
        """Test that an intersection beyond the last element is rejected."""
        line = BcPath([(0.0, 0.0), (10.0, 0.0)], ["M", "L"])
        points = [BcIntersectionPoint(0, 0.2, 0, 0.5), BcIntersectionPoint(3, 0.5, 0, 0.5)]
        with pytest.raises(IndexError):
            cut_path_at_intersections(line, points)

    def test_single_intersection_on_closed_path(self, caplog):
        """Test that a lone intersection is skipped with a warning."""
        with caplog.at_level(logging.WARNING, logger="bezclip.path_clipping"):
            segments = cut_path_at_intersections(CIRCLE_A, [BcIntersectionPoint(1, 0.5, 0, 0.5)])

        assert segments == []
        assert "single intersection" in caplog.text

    def test_end_of_element_snaps_to_next(self):
        """Test that t at an element end is moved to the next element."""
        points = [BcIntersectionPoint(0, 1.0, 0, 0.1), BcIntersectionPoint(2, 0.5, 0, 0.2)]
        segments = cut_path_at_intersections(CIRCLE_A, points)

        assert len(segments) == 2
        assert (segments[0].start.element_index1, segments[0].start.t1) == (1, 0.0)
        assert np.allclose(segments[0].start_point, (0.0, 1.0))


class TestClipPaths:
    """Test intersecting and cutting both paths."""

    def test_lens_segments(self):
        """Test the segments of both circles."""
        segments1, segments2 = BcPathClipper().clip_paths(CIRCLE_A, CIRCLE_B)

        assert len(segments1) == 2
        assert len(segments2) == 2
        assert all(segment.start.path_tag == 0 for segment in segments1)
        assert all(segment.start.path_tag == 1 for segment in segments2)
        assert all(segment.full_path is CIRCLE_B for segment in segments2)
        # Each intersection is shared between the paths
        assert segments1[0].start == segments2[0].start
        assert segments1[0].end == segments2[0].end

"""Test module for bezclip.segment

The tests are run using pytest.
"""

import math

import numpy as np
import pytest

from bezclip.bezier import BezierCurve
from bezclip.common import DegenerateInputError
from bezclip.intersection import BcIntersectionPoint
from bezclip.path import BcPath
from bezclip.segment import BcClippedSegment

CIRCLE = BcPath.circle((0.0, 0.0), 1.0)

P_A = BcIntersectionPoint(0, 0.0, 5, 0.5)
P_B = BcIntersectionPoint(1, 0.0, 6, 0.5)
P_C = BcIntersectionPoint(2, 0.0, 7, 0.5)


def _segment(start, end):
    curves = CIRCLE.curves_between(start.element_index1, start.t1, end.element_index1, end.t1)
    return BcClippedSegment.clipped_pair(start, end, curves, CIRCLE)


def _same(seg1, seg2):
    return (
        seg1.is_equal_to_segment(seg2)
        and seg1.curves == seg2.curves
        and seg1.is_reversed == seg2.is_reversed
        and seg1.is_flipped == seg2.is_flipped
        and seg1.start.path_tag == seg2.start.path_tag
    )


class TestBcClippedSegmentConstruction:
    """Test construction rules."""

    def test_clipped_pair(self):
        """Test a segment in the original direction."""
        segment = _segment(P_A, P_B)
        assert len(segment.curves) == 1
        assert not segment.is_reversed
        assert not segment.is_flipped
        assert segment.full_path is CIRCLE
        assert np.allclose(segment.start_point, (1.0, 0.0))
        assert np.allclose(segment.end_point, (0.0, 1.0))

    def test_zero_length_rejected(self):
        """Test that start and end must differ."""
        with pytest.raises(DegenerateInputError):
            BcClippedSegment(P_A, BcIntersectionPoint(0, 1e-9, 5, 0.5), CIRCLE.curves[:1], CIRCLE)

    def test_tolerance_decides_zero_length(self):
        """Test that endpoints closer than the default tolerance are distinct with a finer one."""
        close = BcIntersectionPoint(0, 5e-7, 5, 0.5)
        with pytest.raises(DegenerateInputError):
            BcClippedSegment.clipped_pair(P_A, close, CIRCLE.curves[:1], CIRCLE)

        segment = BcClippedSegment.clipped_pair(P_A, close, CIRCLE.curves[:1], CIRCLE, tolerance=1e-9)
        assert segment.tolerance == 1e-9
        assert segment.reversed_segment().tolerance == 1e-9
        assert segment.flipped_segment().tolerance == 1e-9

    def test_empty_geometry_rejected(self):
        """Test that a segment needs curves."""
        with pytest.raises(DegenerateInputError):
            BcClippedSegment(P_A, P_B, (), CIRCLE)

    def test_degenerate_error_is_value_error(self):
        """Test that degenerate input can be caught as ValueError."""
        with pytest.raises(ValueError):
            BcClippedSegment(P_A, P_A, CIRCLE.curves[:1], CIRCLE)


class TestBcClippedSegmentTransforms:
    """Test flipped_segment and reversed_segment."""

    def test_flipped_keeps_direction(self):
        """Test that flipping swaps index roles but not the traversal direction."""
        segment = _segment(P_A, P_B)
        flipped = segment.flipped_segment()

        assert flipped.is_flipped
        assert flipped.curves == segment.curves
        assert flipped.start.element_index1 == segment.start.element_index2
        assert flipped.start.element_index2 == segment.start.element_index1
        assert flipped.start == segment.start

    def test_reversed_swaps_endpoints(self):
        """Test that reversing swaps start and end and the geometry direction."""
        segment = _segment(P_A, P_C)
        reversed_segment = segment.reversed_segment()

        assert reversed_segment.is_reversed
        assert reversed_segment.start is segment.end
        assert reversed_segment.end is segment.start
        assert reversed_segment.start.element_index1 == segment.end.element_index1
        assert np.allclose(reversed_segment.start_point, segment.end_point)
        assert np.allclose(reversed_segment.end_point, segment.start_point)
        assert len(reversed_segment.curves) == 2

    def test_involutions(self):
        """Test that each transform applied twice restores the segment."""
        segment = _segment(P_A, P_C)
        assert _same(segment.flipped_segment().flipped_segment(), segment)
        assert _same(segment.reversed_segment().reversed_segment(), segment)

    def test_transforms_commute(self):
        """Test that the order of flipping and reversing does not matter."""
        segment = _segment(P_A, P_C)
        assert _same(segment.flipped_segment().reversed_segment(), segment.reversed_segment().flipped_segment())

    def test_equality_ignores_transforms(self):
        """Test is_equal_to_segment on transformed segments."""
        segment = _segment(P_A, P_B)
        assert segment.is_equal_to_segment(segment.reversed_segment())
        assert segment.is_equal_to_segment(segment.flipped_segment())
        assert segment.is_equal_to_segment(segment.reversed_segment().flipped_segment())
        assert not segment.is_equal_to_segment(_segment(P_B, P_C))

    def test_equality_needs_same_path(self):
        """Test that the source path identity is part of the equality."""
        segment = _segment(P_A, P_B)
        other_path = BcPath.circle((0.0, 0.0), 1.0)
        copy = BcClippedSegment(P_A, P_B, segment.curves, other_path)
        assert not segment.is_equal_to_segment(copy)


class TestBcClippedSegmentChaining:
    """Test prepending segments."""

    def test_prepend(self):
        """Test chaining segments that share an intersection."""
        first = _segment(P_A, P_B)
        second = _segment(P_B, P_C)

        assert first.can_be_prepended_to(second)
        assert first.prepend_to(second) == [first, second]

    def test_prepend_across_perspectives(self):
        """Test chaining when the shared intersection is seen from the other path."""
        first = _segment(P_A, P_B)
        other = BcClippedSegment(P_B.flipped(), P_C.flipped(), first.curves, CIRCLE)
        assert first.can_be_prepended_to(other)

    def test_prepend_mismatch_raises(self):
        """Test that unrelated segments cannot be chained."""
        first = _segment(P_A, P_B)
        third = _segment(P_C, P_A)

        assert not first.can_be_prepended_to(third)
        with pytest.raises(ValueError):
            first.prepend_to(third)


class TestBcClippedSegmentTangents:
    """Test tangent vectors and turning angles."""

    def test_vectors_on_circle(self):
        """Test unit tangents of a counterclockwise quarter circle."""
        segment = _segment(P_A, P_B)
        assert np.allclose(segment.start_vector(), (0.0, 1.0))
        assert np.allclose(segment.end_vector(), (-1.0, 0.0))

    def test_vector_falls_back_when_derivative_vanishes(self):
        """Test the fallback to the next control point difference."""
        curve = BezierCurve((0.0, 0.0), (0.0, 0.0), (1.0, 1.0), (2.0, 0.0))
        segment = BcClippedSegment(P_A, P_B, (curve,), CIRCLE)
        assert np.allclose(segment.start_vector(), (math.sqrt(0.5), math.sqrt(0.5)))

        back = BezierCurve((0.0, 0.0), (1.0, 1.0), (2.0, 0.0), (2.0, 0.0))
        segment = BcClippedSegment(P_A, P_B, (back,), CIRCLE)
        assert np.allclose(segment.end_vector(), (math.sqrt(0.5), -math.sqrt(0.5)))

    def test_point_segment_raises(self):
        """Test that a segment collapsed to a point has no direction."""
        point = BezierCurve((1.0, 1.0), (1.0, 1.0), (1.0, 1.0), (1.0, 1.0))
        segment = BcClippedSegment(P_A, P_B, (point,), CIRCLE)
        with pytest.raises(DegenerateInputError):
            segment.start_vector()
        with pytest.raises(DegenerateInputError):
            segment.end_vector()

    def test_angle_between(self):
        """Test the sign convention of the turning angle."""
        first = _segment(P_A, P_B)
        straight_on = _segment(P_B, P_C)
        up = BcClippedSegment(P_B, P_C, (BezierCurve.from_line((0.0, 1.0), (0.0, 2.0)),), CIRCLE)
        down = BcClippedSegment(P_B, P_C, (BezierCurve.from_line((0.0, 1.0), (0.0, 0.0)),), CIRCLE)

        assert first.angle_between(straight_on) == pytest.approx(0.0, abs=1e-9)
        assert first.angle_between(up) == pytest.approx(-math.pi / 2)
        assert first.angle_between(down) == pytest.approx(math.pi / 2)

    def test_polygonize(self):
        """Test that joints between curves appear once."""
        segment = _segment(P_A, P_C)
        polyline = segment.polygonize(10)
        assert polyline.shape == (21, 2)
        assert np.allclose(polyline[0], (1.0, 0.0))
        assert np.allclose(polyline[-1], (-1.0, 0.0))

"""Test module for bezclip.fatline

The tests are run using pytest.
"""

import numpy as np
import pytest

from bezclip.bezier import BezierCurve
from bezclip.fatline import BcFatLine


class TestBcFatLine:
    """Test class for BcFatLine functionality."""

    def test_horizontal_chord(self):
        """Test the fat line of a curve with horizontal chord."""
        curve = BezierCurve((0.0, 0.0), (1.0, 2.0), (3.0, -1.0), (4.0, 0.0))
        fat_line = BcFatLine.from_curve(curve)

        assert fat_line.is_normalized()
        assert fat_line.distance((2.0, 0.0)) == pytest.approx(0.0)
        assert fat_line.d_min == pytest.approx(-1.0)
        assert fat_line.d_max == pytest.approx(2.0)
        assert fat_line.width == pytest.approx(3.0)

    def test_bounds_include_zero(self):
        """Test that the base line lies within the strip even if all points are on one side."""
        curve = BezierCurve((0.0, 0.0), (1.0, 1.0), (2.0, 1.0), (3.0, 0.0))
        fat_line = BcFatLine.from_curve(curve)
        assert fat_line.d_min == 0.0
        assert fat_line.d_max == pytest.approx(1.0)

    def test_control_points_within_bounds(self):
        """Test that every control point's distance lies in [d_min, d_max]."""
        rng = np.random.default_rng(3)
        for _ in range(25):
            curve = BezierCurve.from_points(rng.uniform(-10.0, 10.0, size=(4, 2)))
            fat_line = BcFatLine.from_curve(curve)
            assert fat_line.is_normalized()
            for point in curve.points:
                assert fat_line.d_min - 1e-12 <= fat_line.distance(point) <= fat_line.d_max + 1e-12

    def test_curve_points_within_bounds(self):
        """Test that sampled curve points lie within the strip."""
        curve = BezierCurve((0.0, 0.0), (1.0, 3.0), (2.0, -2.0), (5.0, 1.0))
        fat_line = BcFatLine.from_curve(curve)
        for point in curve.polygonize(100):
            assert fat_line.d_min - 1e-12 <= fat_line.distance(point) <= fat_line.d_max + 1e-12

    def test_closed_curve_uses_control_spread(self):
        """Test the fallback line for a curve with p0 == p3."""
        curve = BezierCurve((0.0, 0.0), (2.0, 0.0), (2.0, 1.0), (0.0, 0.0))
        fat_line = BcFatLine.from_curve(curve)

        assert fat_line.is_normalized()
        assert np.isfinite([fat_line.a, fat_line.b, fat_line.c]).all()
        for point in curve.points:
            assert fat_line.d_min - 1e-12 <= fat_line.distance(point) <= fat_line.d_max + 1e-12

    def test_point_curve_uses_horizontal_line(self):
        """Test the fallback line for a curve collapsed to a point."""
        curve = BezierCurve((1.0, 2.0), (1.0, 2.0), (1.0, 2.0), (1.0, 2.0))
        fat_line = BcFatLine.from_curve(curve)

        assert (fat_line.a, fat_line.b) == (0.0, 1.0)
        assert fat_line.distance((5.0, 2.0)) == pytest.approx(0.0)
        assert fat_line.width == 0.0

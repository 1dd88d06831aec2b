"""Tests for incremental primitive fitters."""

import numpy as np
import pytest

from sketchfit.primitives.curves import Clothoid, PrimitiveType
from sketchfit.primitives.fitters import (
    ArcFitter, ClothoidFitter, LineFitter, make_fitter, supports_zero_curvature,
)


def _feed(fitter, points):
    for pt in points:
        fitter.add_point(pt)
    return fitter


class TestLineFitter:
    """Tests for line fitting."""

    def test_collinear_points(self, straight_points):
        """Test that collinear samples give an exact line."""
        line = _feed(LineFitter(), straight_points).get_primitive()

        assert line.length() == pytest.approx(4.0)
        np.testing.assert_allclose(line.start_pos(), [0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(line.end_pos(), [4.0, 0.0], atol=1e-12)

    def test_direction_follows_travel(self):
        """Test that the line points from the first sample to the last."""
        points = [[5.0, 5.0], [4.0, 4.0], [3.0, 3.0]]

        line = _feed(LineFitter(), points).get_primitive()

        assert np.dot(line.der(0.0), [-1.0, -1.0]) > 0

    def test_needs_two_points(self):
        """Test that a single sample is not enough."""
        fitter = LineFitter()
        fitter.add_point([0.0, 0.0])

        with pytest.raises(ValueError):
            fitter.get_primitive()


class TestArcFitter:
    """Tests for arc fitting."""

    def test_quarter_circle(self, quarter_circle_points):
        """Test curvature and sign on a counter-clockwise quarter circle."""
        arc = _feed(ArcFitter(), quarter_circle_points).get_primitive()

        assert arc.start_curvature() == pytest.approx(1.0 / 20.0, rel=1e-3)
        assert arc.length() == pytest.approx(20.0 * np.pi / 2, rel=1e-3)

    def test_clockwise_sign(self, quarter_circle_points):
        """Test that reversed travel flips the curvature sign."""
        arc = _feed(ArcFitter(), quarter_circle_points[::-1]).get_primitive()

        assert arc.start_curvature() < 0

    def test_returns_new_object(self, quarter_circle_points):
        """Test that every call hands back a primitive the caller owns."""
        fitter = _feed(ArcFitter(), quarter_circle_points)

        assert fitter.get_primitive() is not fitter.get_primitive()


class TestClothoidFitter:
    """Tests for clothoid fitting."""

    def test_recovers_clothoid(self):
        """Test that samples of a clothoid give back its curvature profile."""
        truth = Clothoid([3.0, 1.0, 0.4, 40.0, 0.01, 0.002])
        points = truth.pos(np.linspace(0.0, 40.0, 41))

        fit = _feed(ClothoidFitter(), points).get_primitive()

        assert fit.start_curvature() == pytest.approx(0.01, abs=1e-3)
        assert fit.end_curvature() == pytest.approx(0.09, abs=1e-3)
        np.testing.assert_allclose(fit.start_pos(), [3.0, 1.0], atol=0.05)

    def test_zero_curvature_at_start(self, s_curve_points):
        """Test pinning curvature to zero at the start."""
        fitter = _feed(ClothoidFitter(), s_curve_points)

        curve = fitter.get_curve_with_zero_curvature(0.0)

        assert curve.start_curvature() == 0.0
        assert curve.get_type() == PrimitiveType.CLOTHOID

    def test_zero_curvature_at_end(self, s_curve_points):
        """Test pinning curvature to zero at the far end of the samples."""
        fitter = _feed(ClothoidFitter(), s_curve_points)
        length = fitter.get_primitive().length()

        curve = fitter.get_curve_with_zero_curvature(length)

        assert curve.end_curvature() == pytest.approx(0.0, abs=1e-12)

    def test_needs_four_points(self):
        """Test that three samples are not enough for a clothoid."""
        fitter = _feed(ClothoidFitter(), [[0, 0], [1, 0], [2, 1]])

        with pytest.raises(ValueError):
            fitter.get_primitive()


class TestFactory:
    """Tests for fitter construction."""

    def test_make_fitter(self):
        """Test that each type tag maps to its fitter."""
        assert isinstance(make_fitter(PrimitiveType.LINE), LineFitter)
        assert isinstance(make_fitter(1), ArcFitter)
        assert isinstance(make_fitter(2), ClothoidFitter)

    def test_zero_curvature_capability(self):
        """Test that only clothoid fitters offer zero-curvature fits."""
        assert supports_zero_curvature(ClothoidFitter())
        assert not supports_zero_curvature(ArcFitter())
        assert not supports_zero_curvature(LineFitter())

    def test_rejects_bad_point(self):
        """Test that non-2D points are rejected."""
        with pytest.raises(ValueError):
            LineFitter().add_point([1.0, 2.0, 3.0])

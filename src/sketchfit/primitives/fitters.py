"""
Incremental per-type primitive fitters.

Each fitter is fed samples one at a time and can produce, at any point,
the best primitive of its type over everything fed so far. The fits work
in tangent-angle space: chord directions of the fed samples are fit by a
polynomial in arc length (constant for lines, linear for arcs, quadratic
for clothoids), and the start point is then the least-squares translation
that lines the primitive up with the samples.
"""

import numpy as np

from sketchfit.primitives.curves import (
    ANGLE, LENGTH, X, Y, PrimitiveType, make_curve,
)


class FitterBase:
    """Accumulates samples and fits a primitive of TYPE to them."""

    TYPE = None

    def __init__(self):
        self._points = []

    def add_point(self, pt):
        pt = np.asarray(pt, dtype=float).ravel()
        if pt.shape != (2,):
            raise ValueError(f"Expected a 2-D point, got shape {pt.shape}")
        self._points.append(pt)

    def num_points(self):
        return len(self._points)

    def _samples(self):
        """Fed points, their arc lengths and chord data."""
        if len(self._points) < self.TYPE.min_points:
            raise ValueError(
                f"{type(self).__name__} needs {self.TYPE.min_points} points, has {len(self._points)}"
            )
        pts = np.array(self._points)
        chords = np.diff(pts, axis=0)
        chord_lengths = np.linalg.norm(chords, axis=1)
        arc = np.concatenate([[0.0], np.cumsum(chord_lengths)])
        angles = np.unwrap(np.arctan2(chords[:, 1], chords[:, 0]))
        mids = 0.5 * (arc[:-1] + arc[1:])
        return pts, arc, angles, mids, chord_lengths

    def get_primitive(self):
        """Best fit over all fed points; the caller owns the result."""
        pts, arc, angles, mids, weights = self._samples()
        total = arc[-1]
        if total <= 0.0:
            return self._place(pts, arc, self._degenerate_shape())
        return self._place(pts, arc, self._fit_shape(pts, arc, angles, mids, weights, total))

    def _degenerate_shape(self):
        return np.zeros(int(self.TYPE) + 4)

    def _fit_shape(self, pts, arc, angles, mids, weights, total):
        raise NotImplementedError

    def _place(self, pts, arc, params):
        """Fix the start point by least-squares translation."""
        params[X] = 0.0
        params[Y] = 0.0
        curve = make_curve(self.TYPE, params)
        offset = np.mean(pts - curve.pos(arc), axis=0)
        params[X], params[Y] = offset
        curve.set_params(params)
        return curve


def _weighted_polyfit(columns, values, weights):
    """Weighted linear least squares; returns the coefficient vector."""
    a = np.column_stack(columns)
    if np.sum(weights) > 0:
        sw = np.sqrt(weights)
    else:
        sw = np.ones_like(weights)
    coeffs, _, _, _ = np.linalg.lstsq(a * sw[:, None], values * sw, rcond=None)
    return coeffs


class LineFitter(FitterBase):
    """Total least-squares line through the fed points."""

    TYPE = PrimitiveType.LINE

    def _fit_shape(self, pts, arc, angles, mids, weights, total):
        centered = pts - pts.mean(axis=0)
        _, _, vt = np.linalg.svd(centered, full_matrices=False)
        direction = vt[0]
        # orient along the direction of travel
        if np.dot(direction, pts[-1] - pts[0]) < 0:
            direction = -direction
        params = np.zeros(4)
        params[ANGLE] = np.arctan2(direction[1], direction[0])
        params[LENGTH] = total
        return params


class ArcFitter(FitterBase):
    """Arc whose tangent angle is linear in arc length."""

    TYPE = PrimitiveType.ARC

    def _fit_shape(self, pts, arc, angles, mids, weights, total):
        t = mids / total
        c0, c1 = _weighted_polyfit([np.ones_like(t), t], angles, weights)
        return np.array([0.0, 0.0, c0, total, c1 / total])


class ClothoidFitter(FitterBase):
    """Clothoid whose tangent angle is quadratic in arc length."""

    TYPE = PrimitiveType.CLOTHOID

    def _fit_shape(self, pts, arc, angles, mids, weights, total):
        t = mids / total
        c0, c1, c2 = _weighted_polyfit([np.ones_like(t), t, t * t], angles, weights)
        return np.array([0.0, 0.0, c0, total, c1 / total, 2.0 * c2 / (total * total)])

    def get_curve_with_zero_curvature(self, offset):
        """
        Clothoid fit constrained to zero curvature at arc length offset.

        With curvature k(s) = dk * (s - offset) the tangent angle is
        theta0 + dk * (s^2 / 2 - offset * s), which is again linear in
        the unknowns.
        """
        pts, arc, angles, mids, weights = self._samples()
        total = arc[-1]
        if total <= 0.0:
            return self._place(pts, arc, self._degenerate_shape())
        shape = (mids * mids * 0.5 - offset * mids) / (total * total)
        c0, c1 = _weighted_polyfit([np.ones_like(mids), shape], angles, weights)
        dk = c1 / (total * total)
        params = np.array([0.0, 0.0, c0, total, -dk * offset, dk])
        return self._place(pts, arc, params)


_FITTER_CLASSES = {
    PrimitiveType.LINE: LineFitter,
    PrimitiveType.ARC: ArcFitter,
    PrimitiveType.CLOTHOID: ClothoidFitter,
}


def make_fitter(primitive_type):
    """Fresh fitter for a primitive type."""
    return _FITTER_CLASSES[PrimitiveType(primitive_type)]()


def supports_zero_curvature(fitter):
    """Only clothoid fitters can pin curvature to zero at an offset."""
    return fitter.TYPE == PrimitiveType.CLOTHOID

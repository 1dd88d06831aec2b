"""
Fit error between a primitive and a span of polyline samples.

Samples are matched to the primitive by normalized arc length: a sample
at fraction f of the span's polyline length is compared with the point
at fraction f of the primitive's length.
"""

import numpy as np
from scipy.optimize import approx_fprime

from sketchfit.primitives.curves import LENGTH

_FD_STEP = np.sqrt(np.finfo(float).eps)


class ErrorComputer:
    """Squared-distance error of primitives against one polyline."""

    def __init__(self, polyline):
        self._polyline = polyline

    @property
    def polyline(self):
        return self._polyline

    def _span(self, start_idx, end_idx):
        indices, offsets = self._polyline.sample_params(start_idx, end_idx)
        return self._polyline.pts()[indices], offsets

    @staticmethod
    def _fractions(offsets):
        span_length = offsets[-1]
        if span_length > 0.0:
            return offsets / span_length
        return np.zeros_like(offsets)

    @classmethod
    def _residuals(cls, curve, targets, offsets):
        params = cls._fractions(offsets) * curve.length()
        return (curve.pos(params) - targets).ravel()

    def compute_error(self, curve, start_idx, end_idx):
        """Sum of squared sample distances over start..end (inclusive)."""
        targets, offsets = self._span(start_idx, end_idx)
        residuals = self._residuals(curve, targets, offsets)
        return float(np.dot(residuals, residuals))

    def compute_error_vector(self, curve, start_idx, end_idx, with_jacobian=True):
        """
        Residual vector over the span, interleaved x/y per sample.

        Returns (residuals, jacobian); the jacobian has one column per
        curve parameter and is None when with_jacobian is False. Lines
        and arcs get a closed-form jacobian, clothoids a forward
        difference.
        """
        targets, offsets = self._span(start_idx, end_idx)
        residuals = self._residuals(curve, targets, offsets)
        if not with_jacobian:
            return residuals, None

        fractions = self._fractions(offsets)
        at = fractions * curve.length()
        pos_jacobian = curve.param_jacobian(at)
        if pos_jacobian is not None:
            jacobian = pos_jacobian.reshape(len(residuals), -1)
            # sample positions slide along the curve as its length changes
            jacobian[:, LENGTH] += (curve.der(at) * fractions[:, None]).ravel()
            return residuals, jacobian

        params = curve.params()
        shifted = curve.copy()

        def residuals_at(x):
            shifted.set_params(x)
            return self._residuals(shifted, targets, offsets)

        step = _FD_STEP * np.maximum(1.0, np.abs(params))
        jacobian = approx_fprime(params, residuals_at, step)
        return residuals, np.asarray(jacobian).reshape(len(residuals), len(params))

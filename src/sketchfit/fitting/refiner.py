"""
Constrained refinement of a single fitted primitive.

Clothoids are optimized in (length, start curvature, end curvature)
instead of the raw (length, start curvature, curvature rate): the rate
scales with 1/length, and mixing the two makes the normal equations
badly conditioned. Lines and arcs pass through unchanged.
"""

import numpy as np

from sketchfit.fitting.solver import BoxConstraint, LSProblem, LSSolver
from sketchfit.primitives.curves import (
    CURVATURE, DCURVATURE, LENGTH, PrimitiveType,
)

MIN_LENGTH_FRACTION = 0.5


class OneCurveProblem(LSProblem):
    """Least-squares fit of one primitive to one span of samples."""

    def __init__(self, curve, start_idx, end_idx, error_computer):
        self._curve = curve
        self._start_idx = start_idx
        self._end_idx = end_idx
        self._error_computer = error_computer

    @property
    def curve(self):
        return self._curve

    def _is_clothoid(self):
        return self._curve.get_type() == PrimitiveType.CLOTHOID

    def error(self, x):
        self.set_params(x)
        return self._error_computer.compute_error(self._curve, self._start_idx, self._end_idx)

    def residuals(self, x):
        self.set_params(x)
        residuals, _ = self._error_computer.compute_error_vector(
            self._curve, self._start_idx, self._end_idx, with_jacobian=False,
        )
        return residuals

    def eval(self, x):
        self.set_params(x)
        residuals, jacobian = self._error_computer.compute_error_vector(
            self._curve, self._start_idx, self._end_idx,
        )
        if self._is_clothoid():
            inv_length = 1.0 / x[LENGTH]
            jacobian[:, DCURVATURE] *= inv_length
            jacobian[:, CURVATURE] -= jacobian[:, DCURVATURE]
            dcurvature = (x[DCURVATURE] - x[CURVATURE]) * inv_length
            jacobian[:, LENGTH] -= jacobian[:, DCURVATURE] * dcurvature
        return residuals, jacobian

    def params(self):
        out = self._curve.params()
        if self._is_clothoid():
            out[DCURVATURE] = out[CURVATURE] + out[LENGTH] * out[DCURVATURE]
        return out

    def set_params(self, x):
        if not self._is_clothoid():
            self._curve.set_params(x)
            return
        raw = np.array(x, dtype=float)
        raw[DCURVATURE] = (raw[DCURVATURE] - raw[CURVATURE]) / raw[LENGTH]
        self._curve.set_params(raw)


def build_constraints(curve, start_curv_sign, end_curv_sign, inflection_accounting):
    """
    Box constraints for refining `curve`, in the reparametrized slots.

    Length may shrink to half its fitted value at most. With inflection
    accounting, an arc or clothoid keeps the sign of its start curvature,
    and a clothoid also keeps the sign of its end curvature.
    """
    constraints = [BoxConstraint(LENGTH, curve.length() * MIN_LENGTH_FRACTION, 1)]

    if inflection_accounting:
        curve_type = curve.get_type()
        if curve_type >= PrimitiveType.ARC:
            constraints.append(BoxConstraint(CURVATURE, 0.0, start_curv_sign))
        if curve_type == PrimitiveType.CLOTHOID:
            constraints.append(BoxConstraint(DCURVATURE, 0.0, end_curv_sign))

    return constraints


def adjust_primitive(curve, start_idx, end_idx, start_curv_sign, end_curv_sign,
                     error_computer, damping, inflection_accounting):
    """
    One damped, box-constrained correction step, applied to curve in place.

    Returns the curve for convenience. An unhelpful step leaves the
    parameters where the solver left them; callers re-measure error.
    """
    constraints = build_constraints(curve, start_curv_sign, end_curv_sign, inflection_accounting)

    problem = OneCurveProblem(curve, start_idx, end_idx, error_computer)
    solver = LSSolver(problem, constraints)
    solver.set_default_damping(damping)
    solver.set_max_iter(1)
    problem.set_params(solver.solve(problem.params()))
    return curve

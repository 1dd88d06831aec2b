"""
Damped least-squares solver with box constraints.

Problems expose residuals and a jacobian over a flat parameter vector;
the solve itself is scipy's trust-region reflective method with one-sided
bounds built from the constraint list. Trial steps are only accepted when
they lower the error, so a short iteration budget never makes a fit worse.
Numeric trouble never raises; the solver returns the best point it has.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
from scipy.optimize import least_squares

from sketchfit.tracer import get_tracer


class LSProblem(ABC):
    """A nonlinear least-squares problem over a flat parameter vector."""

    @abstractmethod
    def error(self, x):
        """Sum of squared residuals at x."""

    @abstractmethod
    def eval(self, x):
        """Return (residuals, jacobian) at x."""

    @abstractmethod
    def params(self):
        """Current parameter vector."""

    @abstractmethod
    def set_params(self, x):
        """Adopt x as the current parameter vector."""

    def residuals(self, x):
        """Residual vector at x; override when it is cheaper than eval()."""
        return self.eval(x)[0]


@dataclass(frozen=True)
class BoxConstraint:
    """x[index] must stay on the `sign` side of `value` (inclusive)."""
    index: int
    value: float
    sign: int

    def satisfied(self, x):
        return self.sign * (x[self.index] - self.value) >= 0.0


class LSSolver:
    """Trust-region least squares with one-sided bounds per parameter."""

    def __init__(self, problem, constraints=(), damping=1e-3, max_iter=50):
        self._problem = problem
        self._constraints = list(constraints)
        self._default_damping = damping
        self._max_iter = max_iter

    def set_default_damping(self, damping):
        self._default_damping = damping

    def set_max_iter(self, max_iter):
        self._max_iter = max_iter

    @property
    def constraints(self):
        return list(self._constraints)

    def bounds(self, num_params):
        """(lower, upper) arrays for least_squares."""
        lower = np.full(num_params, -np.inf)
        upper = np.full(num_params, np.inf)
        for constraint in self._constraints:
            if constraint.sign > 0:
                lower[constraint.index] = max(lower[constraint.index], constraint.value)
            elif constraint.sign < 0:
                upper[constraint.index] = min(upper[constraint.index], constraint.value)
        return lower, upper

    def project(self, x):
        """Clamp every violated constraint onto its bound."""
        x = np.array(x, dtype=float)
        for constraint in self._constraints:
            if not constraint.satisfied(x):
                x[constraint.index] = constraint.value
        return x

    def solve(self, x0):
        """Run at most max_iter trust-region steps from x0 and return the result."""
        tracer = get_tracer()

        x = self.project(x0)
        if self._max_iter < 1:
            return x

        lower, upper = self.bounds(len(x))
        if np.any(lower >= upper):
            tracer.event("Solver bounds leave no feasible interior", level="DEBUG")
            return x
        if not np.all(np.isfinite(self._problem.residuals(x))):
            tracer.event("Solver start point has non-finite residuals", level="DEBUG")
            return x

        try:
            result = least_squares(
                self._problem.residuals,
                x,
                jac=lambda p: self._problem.eval(p)[1],
                bounds=(lower, upper),
                method="trf",
                tr_solver="lsmr",
                tr_options={"damp": self._default_damping},
                max_nfev=self._max_iter + 1,
            )
        except (ValueError, np.linalg.LinAlgError) as e:
            tracer.event(f"Solver failed: {e}", level="DEBUG")
            return x

        if not np.all(np.isfinite(result.x)):
            return x
        return self.project(result.x)

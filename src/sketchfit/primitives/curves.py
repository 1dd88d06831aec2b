"""
Curve primitives: lines, circular arcs and clothoids.

All three share one parameter layout. Slots X, Y and ANGLE give the start
point and start tangent direction, LENGTH the arc length. Arcs add a
CURVATURE slot and clothoids a DCURVATURE slot (curvature change per unit
length). Curvature is signed: positive turns counter-clockwise.
"""

from enum import IntEnum

import numpy as np


class PrimitiveType(IntEnum):
    """Type tags; the value is also the index into per-type tables."""
    LINE = 0
    ARC = 1
    CLOTHOID = 2

    @property
    def min_points(self):
        """Points needed before a fit of this type is meaningful."""
        return int(self) + 2


# Parameter slots
X = 0
Y = 1
ANGLE = 2
LENGTH = 3
CURVATURE = 4
DCURVATURE = 5

# Gauss-Legendre rule used per panel when integrating clothoid tangents
_GL_NODES, _GL_WEIGHTS = np.polynomial.legendre.leggauss(8)
_MAX_TURN_PER_PANEL = 0.5
_MAX_PANELS = 256


class CurvePrimitive:
    """Base class for all primitives; subclasses set TYPE and NUM_PARAMS."""

    TYPE = None
    NUM_PARAMS = 0

    def __init__(self, params):
        params = np.asarray(params, dtype=float).ravel()
        if len(params) != self.NUM_PARAMS:
            raise ValueError(
                f"{type(self).__name__} takes {self.NUM_PARAMS} parameters, got {len(params)}"
            )
        self._params = params.copy()

    def __repr__(self):
        values = ", ".join(f"{p:.6g}" for p in self._params)
        return f"{type(self).__name__}([{values}])"

    def get_type(self):
        return self.TYPE

    def params(self):
        return self._params.copy()

    def set_params(self, params):
        params = np.asarray(params, dtype=float).ravel()
        if len(params) != self.NUM_PARAMS:
            raise ValueError(
                f"{type(self).__name__} takes {self.NUM_PARAMS} parameters, got {len(params)}"
            )
        self._params = params.copy()

    def copy(self):
        return type(self)(self._params)

    def length(self):
        return float(self._params[LENGTH])

    def start_pos(self):
        return self._params[[X, Y]].copy()

    def end_pos(self):
        return self.pos(self.length())

    def start_curvature(self):
        return float(self.curvature(0.0))

    def end_curvature(self):
        return float(self.curvature(self.length()))

    def curvature(self, s):
        return 0.0 * np.asarray(s, dtype=float)

    def angle(self, s):
        """Tangent direction angle at arc length s."""
        s = np.asarray(s, dtype=float)
        return self._params[ANGLE] + self._turn(s)

    def _turn(self, s):
        return 0.0 * s

    def der(self, s):
        """Unit tangent at arc length s."""
        theta = self.angle(s)
        return np.stack([np.cos(theta), np.sin(theta)], axis=-1)

    def pos(self, s):
        """Position at arc length s (scalar or array)."""
        raise NotImplementedError

    def param_jacobian(self, s):
        """
        d pos(s) / d params at fixed s, shaped s.shape + (2, NUM_PARAMS).

        None when the primitive has no closed form; callers then difference.
        """
        return None

    def _base_jacobian(self, s):
        s = np.asarray(s, dtype=float)
        jac = np.zeros(s.shape + (2, self.NUM_PARAMS))
        jac[..., 0, X] = 1.0
        jac[..., 1, Y] = 1.0
        offset = self.pos(s) - self.start_pos()
        jac[..., 0, ANGLE] = -offset[..., 1]
        jac[..., 1, ANGLE] = offset[..., 0]
        return jac

    def sample(self, num=32):
        """Evenly spaced points along the primitive, endpoints included."""
        return self.pos(np.linspace(0.0, self.length(), max(int(num), 2)))


class Line(CurvePrimitive):
    """Straight segment."""

    TYPE = PrimitiveType.LINE
    NUM_PARAMS = 4

    def pos(self, s):
        s = np.asarray(s, dtype=float)
        theta = self._params[ANGLE]
        direction = np.array([np.cos(theta), np.sin(theta)])
        return self.start_pos() + s[..., None] * direction

    def param_jacobian(self, s):
        # rotating the start tangent swings each point about the start
        return self._base_jacobian(s)


class Arc(CurvePrimitive):
    """Circular arc; zero curvature degenerates to a straight segment."""

    TYPE = PrimitiveType.ARC
    NUM_PARAMS = 5

    def curvature(self, s):
        return self._params[CURVATURE] + 0.0 * np.asarray(s, dtype=float)

    def _turn(self, s):
        return self._params[CURVATURE] * s

    def pos(self, s):
        s = np.asarray(s, dtype=float)
        k = self._params[CURVATURE]
        half_turn = 0.5 * k * s
        # chord length is s * sin(ks/2) / (ks/2); np.sinc carries a factor of pi
        chord = s * np.sinc(half_turn / np.pi)
        mid_angle = self._params[ANGLE] + half_turn
        offset = np.stack([chord * np.cos(mid_angle), chord * np.sin(mid_angle)], axis=-1)
        return self.start_pos() + offset

    def param_jacobian(self, s):
        s = np.asarray(s, dtype=float)
        jac = self._base_jacobian(s)
        k = self._params[CURVATURE]
        theta = self._params[ANGLE]

        # with z = offset as a complex number, dz/dk = (s e^{i phi} - z) / k;
        # near ks = 0 that cancels, so use its Taylor series there
        offset = self.pos(s) - self.start_pos()
        z = offset[..., 0] + 1j * offset[..., 1]
        safe_k = k if k != 0.0 else 1.0
        closed = (s * np.exp(1j * (theta + k * s)) - z) / safe_k
        series = 1j * np.exp(1j * theta) * (
            s ** 2 / 2.0 + 1j * k * s ** 3 / 3.0 - k * k * s ** 4 / 8.0
        )
        dz = np.where(np.abs(k * s) < 1e-4, series, closed)
        jac[..., 0, CURVATURE] = dz.real
        jac[..., 1, CURVATURE] = dz.imag
        return jac


class Clothoid(CurvePrimitive):
    """Euler spiral: curvature changes linearly with arc length."""

    TYPE = PrimitiveType.CLOTHOID
    NUM_PARAMS = 6

    def curvature(self, s):
        s = np.asarray(s, dtype=float)
        return self._params[CURVATURE] + self._params[DCURVATURE] * s

    def _turn(self, s):
        return self._params[CURVATURE] * s + 0.5 * self._params[DCURVATURE] * s * s

    def pos(self, s):
        s = np.asarray(s, dtype=float)
        flat = np.atleast_1d(s).ravel()
        if flat.size == 0:
            return np.zeros(s.shape + (2,))

        s_max = float(np.max(np.abs(flat)))
        k0 = self._params[CURVATURE]
        k1 = k0 + self._params[DCURVATURE] * s_max
        k_min = k0 - self._params[DCURVATURE] * s_max
        max_turn = max(abs(k0), abs(k1), abs(k_min)) * s_max
        panels = min(1 + int(max_turn / _MAX_TURN_PER_PANEL), _MAX_PANELS)

        # nodes for each requested s: panel j covers [s*j/P, s*(j+1)/P]
        unit = (np.arange(panels)[:, None] + 0.5 * (_GL_NODES[None, :] + 1.0)) / panels
        unit = unit.ravel()
        weights = np.tile(_GL_WEIGHTS, panels) / (2.0 * panels)

        u = flat[:, None] * unit[None, :]
        theta = self.angle(u)
        dx = (np.cos(theta) * weights).sum(axis=1) * flat
        dy = (np.sin(theta) * weights).sum(axis=1) * flat

        out = self.start_pos() + np.stack([dx, dy], axis=-1)
        return out.reshape(s.shape + (2,))


_CURVE_CLASSES = {
    PrimitiveType.LINE: Line,
    PrimitiveType.ARC: Arc,
    PrimitiveType.CLOTHOID: Clothoid,
}


def make_curve(primitive_type, params):
    """Build a primitive of the given type from a parameter vector."""
    return _CURVE_CLASSES[PrimitiveType(primitive_type)](params)

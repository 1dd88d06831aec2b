"""
Named primitive-fitting strategies.

The registry is an explicit dict filled at import time; strategies are
looked up by the name stored in FittingConfig.algorithm.
"""

from sketchfit.fitting.candidates import generate_candidates


class PrimitiveFittingStrategy:
    """Candidate generation with or without constrained refinement."""

    def __init__(self, adjust):
        self.adjust = adjust

    @property
    def name(self):
        return "Adjust" if self.adjust else "Default"

    def run(self, polyline, corners, config, error_computer=None, drawer=None, workers=None):
        return generate_candidates(
            polyline, corners, config,
            error_computer=error_computer,
            adjust=self.adjust,
            drawer=drawer,
            workers=workers,
        )


_REGISTRY = {}


def register_primitive_fitter(strategy):
    """Add a strategy under its name, replacing any previous one."""
    _REGISTRY[strategy.name] = strategy
    return strategy


def get_primitive_fitter(name):
    """Look up a strategy; unknown names raise KeyError."""
    try:
        return _REGISTRY[name]
    except KeyError:
        raise KeyError(f"Unknown primitive fitter {name!r}; available: {available_fitters()}") from None


def available_fitters():
    return sorted(_REGISTRY)


register_primitive_fitter(PrimitiveFittingStrategy(adjust=False))
register_primitive_fitter(PrimitiveFittingStrategy(adjust=True))

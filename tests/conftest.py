"""Pytest fixtures for sketchfit tests."""

import json
import os
import tempfile

import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from sketchfit.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def fitting_config():
    """Create default fitting configuration."""
    from sketchfit.config import FittingConfig
    return FittingConfig()


@pytest.fixture
def straight_points():
    """Five collinear, evenly spaced samples along the x axis."""
    return np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0], [4.0, 0.0]])


@pytest.fixture
def quarter_circle_points():
    """Thirty samples on a counter-clockwise quarter circle of radius 20."""
    t = np.linspace(0, np.pi / 2, 30)
    radius = 20.0
    return np.column_stack([radius * np.cos(t), radius * np.sin(t)])


@pytest.fixture
def s_curve_points():
    """Samples of a clothoid whose curvature changes sign halfway."""
    from sketchfit.primitives.curves import Clothoid
    curve = Clothoid([0.0, 0.0, 0.3, 14.0, -0.06, 0.06 / 7.0])
    return curve.pos(np.linspace(0.0, 14.0, 15))


@pytest.fixture
def circle_loop_points():
    """Twelve samples around a circle of radius 10, without repeating the start."""
    t = np.linspace(0, 2 * np.pi, 12, endpoint=False)
    return np.column_stack([10 * np.cos(t), 10 * np.sin(t)])


@pytest.fixture
def stroke_file(temp_dir):
    """A JSON stroke file holding a gentle open arc."""
    t = np.linspace(0, np.pi / 3, 12)
    points = np.column_stack([30 * np.cos(t), 30 * np.sin(t)])
    path = os.path.join(temp_dir, "stroke.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"points": points.tolist(), "closed": False}, f)
    return path

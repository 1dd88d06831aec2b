"""
Stroke loading utilities for sketchfit.

A stroke file is JSON: either a bare list of [x, y] points, or an object
with "points" and an optional "closed" flag.
"""

import json
import os

import numpy as np

from sketchfit.tracer import get_tracer, trace


@trace(label="load_stroke")
def load_stroke(path):
    """
    Load a stroke from disk.

    Returns a tuple of (points, closed) where points is an (N, 2) array.

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the file does not describe a stroke.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Stroke file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    points, closed = parse_stroke(data)

    tracer.event(f"Loaded stroke: {len(points)} points, closed={closed}")

    return points, closed


def parse_stroke(data):
    """Validate decoded JSON stroke data; returns (points, closed)."""
    if isinstance(data, dict):
        if "points" not in data:
            raise ValueError("Stroke object has no 'points' entry")
        raw_points = data["points"]
        closed = bool(data.get("closed", False))
    elif isinstance(data, list):
        raw_points = data
        closed = False
    else:
        raise ValueError(f"Unsupported stroke data of type {type(data).__name__}")

    try:
        points = np.asarray(raw_points, dtype=float)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Stroke points are not numeric: {e}") from e

    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"Stroke points must be [x, y] pairs, got shape {points.shape}")
    if len(points) < 2:
        raise ValueError(f"A stroke needs at least 2 points, got {len(points)}")
    if not np.all(np.isfinite(points)):
        raise ValueError("Stroke points must be finite")

    return points, closed

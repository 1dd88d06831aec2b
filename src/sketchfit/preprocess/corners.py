"""
Corner flags for resampled strokes.

A sample is a corner when the stroke turns sharply there. Corners are
hard span boundaries for candidate generation.
"""

import numpy as np

from sketchfit.tracer import get_tracer, trace


def turning_angles(points, closed=False):
    """
    Absolute turning angle at each sample, in radians.

    Open endpoints have no turning angle and report 0.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    n = len(points)
    angles = np.zeros(n)
    if n < 3:
        return angles

    if closed:
        incoming = points - np.roll(points, 1, axis=0)
        outgoing = np.roll(points, -1, axis=0) - points
        interior = np.arange(n)
    else:
        incoming = points[1:-1] - points[:-2]
        outgoing = points[2:] - points[1:-1]
        interior = np.arange(1, n - 1)

    cross = incoming[:, 0] * outgoing[:, 1] - incoming[:, 1] * outgoing[:, 0]
    dot = np.sum(incoming * outgoing, axis=1)
    angles[interior] = np.abs(np.arctan2(cross, dot))
    return angles


@trace(label="detect_corners")
def detect_corners(points, closed=False, angle_threshold_deg=60.0):
    """
    Flag samples whose turning angle exceeds the threshold.

    Returns a bool array with one flag per sample.
    """
    tracer = get_tracer()

    angles = turning_angles(points, closed)
    corners = angles > np.deg2rad(angle_threshold_deg)

    tracer.event(f"Detected {int(corners.sum())} corners in {len(corners)} samples")

    return corners

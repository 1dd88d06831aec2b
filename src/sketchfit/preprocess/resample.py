"""
Stroke cleanup and uniform arc-length resampling.

The candidate search assumes roughly uniform sample spacing, so raw
input strokes are deduplicated and resampled before fitting.
"""

import numpy as np

from sketchfit.tracer import get_tracer, trace


def remove_duplicate_points(points, tolerance=1e-9, closed=False):
    """
    Remove consecutive duplicate or near-duplicate points.

    For closed strokes a final point repeating the first is dropped too,
    since the closing edge is implied.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(points) <= 1:
        return points

    keep = [0]
    for i in range(1, len(points)):
        if np.linalg.norm(points[i] - points[keep[-1]]) > tolerance:
            keep.append(i)
    result = points[keep]

    if closed and len(result) > 1 and np.linalg.norm(result[-1] - result[0]) <= tolerance:
        result = result[:-1]

    return result


@trace(label="resample_polyline")
def resample_polyline(points, spacing, closed=False):
    """
    Resample a stroke to approximately uniform point spacing.

    Open strokes keep both endpoints. Closed strokes are resampled around
    the whole loop, closing edge included, without repeating the start.
    """
    tracer = get_tracer()

    points = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(points) <= 1:
        return points.copy()

    path = np.vstack([points, points[:1]]) if closed else points
    diffs = np.diff(path, axis=0)
    segment_lengths = np.linalg.norm(diffs, axis=1)
    cumulative = np.concatenate([[0.0], np.cumsum(segment_lengths)])
    total_length = cumulative[-1]

    if total_length == 0:
        return points[:1].copy()

    if closed:
        num_samples = max(3, int(round(total_length / spacing)))
        sample_positions = np.linspace(0.0, total_length, num_samples, endpoint=False)
    else:
        num_samples = max(2, int(round(total_length / spacing)) + 1)
        sample_positions = np.linspace(0.0, total_length, num_samples)

    idx = np.searchsorted(cumulative, sample_positions, side="right") - 1
    idx = np.clip(idx, 0, len(path) - 2)
    seg = segment_lengths[idx]
    with np.errstate(invalid="ignore", divide="ignore"):
        t = np.where(seg > 0, (sample_positions - cumulative[idx]) / seg, 0.0)
    result = path[idx] + t[:, None] * diffs[idx]

    tracer.event(f"Resampled {len(points)} -> {len(result)} points (length {total_length:.1f})")

    return result

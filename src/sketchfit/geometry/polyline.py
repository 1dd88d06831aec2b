"""
Arc-length parameterized polyline.

Wraps a CircularSequence with cumulative arc lengths so that sample
indices and arc-length parameters can be converted into each other, and
positions and unit tangents can be interpolated at any parameter.
"""

import numpy as np

from sketchfit.geometry.sequence import CircularSequence


class Polyline:
    """
    Polyline over 2-D samples, open or closed.

    Parameters run over [0, length()]. For a closed polyline the last
    segment is the closing edge from the final sample back to sample 0,
    and parameters outside [0, length()] wrap around the loop.
    """

    def __init__(self, points, closed=False):
        if isinstance(points, CircularSequence):
            self._seq = points
        else:
            self._seq = CircularSequence(points, closed)

        if self._seq.size() < 2:
            raise ValueError(f"A polyline needs at least 2 points, got {self._seq.size()}")

        pts = self._seq.items
        if self._seq.closed:
            following = np.roll(pts, -1, axis=0)
        else:
            following = pts[1:]
        seg_vecs = following - pts[:len(following)]
        self._seg_lengths = np.linalg.norm(seg_vecs, axis=1)
        # lengths[i] is the parameter of sample i; lengths[-1] is the total
        self._lengths = np.concatenate([[0.0], np.cumsum(self._seg_lengths)])

        with np.errstate(invalid="ignore", divide="ignore"):
            tangents = seg_vecs / self._seg_lengths[:, None]
        tangents[self._seg_lengths == 0] = 0.0
        self._tangents = tangents

    @property
    def closed(self):
        return self._seq.closed

    @property
    def sequence(self):
        return self._seq

    def size(self):
        return self._seq.size()

    def pts(self):
        return self._seq.items

    def num_segments(self):
        return len(self._seg_lengths)

    def length(self):
        return float(self._lengths[-1])

    def idx_to_param(self, idx):
        """Arc-length parameter of a sample (index size() allowed for closed)."""
        if self.closed and idx == self.size():
            return self.length()
        return float(self._lengths[self._seq.check_index(idx)])

    def length_from_to(self, from_idx, to_idx):
        """Forward arc length from one sample to another."""
        start = self.idx_to_param(self._seq.check_index(from_idx))
        end = self.idx_to_param(self._seq.check_index(to_idx))
        if end >= start:
            return end - start
        if not self.closed:
            raise IndexError(f"Index {to_idx} is not reachable from {from_idx} in an open polyline")
        return self.length() - (start - end)

    def _wrap_param(self, param):
        if self.closed and (param < 0.0 or param > self.length()):
            return param % self.length() if self.length() > 0 else 0.0
        return param

    def param_to_idx(self, param):
        """
        Index of the last sample at or before param.

        Monotone non-decreasing in param over [0, length()]. The end of an
        open polyline maps to its last sample; the end of a closed one to
        the start of the closing edge.
        """
        param = self._wrap_param(param)
        idx = int(np.searchsorted(self._lengths, param, side="right")) - 1
        return min(max(idx, 0), self.size() - 1)

    def _segment(self, param):
        return min(self.param_to_idx(param), self.num_segments() - 1)

    def pos(self, param):
        """Position at an arc-length parameter (extrapolated past open ends)."""
        param = self._wrap_param(param)
        idx = self._segment(param)
        offset = param - self._lengths[idx]
        return self._seq.items[idx] + offset * self._tangents[idx]

    def der(self, param):
        """Unit tangent of the segment containing param."""
        return self._tangents[self._segment(param)].copy()

    def sample_params(self, start_idx, end_idx):
        """
        Arc length of each sample on the forward run start..end, measured
        from start. Returns (indices, offsets).
        """
        indices = self._seq.span_indices(start_idx, end_idx)
        base = self.idx_to_param(start_idx)
        params = self._lengths[indices] - base
        if self.closed:
            params = np.where(params < 0, params + self.length(), params)
        return indices, params

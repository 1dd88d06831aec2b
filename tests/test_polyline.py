"""Tests for indexed sequences and the arc-length polyline."""

import numpy as np
import pytest

from sketchfit.geometry.polyline import Polyline
from sketchfit.geometry.sequence import CircularSequence


def _check_polyline(poly, num=20):
    """Sample parameters uniformly and verify index and position behavior."""
    params = []
    indices = []
    for i in range(num):
        param = poly.length() * i / (num - 1)
        params.append(param)
        idx = poly.param_to_idx(param)
        assert 0 <= idx <= poly.size()
        indices.append(idx)

    for i in range(1, num):
        assert indices[i] >= indices[i - 1]

        prev = poly.pos(params[i - 1])
        cur = poly.pos(params[i])
        # arc length bounds chord length
        assert np.linalg.norm(prev - cur) < (params[i] - params[i - 1]) + 1e-12

        if indices[i] == indices[i - 1]:
            direction = (cur - prev) / np.linalg.norm(cur - prev)
            diff = direction - poly.der(0.5 * (params[i - 1] + params[i]))
            assert np.linalg.norm(diff) < 1e-8


class TestCircularSequence:
    """Tests for open and closed index arithmetic."""

    def test_open_traversal_stops_at_end(self):
        """Test that an open traversal runs from start to the last sample."""
        seq = CircularSequence([[0, 0], [1, 0], [2, 0], [3, 0]])

        visited = [idx for idx, _ in seq.circulator(1)]

        assert visited == [1, 2, 3]

    def test_closed_traversal_wraps_once(self):
        """Test that a closed traversal visits every sample once."""
        seq = CircularSequence([[0, 0], [1, 0], [1, 1], [0, 1]], closed=True)

        visited = [idx for idx, _ in seq.circulator(2)]

        assert visited == [2, 3, 0, 1]

    def test_done_index_protocol(self):
        """Test the explicit done()/index()/advance() protocol."""
        seq = CircularSequence([[0, 0], [1, 0], [2, 0]], closed=True)

        circ = seq.circulator(1)
        seen = []
        while not circ.done():
            seen.append(circ.index())
            circ.advance()

        assert seen == [1, 2, 0]

    def test_index_size_is_zero_when_closed(self):
        """Test that index size aliases index 0 on a closed sequence."""
        seq = CircularSequence([[0, 0], [1, 0], [1, 1]], closed=True)

        assert np.array_equal(seq[3], seq[0])

    def test_out_of_range_raises(self):
        """Test that bad indices fail loudly."""
        seq = CircularSequence([[0, 0], [1, 0], [2, 0]])

        with pytest.raises(IndexError):
            seq.circulator(3)
        with pytest.raises(IndexError):
            seq[-1]

    def test_contains_and_span(self):
        """Test forward-run membership with wraparound."""
        seq = CircularSequence(np.zeros((6, 2)), closed=True)

        assert seq.span_indices(4, 1) == [4, 5, 0, 1]
        assert seq.contains(4, 1, 0)
        assert not seq.contains(4, 1, 2)

    def test_next_prev(self):
        """Test neighbor indices on both topologies."""
        open_seq = CircularSequence(np.zeros((3, 2)))
        closed_seq = CircularSequence(np.zeros((3, 2)), closed=True)

        assert closed_seq.next_index(2) == 0
        assert closed_seq.prev_index(0) == 2
        with pytest.raises(IndexError):
            open_seq.next_index(2)


class TestPolyline:
    """Tests for arc-length parameterization."""

    def test_open_polyline_sampling(self):
        """Test monotone indices and positions on an open polyline."""
        _check_polyline(Polyline([[1, 1], [2, 3], [4, 4]]))

    def test_closed_polyline_sampling(self):
        """Test monotone indices and positions on a closed loop."""
        _check_polyline(Polyline([[3, 1], [1, 3], [5, 4]], closed=True))

    def test_closed_seam(self):
        """Test that parameters wrap at the loop seam."""
        poly = Polyline([[3, 1], [1, 3], [5, 4]], closed=True)
        eps = 1e-9

        assert poly.param_to_idx(poly.length() + eps) == poly.param_to_idx(eps)
        np.testing.assert_allclose(poly.pos(poly.length()), poly.pos(0.0), atol=1e-12)

    def test_index_param_round_trip(self):
        """Test idx_to_param(param_to_idx(idx_to_param(i))) == idx_to_param(i)."""
        for poly in (Polyline([[1, 1], [2, 3], [4, 4]]),
                     Polyline([[3, 1], [1, 3], [5, 4]], closed=True)):
            for i in range(poly.size()):
                param = poly.idx_to_param(i)
                assert poly.idx_to_param(poly.param_to_idx(param)) == param

    def test_lengths(self):
        """Test total and partial lengths on both topologies."""
        square = [[0, 0], [2, 0], [2, 2], [0, 2]]
        open_poly = Polyline(square)
        closed_poly = Polyline(square, closed=True)

        assert open_poly.length() == pytest.approx(6.0)
        assert closed_poly.length() == pytest.approx(8.0)
        assert closed_poly.length_from_to(3, 1) == pytest.approx(4.0)
        assert closed_poly.length_from_to(2, 2) == 0.0
        with pytest.raises(IndexError):
            open_poly.length_from_to(3, 1)

    def test_der_is_unit(self):
        """Test that tangents are unit vectors."""
        poly = Polyline([[1, 1], [2, 3], [4, 4]])

        for param in np.linspace(0, poly.length(), 7):
            assert np.linalg.norm(poly.der(param)) == pytest.approx(1.0)

    def test_sample_params_wrap(self):
        """Test per-sample offsets across the seam of a closed loop."""
        poly = Polyline([[0, 0], [2, 0], [2, 2], [0, 2]], closed=True)

        indices, offsets = poly.sample_params(2, 0)

        assert indices == [2, 3, 0]
        np.testing.assert_allclose(offsets, [0.0, 2.0, 4.0])

    def test_too_few_points(self):
        """Test that a single point is rejected."""
        with pytest.raises(ValueError):
            Polyline([[0, 0]])

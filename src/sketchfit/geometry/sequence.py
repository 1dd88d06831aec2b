"""
Indexed sample sequences with open or closed topology.

A closed sequence treats index ``size`` as index ``0``; traversal from any
start index wraps around once. An open sequence simply runs to its end.
"""

import numpy as np


class Circulator:
    """
    Forward traversal over a CircularSequence starting at a given index.

    Follows a done()/index()/advance() protocol and is also a Python
    iterator yielding (index, value) pairs.
    """

    def __init__(self, sequence, start):
        self._sequence = sequence
        self._start = start
        self._steps = 0
        self._limit = sequence.size() if sequence.closed else sequence.size() - start

    def done(self):
        return self._steps >= self._limit

    def index(self):
        return self._sequence.wrap(self._start + self._steps)

    def value(self):
        return self._sequence[self.index()]

    def advance(self):
        self._steps += 1
        return self

    def __iter__(self):
        return self

    def __next__(self):
        if self.done():
            raise StopIteration
        item = (self.index(), self.value())
        self._steps += 1
        return item


class CircularSequence:
    """An ordered collection of 2-D samples with open or closed topology."""

    def __init__(self, items, closed=False):
        self._items = np.asarray(items, dtype=float).reshape(-1, 2)
        self.closed = bool(closed)

    def size(self):
        return len(self._items)

    def __len__(self):
        return len(self._items)

    @property
    def items(self):
        return self._items

    def __getitem__(self, idx):
        return self._items[self.check_index(idx)]

    def check_index(self, idx):
        """Return idx unchanged, or raise IndexError if it is out of range."""
        n = len(self._items)
        if self.closed and idx == n:
            return 0
        if not 0 <= idx < n:
            raise IndexError(f"Index {idx} out of range for sequence of size {n}")
        return idx

    def wrap(self, idx):
        """Map an unbounded forward index to a stored index."""
        if self.closed:
            return idx % len(self._items)
        return idx

    def next_index(self, idx):
        self.check_index(idx)
        nxt = idx + 1
        if self.closed:
            return nxt % len(self._items)
        if nxt >= len(self._items):
            raise IndexError(f"No sample after index {idx} in an open sequence")
        return nxt

    def prev_index(self, idx):
        self.check_index(idx)
        if self.closed:
            return (idx - 1) % len(self._items)
        if idx == 0:
            raise IndexError("No sample before index 0 in an open sequence")
        return idx - 1

    def circulator(self, start):
        """Lazy forward traversal from start (wrapping when closed)."""
        return Circulator(self, self.check_index(start))

    def forward_distance(self, start, end):
        """Number of forward steps from start to end."""
        start = self.check_index(start)
        end = self.check_index(end)
        if self.closed:
            return (end - start) % len(self._items)
        if end < start:
            raise IndexError(f"Index {end} is not reachable from {start} in an open sequence")
        return end - start

    def contains(self, start, end, idx):
        """Whether idx lies on the forward run from start to end (inclusive)."""
        idx = self.check_index(idx)
        if not self.closed:
            return self.check_index(start) <= idx <= self.check_index(end)
        span = self.forward_distance(start, end)
        return self.forward_distance(start, idx) <= span

    def span_indices(self, start, end):
        """Indices on the forward run from start to end, inclusive."""
        count = self.forward_distance(start, end) + 1
        return [self.wrap(start + k) for k in range(count)]

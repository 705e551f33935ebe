"""Prefix-sum statistics over contiguous ranges of a sorted sample."""
from __future__ import annotations

import numpy as np

_EPS = float(np.finfo(float).eps)


class SegmentStatistics:
    """
    Constant-time mean and SSE over inclusive index ranges.

    The target values are centred on their overall mean, then two
    accumulators of length ``n + 1`` are built: the cumulative sum of the
    centred values and of their squares.  Both start at 0, so the sum over
    ``[lo, hi]`` is ``acc[hi + 1] - acc[lo]``.  Centring keeps the SSE
    identity accurate when ``y`` carries a large constant offset.

    Parameters
    ----------
    y : array-like of shape (n,)
        Target values, already in the order of the sorted sample.
    """

    def __init__(self, y):
        y = np.asarray(y, dtype=float)
        self.n = int(y.shape[0])
        self.offset_ = float(y.mean()) if self.n else 0.0
        yc = y - self.offset_
        self.sum_ = np.zeros(self.n + 1, dtype=float)
        self.sum_sq_ = np.zeros(self.n + 1, dtype=float)
        np.cumsum(yc, out=self.sum_[1:])
        np.cumsum(yc * yc, out=self.sum_sq_[1:])

    def _check(self, lo: int, hi: int) -> None:
        if not (0 <= lo <= hi < self.n):
            raise ValueError(f"invalid segment [{lo}, {hi}] for n={self.n}")

    def mean(self, lo: int, hi: int) -> float:
        self._check(lo, hi)
        s = self.sum_[hi + 1] - self.sum_[lo]
        return float(self.offset_ + s / (hi - lo + 1))

    def sse(self, lo: int, hi: int) -> float:
        # SSE = sum(y^2) - n * mean^2, on centred values
        self._check(lo, hi)
        k = hi - lo + 1
        s = self.sum_[hi + 1] - self.sum_[lo]
        s2 = self.sum_sq_[hi + 1] - self.sum_sq_[lo]
        mu = s / k
        return max(float(s2 - k * mu * mu), 0.0)

    def rounding_bound(self, hi: int) -> float:
        """
        Bound on the rounding error of ``sse`` for any range ending at ``hi``.

        Prefix sums up to ``hi`` accumulate at most ``hi + 1`` roundings, each
        relative to the largest accumulator they touch.
        """
        self._check(0, hi)
        return _EPS * (hi + 1) * float(self.sum_sq_[hi + 1])

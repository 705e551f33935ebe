"""
depth2tree.tree
===============

Training and prediction for a one-dimensional regression tree of depth 2.

The trainer sorts the sample by ``x``, builds prefix sums over ``y`` and runs
an exhaustive SSE split search at the root and then once inside each child.
The result is a :class:`StepModel`: at most four leaves, each holding the
mean of its range, and at most three thresholds between them.

Splits are never placed between two points sharing the same ``x``; the
predicate ``x < threshold`` would be ambiguous for them.  A range whose
points all share one ``x``, or where no split lowers the SSE, is left as a
single leaf.

Leaves carry their own ``[x_low, x_high)`` interval so that prediction does
not need the training sample.  The leftmost leaf starts at ``-inf`` and the
rightmost ends at ``+inf``, which clamps queries outside the training range
to the boundary leaves.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from .stats import SegmentStatistics

logger = logging.getLogger(__name__)

# Structural constant: one root split plus at most one split per child.
MAX_DEPTH = 2

# Absolute tolerance used to collapse thresholds that coincide numerically.
# Splits come from disjoint index ranges, so their thresholds never coincide
# in exact arithmetic; only rounding can bring two of them together.
THRESHOLD_TOLERANCE = 1e-9

# A split must lower the SSE of its range by more than this many multiples
# of the prefix-sum rounding bound; smaller gains are rounding noise.
SSE_GAIN_ULPS = 16


# -----------------------------------------------------------------------------
# Split outcomes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Split:
    """Best split of a range: left side ends at ``index`` (inclusive)."""
    index: int
    cost: float


@dataclass(frozen=True)
class NoSplit:
    """No candidate lowers the SSE of the range, or all its ``x`` are tied."""


NO_SPLIT = NoSplit()
SplitOutcome = Union[Split, NoSplit]


# -----------------------------------------------------------------------------
# Model
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Leaf:
    """
    A contiguous block of the sorted sample predicted by one constant.

    Attributes
    ----------
    lo, hi : int
        Inclusive index range into the sorted training sample.
    value : float
        Mean of ``y`` over ``[lo, hi]``.
    sse : float
        Sum of squared errors of ``y`` around ``value``.
    x_low, x_high : float
        Half-open interval ``[x_low, x_high)`` of x-values routed here.
    """
    lo: int
    hi: int
    value: float
    sse: float = 0.0
    x_low: float = -math.inf
    x_high: float = math.inf

    @property
    def n_samples(self) -> int:
        return self.hi - self.lo + 1


@dataclass(frozen=True)
class StepModel:
    """
    Trained depth-2 step function.

    Attributes
    ----------
    leaves : tuple of Leaf
        Leaves ordered left to right; their index ranges partition
        ``[0, n_samples - 1]``.
    thresholds : tuple of float
        Ascending decision boundaries, deduplicated within
        :data:`THRESHOLD_TOLERANCE`.
    x_min, x_max : float
        Range of ``x`` seen in training.
    root_threshold : float or None
        Threshold of the root split; ``None`` for a single-leaf model.
    """
    leaves: Tuple[Leaf, ...]
    thresholds: Tuple[float, ...]
    x_min: float
    x_max: float
    root_threshold: Optional[float] = None

    @property
    def n_leaves(self) -> int:
        return len(self.leaves)

    @property
    def n_samples(self) -> int:
        return self.leaves[-1].hi + 1 if self.leaves else 0

    @property
    def sse(self) -> float:
        return float(sum(leaf.sse for leaf in self.leaves))

    def leaf_index(self, x):
        """Index of the leaf whose x-interval holds each query point."""
        if not self.leaves:
            raise ValueError("model has no leaves")
        lows = np.array([leaf.x_low for leaf in self.leaves], dtype=float)
        idx = np.searchsorted(lows, np.asarray(x, dtype=float), side="right") - 1
        return np.clip(idx, 0, len(self.leaves) - 1)

    def predict(self, x):
        """
        Predict the leaf constant for ``x``.

        Returns a float for a scalar query and an ndarray for array input.
        Queries outside ``[x_min, x_max]`` take the nearest boundary leaf.
        """
        values = np.array([leaf.value for leaf in self.leaves], dtype=float)
        out = values[self.leaf_index(x)]
        if np.ndim(out) == 0:
            return float(out)
        return out

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation; open leaf bounds are stored as ``None``."""
        return {
            "max_depth": MAX_DEPTH,
            "x_min": self.x_min,
            "x_max": self.x_max,
            "root_threshold": self.root_threshold,
            "thresholds": list(self.thresholds),
            "leaves": [
                {
                    "lo": leaf.lo,
                    "hi": leaf.hi,
                    "value": leaf.value,
                    "sse": leaf.sse,
                    "x_low": None if math.isinf(leaf.x_low) else leaf.x_low,
                    "x_high": None if math.isinf(leaf.x_high) else leaf.x_high,
                }
                for leaf in self.leaves
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepModel":
        raw = data.get("leaves") or []
        if not raw:
            raise ValueError("serialized model has no leaves")
        leaves = []
        for d in raw:
            x_low = d.get("x_low")
            x_high = d.get("x_high")
            leaves.append(Leaf(
                lo=int(d["lo"]),
                hi=int(d["hi"]),
                value=float(d["value"]),
                sse=float(d.get("sse", 0.0)),
                x_low=-math.inf if x_low is None else float(x_low),
                x_high=math.inf if x_high is None else float(x_high),
            ))
        root = data.get("root_threshold")
        return cls(
            leaves=tuple(leaves),
            thresholds=tuple(float(t) for t in data.get("thresholds", [])),
            x_min=float(data["x_min"]),
            x_max=float(data["x_max"]),
            root_threshold=None if root is None else float(root),
        )


# -----------------------------------------------------------------------------
# Training
# -----------------------------------------------------------------------------
def _as_points(sample) -> np.ndarray:
    if not isinstance(sample, np.ndarray):
        sample = list(sample)
    pts = np.asarray(sample, dtype=float)
    if pts.size == 0:
        return pts.reshape(0, 2)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError("sample must be a sequence of (x, y) pairs")
    if not np.all(np.isfinite(pts)):
        raise ValueError("sample contains non-finite values")
    return pts


def _midpoint(xs: np.ndarray, i: int) -> float:
    # halves first so the sum cannot overflow near the float maximum
    a, b = float(xs[i]), float(xs[i + 1])
    mid = a * 0.5 + b * 0.5
    # between adjacent doubles the midpoint can round onto a; x < threshold
    # must still hold for the left point
    if not a < mid <= b:
        mid = b
    return mid


def _dedupe_thresholds(values: List[float], tol: float = THRESHOLD_TOLERANCE) -> Tuple[float, ...]:
    kept: List[float] = []
    for v in sorted(values):
        if not kept or abs(v - kept[-1]) > tol:
            kept.append(v)
    return tuple(kept)


def _make_leaf(stats: SegmentStatistics, lo: int, hi: int,
               x_low: float, x_high: float) -> Leaf:
    return Leaf(lo=lo, hi=hi, value=stats.mean(lo, hi), sse=stats.sse(lo, hi),
                x_low=x_low, x_high=x_high)


def best_split(xs: np.ndarray, stats: SegmentStatistics, lo: int, hi: int) -> SplitOutcome:
    """
    Exhaustive SSE split search over ``[lo, hi]``.

    Candidate ``i`` puts ``[lo, i]`` on the left and ``[i + 1, hi]`` on the
    right.  Candidates between equal ``x`` values are skipped.  The scan runs
    in ascending order with a strict ``<``, so ties go to the lowest index.
    The winner is kept only if it strictly lowers the SSE of the range; a
    range with constant ``y`` is not split.
    """
    best: SplitOutcome = NO_SPLIT
    best_cost = math.inf
    # candidates at boundaries where x changes
    boundaries = np.nonzero(xs[lo:hi] != xs[lo + 1:hi + 1])[0] + lo
    for i in boundaries:
        i = int(i)
        cost = stats.sse(lo, i) + stats.sse(i + 1, hi)
        if cost < best_cost:
            best_cost = cost
            best = Split(index=i, cost=cost)
    if isinstance(best, Split):
        gain = stats.sse(lo, hi) - best.cost
        if gain <= SSE_GAIN_ULPS * stats.rounding_bound(hi):
            return NO_SPLIT
    return best


def train(sample) -> Optional[StepModel]:
    """
    Fit a depth-2 regression tree to a sequence of ``(x, y)`` pairs.

    Parameters
    ----------
    sample : iterable of (float, float) or array-like of shape (n, 2)
        Training points in any order; repeated ``x`` values are allowed.

    Returns
    -------
    StepModel or None
        ``None`` when the sample is empty.

    Raises
    ------
    ValueError
        If the sample is not a set of finite ``(x, y)`` pairs.
    """
    pts = _as_points(sample)
    n = pts.shape[0]
    if n == 0:
        logger.debug("empty sample; no model trained")
        return None

    order = np.argsort(pts[:, 0], kind="mergesort")
    xs = pts[order, 0]
    stats = SegmentStatistics(pts[order, 1])
    x_min, x_max = float(xs[0]), float(xs[-1])

    root = best_split(xs, stats, 0, n - 1)
    if isinstance(root, NoSplit):
        logger.debug("no valid root split (n=%d); single leaf", n)
        leaf = _make_leaf(stats, 0, n - 1, -math.inf, math.inf)
        return StepModel(leaves=(leaf,), thresholds=(), x_min=x_min, x_max=x_max)

    k = root.index
    thr_root = _midpoint(xs, k)
    logger.debug("root split at index %d, threshold=%.6g, cost=%.6g", k, thr_root, root.cost)

    leaves: List[Leaf] = []
    raw_thresholds = [thr_root]
    children = ((0, k, -math.inf, thr_root), (k + 1, n - 1, thr_root, math.inf))
    for lo, hi, x_low, x_high in children:
        child = best_split(xs, stats, lo, hi)
        if isinstance(child, Split):
            thr = _midpoint(xs, child.index)
            raw_thresholds.append(thr)
            leaves.append(_make_leaf(stats, lo, child.index, x_low, thr))
            leaves.append(_make_leaf(stats, child.index + 1, hi, thr, x_high))
            logger.debug("child [%d, %d] split at index %d, threshold=%.6g",
                         lo, hi, child.index, thr)
        else:
            leaves.append(_make_leaf(stats, lo, hi, x_low, x_high))

    return StepModel(
        leaves=tuple(leaves),
        thresholds=_dedupe_thresholds(raw_thresholds),
        x_min=x_min,
        x_max=x_max,
        root_threshold=thr_root,
    )

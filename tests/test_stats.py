import numpy as np
import pytest
from depth2tree.stats import SegmentStatistics


def test_accumulators_start_at_zero():
    stats = SegmentStatistics([1.0, 2.0, 3.0, 4.0])
    # values are centred on their mean, 2.5
    assert stats.offset_ == 2.5
    assert np.array_equal(stats.sum_, [0.0, -1.5, -2.0, -1.5, 0.0])
    assert np.array_equal(stats.sum_sq_, [0.0, 2.25, 2.5, 2.75, 5.0])


def test_mean_and_sse_small_ranges():
    stats = SegmentStatistics([1.0, 2.0, 3.0, 4.0])
    assert stats.mean(0, 3) == pytest.approx(2.5)
    assert stats.sse(0, 3) == pytest.approx(5.0)
    assert stats.mean(1, 2) == pytest.approx(2.5)
    assert stats.sse(1, 2) == pytest.approx(0.5)
    # a single point has no spread
    assert stats.sse(2, 2) == 0.0


def test_matches_direct_computation():
    rng = np.random.default_rng(0)
    y = rng.normal(loc=3.0, scale=2.0, size=50)
    stats = SegmentStatistics(y)
    for lo, hi in [(0, 49), (0, 0), (10, 20), (25, 49), (7, 8)]:
        seg = y[lo:hi + 1]
        assert stats.mean(lo, hi) == pytest.approx(seg.mean(), rel=1e-9)
        assert stats.sse(lo, hi) == pytest.approx(((seg - seg.mean()) ** 2).sum(), rel=1e-9, abs=1e-9)


def test_constant_values_give_zero_sse():
    stats = SegmentStatistics([0.1] * 7)
    assert stats.sse(0, 6) >= 0.0
    assert stats.sse(0, 6) == pytest.approx(0.0, abs=1e-12)


def test_invalid_ranges_raise():
    stats = SegmentStatistics([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        stats.sse(2, 1)
    with pytest.raises(ValueError):
        stats.mean(0, 3)
    with pytest.raises(ValueError):
        stats.sse(-1, 0)


def test_large_offset_keeps_sse_accurate():
    y = 1e6 + np.array([0, 0, 0, 0, 0.5, 0.5, 0.5, 0.5])
    stats = SegmentStatistics(y)
    assert stats.sse(0, 7) == pytest.approx(0.5, rel=1e-9)
    assert stats.sse(0, 3) == pytest.approx(0.0, abs=1e-12)
    assert stats.mean(4, 7) == pytest.approx(1e6 + 0.5, rel=1e-15)
    # the rounding bound sits far below the real spread
    assert stats.rounding_bound(7) < 1e-12

import numpy as np
import pytest
from depth2tree import train
from depth2tree.datasets import PolynomialConfig, make_noisy_polynomial, random_coefficients


def test_default_dataset_grid():
    x, y, coeffs = make_noisy_polynomial(random_state=0)
    assert x.shape == (200,)
    assert y.shape == (200,)
    assert x[0] == pytest.approx(-3.0)
    assert x[-1] == pytest.approx(3.0)
    assert len(coeffs) in (3, 4)


def test_dataset_is_reproducible():
    a = make_noisy_polynomial(random_state=123)
    b = make_noisy_polynomial(random_state=123)
    for u, v in zip(a, b):
        assert np.array_equal(u, v)


def test_noise_free_dataset_follows_polynomial():
    cfg = PolynomialConfig(n_samples=25, noise_std=0.0, degrees=(2,))
    x, y, coeffs = make_noisy_polynomial(cfg, random_state=5)
    assert len(coeffs) == 3
    expected = coeffs[0] + coeffs[1] * x + coeffs[2] * x ** 2
    assert np.allclose(y, expected)


def test_coefficient_ranges():
    rng = np.random.default_rng(1)
    for _ in range(50):
        c = random_coefficients(2, rng)
        assert 0.5 <= abs(c[2]) <= 1.2
        assert -2.0 <= c[0] <= 4.0
        c = random_coefficients(3, rng)
        assert 0.2 <= abs(c[3]) <= 0.7
        assert -1.5 <= c[2] <= 1.5


def test_invalid_settings_raise():
    with pytest.raises(ValueError):
        random_coefficients(4, np.random.default_rng(0))
    with pytest.raises(ValueError):
        make_noisy_polynomial(PolynomialConfig(n_samples=1))
    with pytest.raises(ValueError):
        make_noisy_polynomial(PolynomialConfig(degrees=()))


def test_generated_data_trains_full_tree():
    x, y, _ = make_noisy_polynomial(random_state=42)
    model = train(zip(x, y))
    assert 2 <= model.n_leaves <= 4
    assert len(model.thresholds) == model.n_leaves - 1
    assert all(-3.0 < t < 3.0 for t in model.thresholds)

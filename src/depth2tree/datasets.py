"""Synthetic one-dimensional regression data."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class PolynomialConfig:
    """
    Settings for :func:`make_noisy_polynomial`.

    Attributes:
        n_samples: Number of evenly spaced points.
        x_min: Left end of the x-range.
        x_max: Right end of the x-range.
        noise_std: Standard deviation of the Gaussian noise added to y.
        degrees: Polynomial degrees to choose from (2 and/or 3).
    """

    n_samples: int = 200
    x_min: float = -3.0
    x_max: float = 3.0
    noise_std: float = 2.0
    degrees: Tuple[int, ...] = (2, 3)


def _random_sign(rng: np.random.Generator) -> float:
    return -1.0 if rng.random() < 0.5 else 1.0


def random_coefficients(degree: int, rng: np.random.Generator) -> np.ndarray:
    """
    Draw coefficients ``[c0, c1, ...]`` that keep values moderate on [-3, 3].

    The leading coefficient is bounded away from zero so the curve keeps its
    shape.
    """
    if degree == 2:
        c2 = rng.uniform(0.5, 1.2) * _random_sign(rng)
        c1 = rng.uniform(-2.0, 2.0)
        c0 = rng.uniform(-2.0, 4.0)
        return np.array([c0, c1, c2])
    if degree == 3:
        c3 = rng.uniform(0.2, 0.7) * _random_sign(rng)
        c2 = rng.uniform(-1.5, 1.5)
        c1 = rng.uniform(-2.0, 2.0)
        c0 = rng.uniform(-2.0, 4.0)
        return np.array([c0, c1, c2, c3])
    raise ValueError(f"unsupported degree {degree}; expected 2 or 3")


def make_noisy_polynomial(config: Optional[PolynomialConfig] = None,
                          random_state: Optional[int] = None
                          ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample a random quadratic or cubic on an even grid and add Gaussian noise.

    Parameters
    ----------
    config : PolynomialConfig, optional
        Sampling settings; defaults to ``PolynomialConfig()``.
    random_state : int, optional
        Seed for ``numpy.random.default_rng``.

    Returns
    -------
    x : ndarray of shape (n_samples,)
    y : ndarray of shape (n_samples,)
    coeffs : ndarray
        Polynomial coefficients in increasing order of power.
    """
    cfg = config or PolynomialConfig()
    if cfg.n_samples < 2:
        raise ValueError("n_samples must be at least 2")
    if not cfg.degrees:
        raise ValueError("degrees must not be empty")
    rng = np.random.default_rng(random_state)
    degree = int(rng.choice(cfg.degrees))
    coeffs = random_coefficients(degree, rng)
    x = np.linspace(cfg.x_min, cfg.x_max, cfg.n_samples)
    # np.polyval expects the highest power first
    y = np.polyval(coeffs[::-1], x) + cfg.noise_std * rng.standard_normal(cfg.n_samples)
    return x, y, coeffs

"""
Reporting helpers: prediction rows, CSV files and step segments for plots.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
import pandas as pd

from .tree import THRESHOLD_TOLERANCE, StepModel


def _step_model(model) -> StepModel:
    if isinstance(model, StepModel):
        return model
    fitted = getattr(model, "model_", None)
    if fitted is None:
        raise ValueError("Estimator not fitted. Call fit(...) first.")
    return fitted


def sample_frame(x, y) -> pd.DataFrame:
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError("x and y must have the same shape")
    return pd.DataFrame({"x": x, "y": y})


def prediction_frame(model, x, y) -> pd.DataFrame:
    """
    Rows ``{x, y, y_pred}`` for each observed point, in input order.

    ``model`` is a :class:`StepModel` or a fitted ``Depth2Regressor``.
    """
    df = sample_frame(x, y)
    df["y_pred"] = np.asarray(_step_model(model).predict(df["x"].to_numpy()), dtype=float)
    return df


def write_sample_csv(path: Union[str, Path], x, y) -> Path:
    path = Path(path)
    sample_frame(x, y).to_csv(path, index=False)
    return path


def write_predictions_csv(path: Union[str, Path], model, x, y) -> Path:
    path = Path(path)
    prediction_frame(model, x, y).to_csv(path, index=False)
    return path


def step_segments(model, x_min: float, x_max: float) -> List[Tuple[float, float, float]]:
    """
    Horizontal segments ``(a, b, value)`` of the step function on ``[x_min, x_max]``.

    Thresholds outside the open range are ignored and zero-width intervals
    are skipped. Each interval takes the prediction at its midpoint.
    """
    m = _step_model(model)
    eps = THRESHOLD_TOLERANCE
    inner = [t for t in m.thresholds if x_min + eps < t < x_max - eps]
    bounds = [float(x_min)] + inner + [float(x_max)]
    segments = []
    for a, b in zip(bounds[:-1], bounds[1:]):
        if b - a <= eps:
            continue
        segments.append((a, b, m.predict((a + b) * 0.5)))
    return segments

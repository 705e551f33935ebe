import numpy as np
import pandas as pd
import pytest
from depth2tree import Depth2Regressor, train
from depth2tree.export import (
    prediction_frame,
    step_segments,
    write_predictions_csv,
    write_sample_csv,
)


def _step_model():
    x = np.arange(8, dtype=float)
    y = np.array([0, 0, 0, 0, 10, 10, 10, 10], dtype=float)
    return x, y, train(zip(x, y))


def test_prediction_frame_columns_and_values():
    x, y, model = _step_model()
    df = prediction_frame(model, x, y)
    assert list(df.columns) == ["x", "y", "y_pred"]
    assert len(df) == len(x)
    assert np.array_equal(df["y_pred"].to_numpy(), y)


def test_prediction_frame_accepts_fitted_estimator():
    x, y, _ = _step_model()
    regr = Depth2Regressor().fit(x, y)
    df = prediction_frame(regr, x[::-1], y[::-1])
    # rows keep the caller's order
    assert df["x"].iloc[0] == 7.0
    assert df["y_pred"].iloc[0] == 10.0


def test_prediction_frame_requires_fitted_estimator():
    with pytest.raises(ValueError):
        prediction_frame(Depth2Regressor(), [1.0], [1.0])


def test_prediction_frame_shape_mismatch():
    _, _, model = _step_model()
    with pytest.raises(ValueError):
        prediction_frame(model, [1.0, 2.0], [1.0])


def test_write_csv_files(tmp_path):
    x, y, model = _step_model()
    sample_path = write_sample_csv(tmp_path / "sample.csv", x, y)
    pred_path = write_predictions_csv(tmp_path / "pred.csv", model, x, y)

    assert sample_path.read_text().splitlines()[0] == "x,y"
    assert pred_path.read_text().splitlines()[0] == "x,y,y_pred"
    back = pd.read_csv(pred_path)
    assert np.allclose(back["y_pred"], y)
    assert np.allclose(back["x"], x)


def test_step_segments_cover_range():
    _, _, model = _step_model()
    assert step_segments(model, 0.0, 7.0) == [(0.0, 3.5, 0.0), (3.5, 7.0, 10.0)]


def test_step_segments_ignore_outside_thresholds():
    _, _, model = _step_model()
    assert step_segments(model, -1.0, 3.0) == [(-1.0, 3.0, 0.0)]
    # a threshold on the range end adds no zero-width segment
    assert step_segments(model, 3.5, 6.0) == [(3.5, 6.0, 10.0)]


def test_step_segments_single_leaf():
    model = train([(0.0, 5.0), (0.0, 5.0)])
    assert step_segments(model, -3.0, 3.0) == [(-3.0, 3.0, 5.0)]

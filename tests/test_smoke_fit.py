import numpy as np
from depth2tree import Depth2Regressor


def test_regressor_smoke():
    X = np.array([[1.0], [2.0], [3.0], [4.0]])
    y = np.array([1.0, 1.5, 2.0, 2.5])
    regr = Depth2Regressor(feature_name="num")
    regr.fit(X, y)
    _ = regr.predict(X)
    _ = regr.export_rules()

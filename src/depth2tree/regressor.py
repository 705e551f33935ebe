"""Depth-2 step regressor for a single numeric feature (scikit-learn style).
This module wraps :func:`depth2tree.tree.train` in an estimator with text and
Graphviz exports.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Tuple, Union

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin

from .tree import Leaf, StepModel, train

logger = logging.getLogger(__name__)

# ----------------------------- Helpers -----------------------------

def _as_feature(X) -> np.ndarray:
    x = np.asarray(X, dtype=float)
    if x.ndim == 2:
        if x.shape[1] != 1:
            raise ValueError(f"Depth2Regressor supports a single feature; got {x.shape[1]} columns")
        x = x[:, 0]
    elif x.ndim != 1:
        raise ValueError("X must be 1-D or of shape (n_samples, 1)")
    return x

# (threshold, left, right) for internal nodes, Leaf otherwise
_Node = Union[Leaf, Tuple[float, Any, Any]]

def _subtree(leaves: List[Leaf]) -> _Node:
    if len(leaves) == 1:
        return leaves[0]
    thr = leaves[0].x_high
    return (thr, leaves[0], _subtree(leaves[1:]))

def _tree_view(model: StepModel) -> _Node:
    leaves = list(model.leaves)
    root = model.root_threshold
    if root is None or len(leaves) == 1:
        return leaves[0]
    left = [lf for lf in leaves if lf.x_high <= root]
    right = [lf for lf in leaves if lf.x_high > root]
    return (root, _subtree(left), _subtree(right))

# ----------------------------- Regressor -----------------------------

class Depth2Regressor(RegressorMixin, BaseEstimator):
    r"""
    Depth2Regressor(feature_name="x", verbose=0)

    Least-squares regression tree of depth 2 over one numeric feature.

    **Core behavior**

    - **Split criterion**: SSE of the two sides, searched exhaustively over
      every boundary between distinct sorted ``x`` values. Thresholds are the
      midpoints of those boundaries.
    - **Depth**: one root split, then at most one split inside each child.
      The fitted model has between 1 and 4 leaves.
    - **Ties in x**: no split is placed between points sharing an ``x``; a
      range with a single distinct ``x`` stays one leaf, as does a range
      no split can improve (constant ``y``).
    - **Extrapolation**: queries below (above) the training range take the
      leftmost (rightmost) leaf's value.

    Parameters
    ----------
    feature_name : str, default="x"
        Name used for the feature in textual and Graphviz exports.
    verbose : int, default=0
        Verbosity level (0 = silent). Values > 0 log a summary of each fit at
        INFO level on the ``depth2tree.regressor`` logger.

    Attributes
    ----------
    model_ : StepModel or None
        Trained model; ``None`` after fitting an empty sample.
    thresholds_ : ndarray
        Ascending decision boundaries.
    leaf_values_ : ndarray
        Leaf constants, left to right.
    """

    def __init__(self, feature_name: str = "x", verbose: int = 0):
        self.feature_name = feature_name
        self.verbose = verbose

    # ----------------------------- Public API -----------------------------

    def fit(self, X, y):
        x = _as_feature(X)
        y = np.asarray(y, dtype=float)
        if y.ndim != 1:
            raise ValueError("y must be 1-D")
        if y.shape[0] != x.shape[0]:
            raise ValueError("X and y must have the same number of samples")

        self.model_ = train(np.column_stack([x, y]))
        self.n_features_in_ = 1
        if self.model_ is None:
            logger.warning("empty training sample; no model fitted")
            self.thresholds_ = np.empty(0, dtype=float)
            self.leaf_values_ = np.empty(0, dtype=float)
            return self

        self.thresholds_ = np.asarray(self.model_.thresholds, dtype=float)
        self.leaf_values_ = np.array([lf.value for lf in self.model_.leaves], dtype=float)
        if self.verbose:
            logger.info("fitted depth-2 tree: n=%d, leaves=%d, thresholds=%s, sse=%.6g",
                        self.model_.n_samples, self.model_.n_leaves,
                        [round(t, 6) for t in self.model_.thresholds], self.model_.sse)
        return self

    def predict(self, X):
        model = self._fitted_model()
        return np.asarray(model.predict(_as_feature(X)), dtype=float)

    @property
    def n_leaves(self) -> int:
        return self._fitted_model().n_leaves

    def to_dict(self) -> Dict[str, Any]:
        return self._fitted_model().to_dict()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **params) -> "Depth2Regressor":
        """Rebuild a fitted estimator from :meth:`to_dict` output."""
        est = cls(**params)
        est.model_ = StepModel.from_dict(data)
        est.n_features_in_ = 1
        est.thresholds_ = np.asarray(est.model_.thresholds, dtype=float)
        est.leaf_values_ = np.array([lf.value for lf in est.model_.leaves], dtype=float)
        return est

    def _fitted_model(self) -> StepModel:
        model = getattr(self, "model_", None)
        if model is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")
        return model

    # ----------------------------- Pretty / Rules / Graphviz -----------------------------

    def print_tree(self) -> None:
        """
        Pretty-print the fitted tree to ``stdout``.

        Raises
        ------
        ValueError
            If the estimator has not been fitted.
        """
        node = _tree_view(self._fitted_model())
        self._print_node(node, "")

    def _print_node(self, node, indent=""):
        if isinstance(node, Leaf):
            print(f"{indent}Predict {node.value:.4f} (N={node.n_samples})")
            return
        thr, left, right = node
        print(f"{indent}if {self.feature_name} < {thr:.6g}:")
        self._print_node(left, indent + "  ")
        print(f"{indent}else:")
        self._print_node(right, indent + "  ")

    def export_rules(self) -> List[str]:
        """
        Export one decision rule per leaf, left to right.

        Returns
        -------
        list[str]
            Strings of the form ``"<antecedent> => value=<prediction> (N=<count>)"``.
            A single-leaf model yields one rule with antecedent ``<root>``.

        Raises
        ------
        ValueError
            If the model has not been fitted.
        """
        model = self._fitted_model()
        return [f"{self._antecedent(lf)} => value={lf.value:.6g} (N={lf.n_samples})"
                for lf in model.leaves]

    def _antecedent(self, leaf: Leaf) -> str:
        parts = []
        if np.isfinite(leaf.x_low):
            parts.append(f"{self.feature_name} >= {leaf.x_low:.6g}")
        if np.isfinite(leaf.x_high):
            parts.append(f"{self.feature_name} < {leaf.x_high:.6g}")
        return " AND ".join(parts) if parts else "<root>"

    def predict_rule(self, X) -> List[str]:
        """
        Return the antecedent of the leaf reached by each input value.

        Raises
        ------
        ValueError
            If the model has not been fitted.
        """
        model = self._fitted_model()
        idx = np.atleast_1d(model.leaf_index(_as_feature(X)))
        return [self._antecedent(model.leaves[int(i)]) for i in idx]

    def export_graphviz(self, filename: str = "depth2_tree", format: str = "png") -> str:
        """
        Export the tree to Graphviz format.

        If ``format='dot'`` the DOT source is written without invoking the
        external ``dot`` binary. For other formats rendering is attempted and,
        if it fails, the ``.dot`` source is written instead.

        Returns
        -------
        str
            Path to the written file.

        Raises
        ------
        ValueError
            If the model has not been fitted.
        RuntimeError
            If the ``graphviz`` Python package is not installed.
        """
        node = _tree_view(self._fitted_model())
        try:
            from graphviz import Digraph
        except ImportError as e:
            raise RuntimeError("Please install the 'graphviz' Python package.") from e
        dot = Digraph(comment="Depth2Regressor", format=format)
        self._add_graph_nodes(dot, node, "root")
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except Exception as e:
            logger.warning("graphviz render failed (%s); writing DOT source instead", e)
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    def _add_graph_nodes(self, dot, node, node_id: str):
        if isinstance(node, Leaf):
            dot.node(node_id, f"Leaf\nvalue={node.value:.6g}\nN={node.n_samples}")
            return
        thr, left, right = node
        dot.node(node_id, f"{self.feature_name} < {thr:.6g}")
        left_id = node_id + "L"
        right_id = node_id + "R"
        dot.edge(node_id, left_id, label="True")
        dot.edge(node_id, right_id, label="False")
        self._add_graph_nodes(dot, left, left_id)
        self._add_graph_nodes(dot, right, right_id)

# depth2tree/__init__.py
"""
depth2tree: least-squares regression trees of depth 2 over one feature.

Exports:
    - Depth2Regressor
    - StepModel, Leaf
    - train
"""
from .tree import MAX_DEPTH, THRESHOLD_TOLERANCE, Leaf, StepModel, train
from .regressor import Depth2Regressor

__all__ = ["Depth2Regressor", "StepModel", "Leaf", "train",
           "MAX_DEPTH", "THRESHOLD_TOLERANCE"]
__version__ = "0.1.0"

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from knnlab.neighbors.errors import LabelCountMismatch
from knnlab.neighbors.metrics import DistanceMetric, get_metric
from knnlab.neighbors.query import (
    Mode,
    NeighborResult,
    as_reference,
    check_k,
    query,
)


@dataclass
class _KNNBase:
    k: int = 5
    metric: str | DistanceMetric = "euclidean"

    # fit
    X_: np.ndarray | None = None
    y_: np.ndarray | None = None

    _mode = Mode.regression

    def _fit(self, X: np.ndarray, y: np.ndarray):
        get_metric(self.metric)
        self.X_ = as_reference(X)
        self.y_ = np.asarray(y).ravel()
        if self.y_.shape[0] != self.X_.shape[0]:
            raise LabelCountMismatch(f"{self.y_.shape[0]} labels for {self.X_.shape[0]} rows")
        check_k(self.k, self.X_.shape[0])
        return self

    def _query_rows(self, X: np.ndarray):
        assert self.X_ is not None, "Call fit() first."
        X = np.atleast_2d(np.asarray(X, dtype=np.float64))
        for row in X:
            yield query(row, self.X_, self.y_, self.k, metric=self.metric, mode=self._mode)

    def kneighbors(self, X: np.ndarray) -> List[NeighborResult]:
        """Tie-inclusive neighbor sets, one per row of X."""
        return [res.neighbors for res in self._query_rows(X)]


@dataclass
class KNNClassifier(_KNNBase):
    _mode = Mode.classification

    def fit(self, X: np.ndarray, y: np.ndarray):
        return self._fit(X, y)

    def predict(self, X: np.ndarray) -> np.ndarray:
        return np.array([res.prediction for res in self._query_rows(X)])

    def accuracy(self, X: np.ndarray, y: np.ndarray) -> float:
        y = np.asarray(y).ravel()
        return float((self.predict(X) == y).mean())


@dataclass
class KNNRegressor(_KNNBase):
    _mode = Mode.regression

    def fit(self, X: np.ndarray, y: np.ndarray):
        self._fit(X, np.asarray(y, dtype=np.float64))
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        return np.array([res.prediction for res in self._query_rows(X)], dtype=np.float64)

    def mse(self, X: np.ndarray, y: np.ndarray) -> float:
        pred = self.predict(X)
        diff = pred - np.asarray(y, dtype=np.float64).ravel()
        return float((diff @ diff) / len(diff))

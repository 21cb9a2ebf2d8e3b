from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass
class StandardizeResult:
    X: np.ndarray
    mean: np.ndarray
    std: np.ndarray

    def apply(self, X: np.ndarray) -> np.ndarray:
        """Scale new rows with the statistics of the data this result was fit on."""
        return (np.asarray(X, dtype=np.float64) - self.mean) / self.std


def standardize(X: np.ndarray, eps: float = 1e-8) -> StandardizeResult:
    X = np.asarray(X, dtype=np.float64)
    mean = X.mean(axis=0, keepdims=True)
    std = X.std(axis=0, keepdims=True) + eps
    return StandardizeResult((X - mean) / std, mean.squeeze(0), std.squeeze(0))


@dataclass
class RegressionData:
    X: np.ndarray  # (n, d)
    y: np.ndarray  # (n,) noisy targets
    f: np.ndarray  # (n,) noiseless mean function at X


def make_additive_regression(
    rng: np.random.Generator,
    n: int = 1000,
    coef: Sequence[float] = (1.0, 2.0, -1.0),
    noise: float = 1.0,
) -> RegressionData:
    """
    Y = sum_j coef_j * X_j + noise * eps with X_j, eps iid N(0, 1); d = len(coef).
    The caller owns `rng`, so repeated draws are reproducible without global seeding.
    """
    beta = np.asarray(coef, dtype=np.float64)
    X = rng.normal(size=(n, beta.shape[0]))
    f = X @ beta
    y = f + noise * rng.normal(size=n)
    return RegressionData(X, y, f)


def make_gaussian_classes(
    rng: np.random.Generator,
    n_per_class: int = 50,
    n_classes: int = 3,
    d: int = 2,
    sep: float = 4.0,
):
    """
    Isotropic unit-variance blobs around centers drawn with scale `sep`.
    Returns (X, y) with integer labels 0..n_classes-1, rows grouped by class.
    """
    centers = rng.normal(size=(n_classes, d)) * sep
    Xs, ys = [], []
    for c in range(n_classes):
        Xs.append(centers[c] + rng.normal(size=(n_per_class, d)))
        ys.append(np.full(n_per_class, c, dtype=np.int64))
    return np.vstack(Xs), np.concatenate(ys)

# src/knnlab/neighbors/metrics.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Protocol, runtime_checkable

import numpy as np

from .errors import DimensionMismatch, NonFiniteInput, UnknownMetric


@runtime_checkable
class DistanceMetric(Protocol):
    """
    Anything with `distance(a, b) -> float >= 0` semantics.
    `to_set` is the same metric applied from one point to every row of a (n, p) array.
    """

    name: str

    def __call__(self, a: np.ndarray, b: np.ndarray) -> float: ...

    def to_set(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray: ...


def as_point(a) -> np.ndarray:
    x = np.asarray(a, dtype=np.float64)
    if x.ndim != 1:
        raise DimensionMismatch(f"a point must be 1-D, got shape {x.shape}")
    if not np.isfinite(x).all():
        raise NonFiniteInput("a point contains NaN or inf")
    return x


def _check_pair(a, b) -> tuple[np.ndarray, np.ndarray]:
    a, b = as_point(a), as_point(b)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(f"points have dimensions {a.shape[0]} and {b.shape[0]}")
    return a, b


@dataclass(frozen=True)
class Euclidean:
    name: str = "euclidean"

    def __call__(self, a, b) -> float:
        a, b = _check_pair(a, b)
        return float(np.sqrt(((a - b) ** 2).sum()))

    def to_set(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray:
        return np.sqrt(((reference - query) ** 2).sum(axis=1))  # (n,)


@dataclass(frozen=True)
class Manhattan:
    name: str = "manhattan"

    def __call__(self, a, b) -> float:
        a, b = _check_pair(a, b)
        return float(np.abs(a - b).sum())

    def to_set(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray:
        return np.abs(reference - query).sum(axis=1)


@dataclass(frozen=True)
class Chebyshev:
    name: str = "chebyshev"

    def __call__(self, a, b) -> float:
        a, b = _check_pair(a, b)
        return float(np.abs(a - b).max()) if a.size else 0.0

    def to_set(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray:
        if reference.shape[1] == 0:
            return np.zeros(reference.shape[0])
        return np.abs(reference - query).max(axis=1)


@dataclass(frozen=True)
class Minkowski:
    """
    Order-p distance: (sum |a_i - b_i|^p)^(1/p). p=1 is Manhattan, p=2 Euclidean.
    """

    p: float = 2.0
    name: str = "minkowski"

    def __post_init__(self):
        if not self.p >= 1.0:
            raise ValueError(f"Minkowski order must be >= 1, got {self.p}")

    def __call__(self, a, b) -> float:
        a, b = _check_pair(a, b)
        return float((np.abs(a - b) ** self.p).sum() ** (1.0 / self.p))

    def to_set(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray:
        return (np.abs(reference - query) ** self.p).sum(axis=1) ** (1.0 / self.p)


@dataclass(frozen=True)
class PairwiseMetric:
    """
    Adapts any `distance(a, b)` callable; `to_set` falls back to one call per reference row.
    """

    fn: Callable[[np.ndarray, np.ndarray], float]
    name: str = "custom"

    def __call__(self, a, b) -> float:
        a, b = _check_pair(a, b)
        return float(self.fn(a, b))

    def to_set(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray:
        return np.array([self(query, row) for row in reference], dtype=np.float64)


_REGISTRY: Dict[str, DistanceMetric] = {
    "euclidean": Euclidean(),
    "l2": Euclidean(),
    "manhattan": Manhattan(),
    "l1": Manhattan(),
    "cityblock": Manhattan(),
    "chebyshev": Chebyshev(),
    "minkowski": Minkowski(),
}


def available_metrics() -> list[str]:
    return sorted(_REGISTRY)


def get_metric(metric: str | DistanceMetric) -> DistanceMetric:
    """
    Resolve a metric name ("euclidean", "manhattan", ...), pass an instance through,
    or wrap a plain `distance(a, b)` callable in PairwiseMetric.
    """
    if isinstance(metric, str):
        try:
            return _REGISTRY[metric.strip().lower()]
        except KeyError:
            raise UnknownMetric(
                f"unknown metric {metric!r}; choose one of {available_metrics()}"
            ) from None
    if isinstance(metric, DistanceMetric):
        return metric
    if callable(metric):
        name = getattr(metric, "name", None) or getattr(metric, "__name__", None) or type(metric).__name__.lower()
        return PairwiseMetric(metric, name=str(name))
    raise UnknownMetric(f"not a distance metric: {metric!r}")

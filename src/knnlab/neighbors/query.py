# src/knnlab/neighbors/query.py
"""
Brute-force KNN for a single query point.

distances_to_set -> select_k_nearest -> mean_label | majority_vote, composed by `query`.
Everything here is a pure function of its inputs; no module state, no global RNG.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Sequence, Set

import numpy as np

from .errors import (
    DimensionMismatch,
    EmptyNeighborSet,
    EmptyReferenceSet,
    InvalidK,
    LabelCountMismatch,
    NonFiniteInput,
)
from .metrics import DistanceMetric, as_point, get_metric

log = logging.getLogger("knnlab.neighbors")


class Mode(str, Enum):
    regression = "regression"
    classification = "classification"


# -------------------------------
# Validation
# -------------------------------


def as_reference(reference) -> np.ndarray:
    X = np.asarray(reference, dtype=np.float64)
    if (X.ndim == 2 and X.shape[0] == 0) or (X.ndim == 1 and X.size == 0):
        raise EmptyReferenceSet("reference set has no points")
    if X.ndim != 2:
        raise DimensionMismatch(f"reference set must be (n, p), got shape {X.shape}")
    if not np.isfinite(X).all():
        raise NonFiniteInput("reference set contains NaN or inf")
    return X


def check_k(k: int, n: int) -> int:
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidK(f"k must be an integer, got {k!r}")
    if not 1 <= k <= n:
        raise InvalidK(f"k must be in [1, {n}], got {k}")
    return int(k)


def _check_query(q: np.ndarray, X: np.ndarray) -> None:
    if q.shape[0] != X.shape[1]:
        raise DimensionMismatch(
            f"query has dimension {q.shape[0]}, reference points have {X.shape[1]}"
        )


def _as_labels(labels, n: int) -> np.ndarray:
    y = np.asarray(labels).ravel()
    if y.shape[0] != n:
        raise LabelCountMismatch(f"{y.shape[0]} labels for {n} reference points")
    return y


# -------------------------------
# Distances and selection
# -------------------------------


def distances_to_set(point, reference, metric: str | DistanceMetric = "euclidean") -> np.ndarray:
    """
    Distance from `point` to every row of `reference`; entry i belongs to reference row i.
    """
    metric = get_metric(metric)
    X = as_reference(reference)
    q = as_point(point)
    _check_query(q, X)
    return metric.to_set(q, X)


def _frozen(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class NeighborResult:
    indices: np.ndarray  # ascending reference indices
    distances: np.ndarray  # distances[j] belongs to indices[j]
    k: int
    threshold: float  # k-th smallest distance
    labels: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return int(self.indices.shape[0])

    @property
    def n_ties(self) -> int:
        """How many extra neighbors the boundary tie pulled in beyond k."""
        return len(self) - self.k

    def index_set(self) -> Set[int]:
        return set(self.indices.tolist())

    def distance_map(self) -> Dict[int, float]:
        return dict(zip(self.indices.tolist(), self.distances.tolist()))

    def label_map(self) -> Dict[int, Any]:
        if self.labels is None:
            return {}
        return dict(zip(self.indices.tolist(), self.labels.tolist()))

    def by_distance(self) -> np.ndarray:
        """Selected indices ordered nearest first (stable on equal distances)."""
        return self.indices[np.argsort(self.distances, kind="stable")]


def select_k_nearest(distances, k: int, labels=None) -> NeighborResult:
    """
    Tie-inclusive selection: sort once to find the k-th smallest distance, then keep
    every index whose distance is <= that threshold. Ties at the boundary therefore
    return more than k neighbors.
    """
    d = np.asarray(distances, dtype=np.float64).ravel()
    k = check_k(k, d.shape[0])
    if not np.isfinite(d).all():
        raise NonFiniteInput("distances contain NaN or inf")
    threshold = float(np.sort(d)[k - 1])
    idx = np.flatnonzero(d <= threshold)
    y = None
    if labels is not None:
        y = _frozen(_as_labels(labels, d.shape[0])[idx])
    return NeighborResult(
        indices=_frozen(idx),
        distances=_frozen(d[idx]),
        k=k,
        threshold=threshold,
        labels=y,
    )


# -------------------------------
# Aggregation
# -------------------------------


def mean_label(labels: Sequence[float]) -> float:
    y = np.asarray(labels, dtype=np.float64).ravel()
    if y.size == 0:
        raise EmptyNeighborSet("cannot average an empty neighbor set")
    return float(y.mean())


@dataclass(frozen=True)
class Vote:
    label: Hashable
    count: int
    counts: Dict[Hashable, int] = field(default_factory=dict)  # in first-seen order

    @property
    def tied(self) -> list:
        return [lab for lab, c in self.counts.items() if c == self.count]


def majority_vote(labels: Sequence[Hashable]) -> Vote:
    """
    Plurality vote. Among labels tied for the top count, the one that occurs first
    in `labels` wins; neighbors arrive in ascending reference-index order, so this is
    "first label encountered in index order".
    """
    seq = labels.tolist() if isinstance(labels, np.ndarray) else list(labels)
    if not seq:
        raise EmptyNeighborSet("cannot vote over an empty neighbor set")
    counts: Dict[Hashable, int] = {}
    for lab in seq:
        counts[lab] = counts.get(lab, 0) + 1
    best, best_count = None, 0
    for lab, c in counts.items():
        if c > best_count:  # strict: earlier label keeps a tie
            best, best_count = lab, c
    return Vote(label=best, count=best_count, counts=counts)


# -------------------------------
# Top-level query
# -------------------------------


@dataclass(frozen=True, eq=False)
class QueryResult:
    prediction: Any  # float for regression, a label for classification
    mode: Mode
    neighbors: NeighborResult
    vote: Optional[Vote] = None

    @property
    def neighbor_indices(self) -> Set[int]:
        return self.neighbors.index_set()

    @property
    def neighbor_distances(self) -> Dict[int, float]:
        return self.neighbors.distance_map()

    @property
    def neighbor_labels(self) -> Dict[int, Any]:
        return self.neighbors.label_map()


def query(
    point,
    reference_x,
    reference_y,
    k: int,
    metric: str | DistanceMetric = "euclidean",
    mode: str | Mode = Mode.regression,
) -> QueryResult:
    """
    Predict for one point from its k nearest reference points.

    All inputs are validated before any distance is computed: UnknownMetric,
    EmptyReferenceSet, DimensionMismatch, NonFiniteInput, LabelCountMismatch, InvalidK.
    """
    metric = get_metric(metric)
    mode = Mode(mode)
    X = as_reference(reference_x)
    q = as_point(point)
    _check_query(q, X)
    y = _as_labels(reference_y, X.shape[0])
    k = check_k(k, X.shape[0])

    d = metric.to_set(q, X)
    nb = select_k_nearest(d, k, y)
    log.debug(
        "query n=%d p=%d k=%d metric=%s selected=%d threshold=%.6g",
        X.shape[0], X.shape[1], k, metric.name, len(nb), nb.threshold,
    )

    if mode is Mode.regression:
        return QueryResult(prediction=mean_label(nb.labels), mode=mode, neighbors=nb)
    vote = majority_vote(nb.labels)
    return QueryResult(prediction=vote.label, mode=mode, neighbors=nb, vote=vote)

import math

import numpy as np
import pytest

from knnlab.datasets.toy import make_additive_regression
from knnlab.neighbors import (
    DimensionMismatch,
    EmptyNeighborSet,
    EmptyReferenceSet,
    Euclidean,
    InvalidK,
    LabelCountMismatch,
    Mode,
    NonFiniteInput,
    majority_vote,
    mean_label,
    query,
    select_k_nearest,
)


class CountingEuclidean(Euclidean):
    """Euclidean that records how often distances were computed."""

    def __init__(self):
        object.__setattr__(self, "calls", 0)

    def to_set(self, query, reference):
        object.__setattr__(self, "calls", self.calls + 1)
        return super().to_set(query, reference)


# -------------------------------
# Selection
# -------------------------------


def test_select_exactly_k_when_distinct():
    nb = select_k_nearest([3.0, 1.0, 2.0, 5.0], k=2)
    assert nb.indices.tolist() == [1, 2]
    assert nb.distances.tolist() == [1.0, 2.0]
    assert nb.threshold == 2.0
    assert len(nb) == 2 and nb.n_ties == 0


def test_select_random_distinct_sizes():
    rng = np.random.default_rng(0)
    d = rng.random(50)
    for k in (1, 7, 25, 50):
        nb = select_k_nearest(d, k)
        assert len(nb) == k
        assert set(nb.indices.tolist()) == set(np.argsort(d)[:k].tolist())


def test_select_includes_boundary_ties():
    nb = select_k_nearest([1.0, 2.0, 2.0, 3.0], k=2)
    assert nb.indices.tolist() == [0, 1, 2]
    assert len(nb) == 3 and nb.n_ties == 1


def test_tie_at_kth_rank_geometric():
    # two points at distance 1 from the origin share ranks 2 and 3
    X = np.array([[1.0, 0.0], [0.0, 1.0], [3.0, 0.0], [0.0, 0.5]])
    y = np.array([10.0, 20.0, 30.0, 40.0])
    res = query([0.0, 0.0], X, y, k=2, mode="regression")
    assert res.neighbor_indices == {0, 1, 3}
    assert res.prediction == pytest.approx((10.0 + 20.0 + 40.0) / 3)


def test_select_k_equals_n_and_k_one():
    d = [2.0, 1.0, 1.0, 4.0]
    assert select_k_nearest(d, k=4).indices.tolist() == [0, 1, 2, 3]
    assert select_k_nearest(d, k=1).indices.tolist() == [1, 2]
    assert select_k_nearest([2.0, 0.5, 1.0], k=1).indices.tolist() == [1]


@pytest.mark.parametrize("k", [0, 5, -1, 2.5, True])
def test_select_invalid_k(k):
    with pytest.raises(InvalidK):
        select_k_nearest([1.0, 2.0, 3.0, 4.0], k=k)


def test_select_carries_labels():
    nb = select_k_nearest([0.3, 0.1, 0.2], k=2, labels=["a", "b", "c"])
    assert nb.label_map() == {1: "b", 2: "c"}
    assert nb.distance_map() == {1: 0.1, 2: 0.2}
    assert nb.by_distance().tolist() == [1, 2]
    with pytest.raises(LabelCountMismatch):
        select_k_nearest([0.3, 0.1, 0.2], k=2, labels=[1, 2])


def test_neighbor_result_is_read_only():
    nb = select_k_nearest([0.3, 0.1, 0.2], k=2, labels=[1, 2, 3])
    for arr in (nb.indices, nb.distances, nb.labels):
        assert not arr.flags.writeable


# -------------------------------
# Aggregation
# -------------------------------


def test_mean_label():
    assert mean_label([1, 2, 3, 4, 5]) == 3.0
    with pytest.raises(EmptyNeighborSet):
        mean_label([])


def test_majority_vote():
    v = majority_vote([7, 7, 7, 1, 1])
    assert v.label == 7 and v.count == 3
    assert v.counts == {7: 3, 1: 2}
    assert majority_vote(np.array(["b", "a", "a"])).label == "a"


def test_majority_vote_tie_goes_to_first_encountered():
    v = majority_vote([3, 1, 1, 3])
    assert v.label == 3
    assert v.tied == [3, 1]
    assert majority_vote([1, 3, 3, 1]).label == 1
    assert majority_vote([9, 2, 5]).label == 9


def test_majority_vote_empty():
    with pytest.raises(EmptyNeighborSet):
        majority_vote([])


# -------------------------------
# Top-level query
# -------------------------------


def test_query_regression_mean_all():
    X = np.arange(5, dtype=float).reshape(-1, 1)
    res = query([2.2], X, [1, 2, 3, 4, 5], k=5)
    assert res.mode is Mode.regression
    assert res.prediction == 3.0
    assert res.neighbor_indices == {0, 1, 2, 3, 4}


def test_query_classification():
    X = np.array([[0.0], [0.1], [0.2], [5.0], [5.1], [9.0]])
    y = np.array([7, 7, 7, 1, 1, 4])
    res = query([0.05], X, y, k=5, metric="manhattan", mode="classification")
    assert res.prediction == 7
    assert res.vote.counts == {7: 3, 1: 2}
    assert res.neighbor_labels == {0: 7, 1: 7, 2: 7, 3: 1, 4: 1}
    assert set(res.neighbor_distances) == res.neighbor_indices


def test_query_classification_tie_break_is_index_order():
    # four equidistant neighbors, two labels with two votes each
    X = np.array([[1.0, 0.0], [0.0, 1.0], [-1.0, 0.0], [0.0, -1.0]])
    res = query([0.0, 0.0], X, [5, 2, 2, 5], k=4, mode=Mode.classification)
    assert res.prediction == 5
    res = query([0.0, 0.0], X, [2, 5, 5, 2], k=4, mode=Mode.classification)
    assert res.prediction == 2


@pytest.mark.parametrize("k", [0, 4])
def test_query_invalid_k_computes_nothing(k):
    metric = CountingEuclidean()
    X = np.zeros((3, 2))
    with pytest.raises(InvalidK):
        query([0.0, 0.0], X, [1, 2, 3], k=k, metric=metric)
    assert metric.calls == 0
    query([0.0, 0.0], X, [1, 2, 3], k=1, metric=metric)
    assert metric.calls == 1


def test_query_validation_errors():
    X = np.zeros((3, 2))
    with pytest.raises(DimensionMismatch):
        query([0.0, 0.0, 0.0], X, [1, 2, 3], k=1)
    with pytest.raises(LabelCountMismatch):
        query([0.0, 0.0], X, [1, 2], k=1)
    with pytest.raises(EmptyReferenceSet):
        query([0.0, 0.0], np.empty((0, 2)), [], k=1)
    with pytest.raises(ValueError):
        query([0.0, 0.0], X, [1, 2, 3], k=1, mode="ranking")


def _reference_knn_regression(x0, X, y, k):
    d = [math.sqrt(sum((a - b) ** 2 for a, b in zip(x0, row))) for row in X]
    order = sorted(range(len(d)), key=lambda i: d[i])[:k]
    return sum(y[i] for i in order) / k


def test_end_to_end_matches_reference_p3():
    rng = np.random.default_rng(598)
    data = make_additive_regression(rng, n=500)
    x0 = np.array([0.5, -0.2, 1.0])
    res = query(x0, data.X, data.y, k=21, metric="euclidean", mode="regression")
    expected = _reference_knn_regression(x0.tolist(), data.X.tolist(), data.y.tolist(), 21)
    assert len(res.neighbors) == 21
    assert abs(res.prediction - expected) <= 1e-9


def test_repeated_queries_are_independent():
    rng = np.random.default_rng(3)
    X = rng.normal(size=(40, 3))
    y = rng.normal(size=40)
    first = query(X[0], X, y, k=5).prediction
    for _ in range(3):
        query(rng.normal(size=3), X, y, k=9, metric="manhattan")
    assert query(X[0], X, y, k=5).prediction == first


def test_query_nan_query_rejected_before_distances():
    metric = CountingEuclidean()
    with pytest.raises(NonFiniteInput):
        query([np.nan, 0.0], [[1.0, 0.0], [0.0, 1.0]], [1.0, 2.0], k=1, metric=metric)
    assert metric.calls == 0


def test_query_nan_reference_rejected_before_distances():
    metric = CountingEuclidean()
    with pytest.raises(NonFiniteInput):
        query([0.0, 0.0], [[1.0, 0.0], [np.nan, 1.0]], [1.0, 2.0], k=1, metric=metric)
    with pytest.raises(NonFiniteInput):
        query([0.0, 0.0], [[1.0, np.inf], [0.0, 1.0]], [1.0, 2.0], k=1, metric=metric)
    assert metric.calls == 0


def test_select_rejects_non_finite_distances():
    with pytest.raises(NonFiniteInput):
        select_k_nearest([0.5, np.nan, 1.0], k=1)

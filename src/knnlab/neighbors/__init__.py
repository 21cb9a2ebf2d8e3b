# Brute-force KNN primitives. Explicit re-exports for a clean public API.

from .errors import (
    DimensionMismatch as DimensionMismatch,
    EmptyNeighborSet as EmptyNeighborSet,
    EmptyReferenceSet as EmptyReferenceSet,
    InvalidK as InvalidK,
    KNNError as KNNError,
    LabelCountMismatch as LabelCountMismatch,
    NonFiniteInput as NonFiniteInput,
    UnknownMetric as UnknownMetric,
)
from .metrics import (
    Chebyshev as Chebyshev,
    DistanceMetric as DistanceMetric,
    Euclidean as Euclidean,
    Manhattan as Manhattan,
    Minkowski as Minkowski,
    PairwiseMetric as PairwiseMetric,
    available_metrics as available_metrics,
    get_metric as get_metric,
)
from .query import (
    Mode as Mode,
    NeighborResult as NeighborResult,
    QueryResult as QueryResult,
    Vote as Vote,
    distances_to_set as distances_to_set,
    majority_vote as majority_vote,
    mean_label as mean_label,
    query as query,
    select_k_nearest as select_k_nearest,
)

__all__ = [
    "KNNError",
    "DimensionMismatch",
    "EmptyReferenceSet",
    "InvalidK",
    "EmptyNeighborSet",
    "LabelCountMismatch",
    "NonFiniteInput",
    "UnknownMetric",
    "DistanceMetric",
    "Euclidean",
    "Manhattan",
    "Chebyshev",
    "Minkowski",
    "PairwiseMetric",
    "available_metrics",
    "get_metric",
    "Mode",
    "NeighborResult",
    "QueryResult",
    "Vote",
    "distances_to_set",
    "select_k_nearest",
    "mean_label",
    "majority_vote",
    "query",
]

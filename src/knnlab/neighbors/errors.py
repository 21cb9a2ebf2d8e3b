# src/knnlab/neighbors/errors.py
from __future__ import annotations


class KNNError(ValueError):
    """Base class for every input-validation failure raised by knnlab."""


class DimensionMismatch(KNNError):
    pass


class EmptyReferenceSet(KNNError):
    pass


class InvalidK(KNNError):
    pass


class EmptyNeighborSet(KNNError):
    pass


class LabelCountMismatch(KNNError):
    pass


class UnknownMetric(KNNError):
    pass


class NonFiniteInput(KNNError):
    pass

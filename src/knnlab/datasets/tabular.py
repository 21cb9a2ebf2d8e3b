from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd


@dataclass
class LabeledData:
    X: np.ndarray  # (n, p) float64 features
    y: np.ndarray  # (n,) labels
    feature_names: List[str]

    def __len__(self) -> int:
        return int(self.X.shape[0])

    def split(self, n_train: int) -> tuple["LabeledData", "LabeledData"]:
        """First n_train rows vs the rest, order preserved."""
        if not 0 < n_train < len(self):
            raise ValueError(f"n_train must be in (0, {len(self)}), got {n_train}")
        a = LabeledData(self.X[:n_train], self.y[:n_train], self.feature_names)
        b = LabeledData(self.X[n_train:], self.y[n_train:], self.feature_names)
        return a, b


def load_labeled_csv(
    path: Path | str,
    label_column: str = "label",
    limit: Optional[int] = None,
    scale: Optional[float] = None,
) -> LabeledData:
    """
    Read a local table with one label column and numeric feature columns
    (e.g. digit images flattened to pixel0..pixelN). `scale` divides features
    (255.0 maps 8-bit pixels into [0, 1]).
    """
    df = pd.read_csv(path, nrows=limit)
    if label_column not in df.columns:
        raise ValueError(f"{path}: no column {label_column!r} (have {list(df.columns)[:5]}...)")
    feats = df.drop(columns=[label_column])
    non_numeric = [c for c in feats.columns if not pd.api.types.is_numeric_dtype(feats[c])]
    if non_numeric:
        raise ValueError(f"{path}: non-numeric feature columns {non_numeric}")
    X = feats.to_numpy(dtype=np.float64)
    if scale:
        X = X / float(scale)
    return LabeledData(X=X, y=df[label_column].to_numpy(), feature_names=list(feats.columns))

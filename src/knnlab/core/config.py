from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from knnlab.neighbors.errors import InvalidK
from knnlab.neighbors.metrics import get_metric
from knnlab.neighbors.query import Mode

from .io import load_yaml


@dataclass
class KNNConfig:
    k: int = 5
    metric: str = "euclidean"  # see knnlab.neighbors.available_metrics()
    mode: str = "classification"  # or "regression"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "KNNConfig":
        known = {f.name for f in fields(cls)}
        extra = set(d) - known
        if extra:
            raise ValueError(f"Unknown config keys: {sorted(extra)}")
        return cls(**d).validate()

    @classmethod
    def from_yaml(cls, path: Path | str) -> "KNNConfig":
        return cls.from_dict(load_yaml(path) or {})

    def override(self, **kw: Any) -> "KNNConfig":
        """Copy with every non-None keyword applied (CLI flags over file values)."""
        d = asdict(self)
        d.update({k: v for k, v in kw.items() if v is not None})
        return type(self).from_dict(d)

    def validate(self) -> "KNNConfig":
        # upper bound of k depends on the reference set and is checked per query
        if isinstance(self.k, bool) or not isinstance(self.k, int) or self.k < 1:
            raise InvalidK(f"k must be a positive integer, got {self.k!r}")
        get_metric(self.metric)
        Mode(self.mode)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

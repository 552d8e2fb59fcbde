from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
import numpy as np


@dataclass(slots=True)
class ElevationStats:
    """
    Online min/max/mean using Welford's incremental mean.

    `update()` merges a whole batch at once (Chan et al.), so a canvas can be
    folded in row by row without a Python loop per pixel.
    """
    minimum: float = float("inf")
    maximum: float = float("-inf")
    mean: float = 0.0
    count: int = 0

    def add(self, x: float) -> None:
        """Per-value Welford step; `update()` must agree with folding values in one by one."""
        self.count += 1
        self.mean += (x - self.mean) / self.count
        self.minimum = min(self.minimum, x)
        self.maximum = max(self.maximum, x)

    def update(self, values: np.ndarray) -> None:
        values = np.asarray(values).ravel()
        n_b = int(values.size)
        if n_b == 0:
            return
        batch_mean = float(values.mean(dtype=np.float64))
        total = self.count + n_b
        self.mean += (batch_mean - self.mean) * n_b / total
        self.count = total
        self.minimum = min(self.minimum, float(values.min()))
        self.maximum = max(self.maximum, float(values.max()))

    @property
    def span(self) -> float:
        return self.maximum - self.minimum if self.count else 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"min": self.minimum, "max": self.maximum, "mean": self.mean, "count": self.count}


def round_half_up(a: np.ndarray) -> np.ndarray:
    """Round non-negative values to nearest, halves away from zero (np.rint rounds halves to even)."""
    return np.floor(np.asarray(a, dtype=np.float64) + 0.5)

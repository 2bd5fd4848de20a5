from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict

import numpy as np
from sklearn.metrics import accuracy_score, mean_absolute_error, mean_squared_error


def _rmse(y_true: Any, y_pred: Any) -> float:
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


@dataclass(frozen=True)
class Measure:
    name: str
    fn: Callable[[Any, Any], float]
    lower_is_better: bool

    def __call__(self, y_true: Any, y_pred: Any) -> float:
        return float(self.fn(np.asarray(y_true).ravel(), np.asarray(y_pred).ravel()))

    def better(self, a: float, b: float) -> bool:
        """True if score `a` beats score `b`."""
        return a < b if self.lower_is_better else a > b


MEASURES: Dict[str, Measure] = {
    "rmse": Measure("rmse", _rmse, lower_is_better=True),
    "mae": Measure("mae", mean_absolute_error, lower_is_better=True),
    "accuracy": Measure("accuracy", accuracy_score, lower_is_better=False),
}


def get_measure(name: str) -> Measure:
    try:
        return MEASURES[name]
    except KeyError:
        raise ValueError(f"Unknown measure {name!r}; expected one of {sorted(MEASURES)}") from None


def default_measure_for(task: str) -> Measure:
    return MEASURES["accuracy"] if task == "classification" else MEASURES["rmse"]

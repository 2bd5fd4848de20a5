from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np

from mlserial.contracts.model_configs import ModelConfig, is_supervised
from mlserial.core.data import ncols
from mlserial.errors import InvalidArgumentError
from mlserial.network.nodes import AbstractNode


def check_data_arity(model: ModelConfig, data: Sequence[Any]) -> None:
    """Validate the data a machine for ``model`` is about to be bound to.

    Supervised handles take ``(X,)`` (predict-only) or ``(X, y)``; transformers
    take ``(X,)``. Node arguments are accepted without inspection.
    """
    allowed = (1, 2) if is_supervised(model) else (1,)
    if len(data) not in allowed:
        raise InvalidArgumentError(
            f"Model {model.algo!r} ({model.task_kind()}) takes {' or '.join(map(str, allowed))} "
            f"data arguments, got {len(data)}."
        )

    X = data[0]
    if isinstance(X, AbstractNode):
        return

    X_arr = np.asarray(X)
    if X_arr.ndim != 2:
        raise InvalidArgumentError(f"X must be a 2-D table, got an array with ndim={X_arr.ndim}.")
    if not np.issubdtype(X_arr.dtype, np.number):
        raise InvalidArgumentError(f"X must be numeric, got dtype {X_arr.dtype}.")

    if len(data) == 2 and not isinstance(data[1], AbstractNode):
        y_arr = np.asarray(data[1])
        if y_arr.ndim != 1:
            raise InvalidArgumentError(f"y must be 1-D, got ndim={y_arr.ndim}.")
        if y_arr.shape[0] != X_arr.shape[0]:
            raise InvalidArgumentError(
                f"X and y disagree on the number of rows ({X_arr.shape[0]} vs {y_arr.shape[0]})."
            )


def check_feature_count(X: Any, expected: Optional[int], *, algo: str) -> None:
    if expected is None or isinstance(X, AbstractNode):
        return
    got = ncols(X)
    if got is not None and got != int(expected):
        raise InvalidArgumentError(f"Model {algo!r} was trained on {expected} features; new data has {got}.")


__all__ = ["check_data_arity", "check_feature_count"]

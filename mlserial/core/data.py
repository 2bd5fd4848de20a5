"""Row/column helpers shared by learners and network nodes.

Node operations must be picklable, so these are plain module-level functions
(bound with :func:`functools.partial` where a node needs fixed rows).
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np


def as_2d(X: Any) -> np.ndarray:
    """Return X as a 2-D array; a 1-D input becomes a single column."""
    arr = np.asarray(X)
    if arr.ndim == 1:
        return arr.reshape(-1, 1)
    return arr


def nrows(X: Any) -> int:
    return int(np.asarray(X).shape[0])


def ncols(X: Any) -> Optional[int]:
    arr = np.asarray(X)
    if arr.ndim < 2:
        return None
    return int(arr.shape[1])


def select_rows(X: Any, rows: Optional[Sequence[int]] = None) -> Any:
    if rows is None:
        return X
    iloc = getattr(X, "iloc", None)
    if iloc is not None:
        return iloc[list(rows)]
    return np.asarray(X)[np.asarray(rows, dtype=int)]


def concat_rows(*parts: Any) -> np.ndarray:
    return np.concatenate([np.asarray(p) for p in parts], axis=0)


def column_stack(*columns: Any) -> np.ndarray:
    return np.column_stack([np.asarray(c) for c in columns])


__all__ = ["as_2d", "nrows", "ncols", "select_rows", "concat_rows", "column_stack"]

from __future__ import annotations

from importlib import import_module
from typing import Any


def import_xgboost() -> Any:
    """Import xgboost lazily.

    This is the single dependency boundary for xgboost: the rest of the package
    imports cleanly without it, and only xgboost-backed handles need it.
    """

    try:
        return import_module("xgboost")
    except Exception as e:
        raise ImportError(
            "XGBoost is not installed. Install the optional dependency 'xgboost' to train or restore "
            "xgboost-backed machines."
        ) from e

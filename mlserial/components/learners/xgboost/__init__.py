"""XGBoost-backed learners.

This package exposes:

  - XGBoostRegressorLearner (fit / predict on raw boosters)
  - XGBoostHooks (side-file save / restore)
  - import_xgboost (lazy dependency boundary)
"""

from __future__ import annotations

from .hooks import XGBoostHooks
from .learner import XGBoostRegressorLearner, booster_params
from .vendor import import_xgboost

__all__ = ["XGBoostHooks", "XGBoostRegressorLearner", "booster_params", "import_xgboost"]

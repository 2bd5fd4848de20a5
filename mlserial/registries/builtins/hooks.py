"""Built-in serialization hook registrations.

Handles not listed here persist their fitresult as-is (composites are
handled by the network rewrite in :mod:`mlserial.io.graph`).
"""

from __future__ import annotations

from mlserial.registries.hooks import register_hooks

from mlserial.components.learners.ensembles import EnsembleHooks
from mlserial.components.learners.tuning import TunedModelHooks
from mlserial.components.learners.xgboost import XGBoostHooks


register_hooks("xgboost_regressor")(XGBoostHooks())
register_hooks("tuned_model")(TunedModelHooks())
register_hooks("ensemble")(EnsembleHooks())

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from mlserial.contracts.model_configs import XGBoostRegressorConfig
from mlserial.core.data import as_2d
from mlserial.errors import InvalidArgumentError

from ..common import check_data_arity
from .vendor import import_xgboost


def booster_params(cfg: XGBoostRegressorConfig) -> Dict[str, Any]:
    """Translate the handle into native ``xgboost.train`` parameters."""
    return dict(
        objective="reg:squarederror",
        eta=cfg.learning_rate,
        max_depth=cfg.max_depth,
        subsample=cfg.subsample,
        reg_lambda=cfg.reg_lambda,
        reg_alpha=cfg.reg_alpha,
        seed=cfg.random_state,
        nthread=cfg.n_jobs,
        verbosity=0,
    )


@dataclass(frozen=True)
class XGBoostRegressorLearner:
    """Learner whose fitresult is a raw ``xgboost.Booster``.

    The booster wraps state owned by the xgboost C library; its save/restore
    hooks write it to a side file instead of pickling it into the envelope.
    """

    def fit(
        self,
        model: XGBoostRegressorConfig,
        verbosity: int,
        X: Any,
        y: Optional[Any] = None,
    ) -> Tuple[Any, Any, Any]:
        if y is None:
            raise InvalidArgumentError(f"Model {model.algo!r} is supervised; fitting needs (X, y).")
        xgb = import_xgboost()
        X_arr = as_2d(X).astype(float)
        dtrain = xgb.DMatrix(X_arr, label=np.asarray(y, dtype=float).ravel())
        booster = xgb.train(booster_params(model), dtrain, num_boost_round=model.n_estimators)
        report = {
            "n_features_in": int(X_arr.shape[1]),
            "n_samples": int(X_arr.shape[0]),
            "n_boosted_rounds": int(booster.num_boosted_rounds()),
        }
        return booster, None, report

    def predict(self, model: XGBoostRegressorConfig, fitresult: Any, X: Any) -> Any:
        xgb = import_xgboost()
        return fitresult.predict(xgb.DMatrix(as_2d(X).astype(float)))

    def fitted_params(self, model: XGBoostRegressorConfig, fitresult: Any) -> Dict[str, Any]:
        return {
            "booster": fitresult,
            "feature_importance": fitresult.get_score(importance_type="gain"),
        }

    def check_data(self, model: XGBoostRegressorConfig, *data: Any) -> None:
        check_data_arity(model, data)

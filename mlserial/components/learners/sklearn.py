# mlserial/components/learners/sklearn.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import inspect

import numpy as np

from mlserial.contracts.model_configs import ModelConfig, is_supervised
from mlserial.core.data import as_2d
from mlserial.errors import InvalidArgumentError

from .common import check_data_arity


def _filtered_kwargs(estimator_cls: type, cfg_obj: Any, *, exclude: set[str] = {"algo"}) -> Dict[str, Any]:
    """Dump cfg to dict, drop None, remove 'algo', and keep only kwargs accepted by estimator."""
    raw = cfg_obj.model_dump(exclude=exclude, exclude_none=True)
    sig = inspect.signature(estimator_cls)
    allowed = set(sig.parameters.keys())
    return {k: v for k, v in raw.items() if k in allowed}


def _listify(v: Any) -> Any:
    if isinstance(v, np.ndarray):
        return v.tolist()
    if isinstance(v, np.generic):
        return v.item()
    return v


@dataclass(frozen=True)
class SklearnLearner:
    """Learner for handles backed by a scikit-learn estimator class.

    The fitresult is the fitted estimator itself; it pickles natively, so these
    handles need no serialization hooks.
    """

    estimator_cls: type

    def make_estimator(self, model: ModelConfig) -> Any:
        return self.estimator_cls(**_filtered_kwargs(self.estimator_cls, model))

    def fit(self, model: ModelConfig, verbosity: int, X: Any, y: Optional[Any] = None) -> Tuple[Any, Any, Any]:
        est = self.make_estimator(model)
        X_arr = as_2d(X)
        if is_supervised(model):
            if y is None:
                raise InvalidArgumentError(f"Model {model.algo!r} is supervised; fitting needs (X, y).")
            est.fit(X_arr, np.asarray(y).ravel())
        else:
            est.fit(X_arr)
        return est, None, self._report(est, X_arr)

    @staticmethod
    def _report(est: Any, X_arr: np.ndarray) -> Dict[str, Any]:
        report: Dict[str, Any] = {
            "n_features_in": int(getattr(est, "n_features_in_", X_arr.shape[1])),
            "n_samples": int(X_arr.shape[0]),
        }
        for attr, key in (
            ("feature_importances_", "feature_importances"),
            ("classes_", "classes"),
            ("explained_variance_ratio_", "explained_variance_ratio"),
        ):
            if hasattr(est, attr):
                report[key] = _listify(getattr(est, attr))
        return report

    def predict(self, model: ModelConfig, fitresult: Any, X: Any) -> Any:
        if not hasattr(fitresult, "predict"):
            raise InvalidArgumentError(f"Model {model.algo!r} does not support predict().")
        return fitresult.predict(as_2d(X))

    def predict_proba(self, model: ModelConfig, fitresult: Any, X: Any) -> Any:
        if not hasattr(fitresult, "predict_proba"):
            raise InvalidArgumentError(f"Model {model.algo!r} does not support predict_proba().")
        return fitresult.predict_proba(as_2d(X))

    def transform(self, model: ModelConfig, fitresult: Any, X: Any) -> Any:
        if not hasattr(fitresult, "transform"):
            raise InvalidArgumentError(f"Model {model.algo!r} does not support transform().")
        return fitresult.transform(as_2d(X))

    def fitted_params(self, model: ModelConfig, fitresult: Any) -> Dict[str, Any]:
        # sklearn convention: learned attributes end with a single underscore
        return {
            k: v for k, v in vars(fitresult).items() if k.endswith("_") and not k.startswith("_")
        }

    def check_data(self, model: ModelConfig, *data: Any) -> None:
        check_data_arity(model, data)

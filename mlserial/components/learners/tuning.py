from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from sklearn.model_selection import KFold, ParameterGrid

from mlserial.contracts.composite_configs import TunedModelConfig
from mlserial.contracts.model_configs import ModelConfig
from mlserial.core.data import nrows, select_rows
from mlserial.core.measures import get_measure
from mlserial.core.rng import RngManager
from mlserial.errors import InvalidArgumentError
from mlserial.network.machines import Machine
from mlserial.registries.learners import get_learner

from .common import check_data_arity

logger = logging.getLogger(__name__)


def _to_py(v: Any) -> Any:
    if isinstance(v, np.generic):
        return v.item()
    return v


def cv_score(
    model: ModelConfig,
    X: Any,
    y: Any,
    folds: List[Tuple[np.ndarray, np.ndarray]],
    measure: str,
) -> float:
    learner = get_learner(model)
    m = get_measure(measure)
    scores = []
    for train, test in folds:
        fitresult, _, _ = learner.fit(model, 0, select_rows(X, train), select_rows(y, train))
        y_pred = learner.predict(model, fitresult, select_rows(X, test))
        scores.append(m(select_rows(y, test), y_pred))
    return float(np.mean(scores))


class TunedModelLearner:
    """Grid search with k-fold cross-validation.

    The fitresult is a :class:`Machine` for the best configuration trained on
    all rows; its serialization hooks sanitize and restore that machine.
    """

    def fit(
        self,
        model: TunedModelConfig,
        verbosity: int,
        X: Any,
        y: Optional[Any] = None,
    ) -> Tuple[Machine, Any, Any]:
        if y is None:
            raise InvalidArgumentError("Tuned models are supervised; fitting needs (X, y).")
        n = nrows(X)
        if n < model.n_folds:
            raise InvalidArgumentError(f"Tuning needs at least n_folds={model.n_folds} rows, got {n}.")

        rngm = RngManager(model.seed)
        kfold = KFold(n_splits=model.n_folds, shuffle=True, random_state=rngm.child_seed("tuning/folds"))
        folds = list(kfold.split(np.arange(n)))
        measure = get_measure(model.measure)

        history: List[Dict[str, Any]] = []
        best: Optional[Dict[str, Any]] = None
        for params in ParameterGrid(model.param_grid):
            params = {k: _to_py(v) for k, v in params.items()}
            candidate = model.model.model_copy(update=params)
            score = cv_score(candidate, X, y, folds, measure.name)
            entry = {"params": params, measure.name: score}
            history.append(entry)
            if best is None or measure.better(score, best[measure.name]):
                best = entry
            if verbosity > 0:
                logger.info("Tuning %s: %s -> %s=%.6g", model.model.algo, params, measure.name, score)

        assert best is not None
        best_model = model.model.model_copy(update=best["params"])
        best_mach = Machine(best_model, X, y).fit(verbosity=verbosity - 1)

        report = {
            "best_model": best_model,
            "best_params": best["params"],
            "best_score": best[measure.name],
            "measure": measure.name,
            "history": history,
        }
        cache = {"data": (X, y), "history": history}
        return best_mach, cache, report

    def predict(self, model: TunedModelConfig, fitresult: Machine, X: Any) -> Any:
        return fitresult.predict(X)

    def predict_proba(self, model: TunedModelConfig, fitresult: Machine, X: Any) -> Any:
        return fitresult.predict_proba(X)

    def transform(self, model: TunedModelConfig, fitresult: Machine, X: Any) -> Any:
        return fitresult.transform(X)

    def fitted_params(self, model: TunedModelConfig, fitresult: Machine) -> Dict[str, Any]:
        return {"best_model": fitresult.model, "best_fitted_params": fitresult.fitted_params()}

    def check_data(self, model: TunedModelConfig, *data: Any) -> None:
        check_data_arity(model, data)


class TunedModelHooks:
    """Sanitize the wrapped best machine on save; restore it in place on load."""

    def save(self, model: TunedModelConfig, fitresult: Machine, stem: Optional[str], **kwargs: Any) -> Machine:
        from mlserial.io.snapshot import snapshot_machine

        return snapshot_machine(fitresult, stem, **kwargs)

    def restore(self, model: TunedModelConfig, persisted: Machine, stem: Optional[str] = None) -> Machine:
        from mlserial.io.restore import restore_machine

        return restore_machine(persisted, stem)

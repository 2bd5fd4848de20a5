from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from mlserial.contracts.composite_configs import EnsembleModelConfig
from mlserial.contracts.model_configs import ModelConfig
from mlserial.core.data import as_2d, nrows, select_rows
from mlserial.core.rng import RngManager
from mlserial.errors import InvalidArgumentError
from mlserial.registries.learners import get_learner

from .common import check_data_arity

logger = logging.getLogger(__name__)


@dataclass
class WrappedEnsemble:
    """Fitted state of a bagged ensemble: one fitresult per member of ``atom``."""

    atom: ModelConfig
    ensemble: List[Any] = field(default_factory=list)


def _majority_vote(predictions: List[np.ndarray]) -> np.ndarray:
    stacked = np.column_stack([np.asarray(p).ravel() for p in predictions])
    out = []
    for row in stacked:
        values, counts = np.unique(row, return_counts=True)
        out.append(values[np.argmax(counts)])
    return np.asarray(out)


class EnsembleLearner:
    """Bagging without replacement.

    Each member trains on ``round(bagging_fraction * n)`` rows drawn by its
    own named generator. Regression predictions are averaged; classification
    uses a majority vote, and ``predict_proba`` averages member probabilities.
    """

    def fit(
        self,
        model: EnsembleModelConfig,
        verbosity: int,
        X: Any,
        y: Optional[Any] = None,
    ) -> Tuple[WrappedEnsemble, Any, Any]:
        atom = model.model
        learner = get_learner(atom)
        n = nrows(X)
        n_train = max(1, int(round(model.bagging_fraction * n)))

        members: List[Any] = []
        member_reports: List[Any] = []
        for i, gen in enumerate(RngManager(model.seed).member_generators(model.n)):
            rows = np.sort(gen.choice(n, size=n_train, replace=False))
            data = (select_rows(X, rows),) if y is None else (select_rows(X, rows), select_rows(y, rows))
            fitresult, _, rep = learner.fit(atom, verbosity - 1, *data)
            members.append(fitresult)
            member_reports.append(rep)
            if verbosity > 1:
                logger.info("Trained ensemble member %d/%d of %s.", i + 1, model.n, atom.algo)

        report = {
            "n_members": len(members),
            "n_train": n_train,
            "n_features_in": int(as_2d(X).shape[1]),
            "members": member_reports,
        }
        cache = {"data": (X, y)}
        return WrappedEnsemble(atom=atom, ensemble=members), cache, report

    def predict(self, model: EnsembleModelConfig, fitresult: WrappedEnsemble, X: Any) -> Any:
        learner = get_learner(fitresult.atom)
        predictions = [learner.predict(fitresult.atom, fr, X) for fr in fitresult.ensemble]
        if fitresult.atom.task_kind() == "classification":
            return _majority_vote(predictions)
        return np.mean(np.column_stack([np.asarray(p).ravel() for p in predictions]), axis=1)

    def predict_proba(self, model: EnsembleModelConfig, fitresult: WrappedEnsemble, X: Any) -> Any:
        learner = get_learner(fitresult.atom)
        method = getattr(learner, "predict_proba", None)
        if method is None or fitresult.atom.task_kind() != "classification":
            raise InvalidArgumentError(f"Model {model.algo!r} does not support predict_proba().")
        return np.mean([np.asarray(method(fitresult.atom, fr, X)) for fr in fitresult.ensemble], axis=0)

    def fitted_params(self, model: EnsembleModelConfig, fitresult: WrappedEnsemble) -> Dict[str, Any]:
        learner = get_learner(fitresult.atom)
        return {"ensemble": [learner.fitted_params(fitresult.atom, fr) for fr in fitresult.ensemble]}

    def check_data(self, model: EnsembleModelConfig, *data: Any) -> None:
        check_data_arity(model, data)


class EnsembleHooks:
    """Apply the atomic model's hooks to every member fitresult."""

    def save(
        self,
        model: EnsembleModelConfig,
        fitresult: WrappedEnsemble,
        stem: Optional[str],
        **kwargs: Any,
    ) -> WrappedEnsemble:
        from mlserial.io.snapshot import persistable_fitresult

        atom = fitresult.atom
        return WrappedEnsemble(
            atom=atom,
            ensemble=[persistable_fitresult(atom, fr, stem, **kwargs) for fr in fitresult.ensemble],
        )

    def restore(
        self,
        model: EnsembleModelConfig,
        persisted: WrappedEnsemble,
        stem: Optional[str] = None,
    ) -> WrappedEnsemble:
        from mlserial.io.restore import restored_fitresult

        atom = persisted.atom
        persisted.ensemble = [restored_fitresult(atom, fr, stem) for fr in persisted.ensemble]
        return persisted

from __future__ import annotations

from functools import partial
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.model_selection import KFold

from mlserial.contracts.composite_configs import StackConfig
from mlserial.core.data import column_stack, concat_rows, nrows, select_rows
from mlserial.core.measures import default_measure_for, get_measure
from mlserial.core.rng import RngManager
from mlserial.errors import InvalidArgumentError
from mlserial.network.machines import Machine
from mlserial.network.nodes import AbstractNode, Source, node
from mlserial.network.operations import fit_network, predict
from mlserial.network.signature import CompositeFitresult

from .composite import CompositeLearner


def member_scores(y: Any, *columns: Any, names: Sequence[str], measure: str) -> Dict[str, Dict[str, float]]:
    """Out-of-fold score of each stack member."""
    m = get_measure(measure)
    return {name: {measure: m(y, col)} for name, col in zip(names, columns)}


def _rows(X: Any, rows: np.ndarray) -> AbstractNode:
    return node(partial(select_rows, rows=rows), X)


class StackLearner(CompositeLearner):
    """Builds and trains the stacking network.

    Training edges: for every member and fold, a machine on the training rows
    predicts the held-out rows; the out-of-fold columns train the metalearner.
    Prediction path: members retrained on all rows -> column_stack -> metalearner.
    A ``cv_report`` report node scores each member's out-of-fold predictions.
    """

    def fit(
        self,
        model: StackConfig,
        verbosity: int,
        X: Any,
        y: Optional[Any] = None,
    ) -> Tuple[CompositeFitresult, Any, Any]:
        if y is None:
            raise InvalidArgumentError("Stack is supervised; fitting needs (X, y).")
        n = nrows(X)
        if n < model.n_folds:
            raise InvalidArgumentError(f"Stack needs at least n_folds={model.n_folds} rows, got {n}.")

        Xs, ys = Source(X), Source(y)
        rngm = RngManager(model.seed)
        kfold = KFold(n_splits=model.n_folds, shuffle=True, random_state=rngm.child_seed("stack/folds"))
        folds = list(kfold.split(np.arange(n)))

        y_oof = node(concat_rows, *[_rows(ys, test) for _, test in folds])

        oof_columns: List[AbstractNode] = []
        full_columns: List[AbstractNode] = []
        members: Dict[str, Machine] = {}
        for name, member in model.models.items():
            fold_predictions = []
            for train, test in folds:
                m = Machine(member, _rows(Xs, train), _rows(ys, train))
                fold_predictions.append(predict(m, _rows(Xs, test)))
            oof_columns.append(node(concat_rows, *fold_predictions))

            full = Machine(member, Xs, ys)
            members[name] = full
            full_columns.append(predict(full, Xs))

        meta = Machine(model.metalearner, node(column_stack, *oof_columns), y_oof)
        yhat = predict(meta, node(column_stack, *full_columns))

        measure = default_measure_for(model.task_kind()).name
        cv_report = node(partial(member_scores, names=tuple(model.models), measure=measure), y_oof, *oof_columns)

        fitresult = CompositeFitresult({"predict": yhat, "report": {"cv_report": cv_report}})
        fit_network(*fitresult.output_nodes(), verbosity=verbosity)
        fitresult.report_additions["cv_report"] = cv_report()

        report = {
            "cv_report": fitresult.report_additions["cv_report"],
            "members": {name: m.report for name, m in members.items()},
            "metalearner": meta.report,
        }
        cache = {"data": (X, y), "n_folds": model.n_folds}
        return fitresult, cache, report

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from mlserial.contracts.composite_configs import PipelineConfig
from mlserial.contracts.model_configs import is_supervised
from mlserial.core.data import as_2d
from mlserial.errors import InvalidArgumentError
from mlserial.network.machines import Machine
from mlserial.network.nodes import AbstractNode, Source, node
from mlserial.network.operations import fit_network, named_reports, predict, predict_proba, transform
from mlserial.network.signature import CompositeFitresult

from .composite import CompositeLearner


class PipelineLearner(CompositeLearner):
    """Chains steps into a network: ``X -> as_2d -> step_1 -> ... -> step_n``.

    Transformer steps contribute ``transform`` nodes, a supervised final step a
    ``predict`` node (plus ``predict_proba`` for classifiers).
    """

    def fit(
        self,
        model: PipelineConfig,
        verbosity: int,
        X: Any,
        y: Optional[Any] = None,
    ) -> Tuple[CompositeFitresult, Any, Any]:
        Xs = Source(X)
        ys = None if y is None else Source(y)

        W: AbstractNode = node(as_2d, Xs)
        machines: Dict[str, Machine] = {}
        signature: Dict[str, Any] = {}

        for name, step in zip(model.step_names(), model.steps):
            if is_supervised(step):
                if ys is None:
                    raise InvalidArgumentError(f"Pipeline ends in supervised {step.algo!r}; fitting needs (X, y).")
                m = Machine(step, W, ys)
                if step.task_kind() == "classification":
                    signature["predict_proba"] = predict_proba(m, W)
                W = predict(m, W)
            else:
                m = Machine(step, W)
                W = transform(m, W)
            machines[name] = m

        signature["predict" if is_supervised(model.steps[-1]) else "transform"] = W

        fitresult = CompositeFitresult(signature)
        fit_network(*fitresult.output_nodes(), verbosity=verbosity)

        cache = {"data": (X, y)}
        return fitresult, cache, named_reports(machines)

from __future__ import annotations

from typing import Any, Dict

from mlserial.contracts.model_configs import ModelConfig
from mlserial.errors import InvalidArgumentError
from mlserial.network.signature import CompositeFitresult

from .common import check_data_arity


class CompositeLearner:
    """Operations shared by every handle whose fitresult is a learning network.

    Subclasses only implement ``fit``: build the network on fresh sources,
    train it, and return a :class:`CompositeFitresult`. Operations evaluate
    the signature node for their role with the new data substituted for the
    network's input source.
    """

    def _call(self, model: ModelConfig, fitresult: CompositeFitresult, role: str, X: Any) -> Any:
        try:
            out = fitresult.operation(role)
        except AttributeError:
            raise InvalidArgumentError(f"Model {model.algo!r} does not support {role}().") from None
        return out(X)

    def predict(self, model: ModelConfig, fitresult: CompositeFitresult, X: Any) -> Any:
        return self._call(model, fitresult, "predict", X)

    def predict_proba(self, model: ModelConfig, fitresult: CompositeFitresult, X: Any) -> Any:
        return self._call(model, fitresult, "predict_proba", X)

    def transform(self, model: ModelConfig, fitresult: CompositeFitresult, X: Any) -> Any:
        return self._call(model, fitresult, "transform", X)

    def fitted_params(self, model: ModelConfig, fitresult: CompositeFitresult) -> Dict[str, Any]:
        return {
            "machines": [
                {"algo": m.model.algo, "fitted_params": m.fitted_params()} for m in fitresult.machines()
            ]
        }

    def check_data(self, model: ModelConfig, *data: Any) -> None:
        check_data_arity(model, data)

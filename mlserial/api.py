"""Public mlserial API.

This module is the **stable public surface**:

    from mlserial.api import machine, fit, predict, save

    mach = fit(machine(DecisionTreeRegressorConfig(), X, y))
    save("tree.joblib", mach)
    mach2 = machine("tree.joblib")
    predict(mach2, Xnew)

The underlying implementations live under :mod:`mlserial.network` and
:mod:`mlserial.io`.
"""

from __future__ import annotations

from typing import Any

from mlserial.contracts.model_configs import ModelConfig
from mlserial.io.envelope import SaveResult
from mlserial.io.persistence import load_machine, save
from mlserial.io.restore import restore
from mlserial.io.snapshot import serializable
from mlserial.network.machines import Machine
from mlserial.network.nodes import node, source
from mlserial.network.operations import fit, fitted_params, predict, predict_proba, report, transform
from mlserial.registries.learners import get_learner
from mlserial.runtime.controls import SaveControl


def machine(model_or_source: Any, *args: Any, cache: bool = True) -> Machine:
    """Bind a model handle to data, or load a saved machine.

    A model handle constructs a new untrained machine. A path or an open binary
    stream loads a saved one, rebinding it to ``args`` when given.
    """
    if isinstance(model_or_source, ModelConfig):
        if args:
            get_learner(model_or_source).check_data(model_or_source, *args)
        return Machine(model_or_source, *args, cache=cache)
    return load_machine(model_or_source, *args, cache=cache)


__all__ = [
    "machine",
    "fit",
    "predict",
    "predict_proba",
    "transform",
    "fitted_params",
    "report",
    "save",
    "serializable",
    "restore",
    "source",
    "node",
    "SaveControl",
    "SaveResult",
    "Machine",
]

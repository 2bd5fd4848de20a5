"""Machine operations usable both eagerly and as network nodes.

Called with plain data they compute immediately; called with any node
argument they return a new :class:`~mlserial.network.nodes.Node`:

    yhat = predict(mach, Xnode)      # Node
    yhat(Xnew)                       # array
    predict(mach, Xnew)              # array
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from mlserial.network.machines import Machine
from mlserial.network.nodes import AbstractNode, Node, reachable_machines

logger = logging.getLogger(__name__)


def _lazy(args: tuple) -> bool:
    return any(isinstance(a, AbstractNode) for a in args)


def predict(mach: Machine, *args: Any) -> Any:
    if _lazy(args):
        return Node(predict, mach, args)
    return mach.predict(*args)


def predict_proba(mach: Machine, *args: Any) -> Any:
    if _lazy(args):
        return Node(predict_proba, mach, args)
    return mach.predict_proba(*args)


def transform(mach: Machine, *args: Any) -> Any:
    if _lazy(args):
        return Node(transform, mach, args)
    return mach.transform(*args)


def fit(mach: Machine, **kwargs: Any) -> Machine:
    return mach.fit(**kwargs)


def fitted_params(mach: Machine) -> Any:
    return mach.fitted_params()


def report(mach: Machine) -> Any:
    return mach.report


def fit_network(*outputs: AbstractNode, verbosity: int = 0) -> int:
    """Train every machine the outputs depend on, upstream first.

    Returns the number of machines visited.
    """
    machines = reachable_machines(*outputs)
    for m in machines:
        m.fit(verbosity=verbosity)
    logger.debug("Fitted learning network with %d machines.", len(machines))
    return len(machines)


def named_reports(machines: Dict[str, Machine]) -> Dict[str, Any]:
    return {name: m.report for name, m in machines.items()}


__all__ = [
    "predict",
    "predict_proba",
    "transform",
    "fit",
    "fitted_params",
    "report",
    "fit_network",
    "named_reports",
]

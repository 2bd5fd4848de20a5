"""mlserial: persist trained learning machines, composite networks included.

See :mod:`mlserial.api` for the public surface.
"""

from mlserial.api import (
    Machine,
    SaveControl,
    SaveResult,
    fit,
    fitted_params,
    machine,
    node,
    predict,
    predict_proba,
    report,
    restore,
    save,
    serializable,
    source,
    transform,
)

__version__ = "0.1.0"

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

"""Sanitized, persistable copies of trained machines.

A snapshot shares the model handle with the original machine but holds no
training data: raw bindings are cleared, training-data cache entries are
stripped, and the fitresult goes through the handle's save hook (or the
network rewrite for composites). The original machine is never mutated.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from mlserial.contracts.model_configs import ModelConfig
from mlserial.errors import UntrainedMachineError
from mlserial.io.naming import filename_stem
from mlserial.network.machines import SNAPSHOT_STATE, Machine
from mlserial.network.nodes import AbstractNode, Source
from mlserial.network.signature import CompositeFitresult
from mlserial.registries.hooks import save_fitresult

logger = logging.getLogger(__name__)

# Cache entries holding training data; every other entry survives a snapshot.
TRAINING_DATA_KEYS = frozenset({"data"})

_SET_BY_CONSTRUCTION = ("model", "args", "cache_data")


def sanitize_cache(cache: Any, stem: Optional[str], **kwargs: Any) -> Any:
    """Strip training-data entries from ``cache``; sanitize nested machines."""
    if isinstance(cache, Machine):
        return snapshot_machine(cache, stem, **kwargs)
    if isinstance(cache, Mapping):
        return {
            k: sanitize_cache(v, stem, **kwargs) for k, v in cache.items() if k not in TRAINING_DATA_KEYS
        }
    if isinstance(cache, tuple):
        return tuple(sanitize_cache(v, stem, **kwargs) for v in cache)
    if isinstance(cache, list):
        return [sanitize_cache(v, stem, **kwargs) for v in cache]
    return cache


def sanitize_report(report: Any, stem: Optional[str], **kwargs: Any) -> Any:
    """Copy ``report`` with every nested machine replaced by its snapshot."""
    if isinstance(report, Machine):
        return snapshot_machine(report, stem, **kwargs)
    if isinstance(report, Mapping):
        return {k: sanitize_report(v, stem, **kwargs) for k, v in report.items()}
    if isinstance(report, tuple):
        return tuple(sanitize_report(v, stem, **kwargs) for v in report)
    if isinstance(report, list):
        return [sanitize_report(v, stem, **kwargs) for v in report]
    return report


def persistable_fitresult(model: ModelConfig, fitresult: Any, stem: Optional[str], **kwargs: Any) -> Any:
    """Persistable form of ``fitresult``: network rewrite for composites, save hook otherwise."""
    if isinstance(fitresult, CompositeFitresult):
        from mlserial.io.graph import rewrite_composite

        return rewrite_composite(fitresult, stem, **kwargs)
    return save_fitresult(model, fitresult, stem, **kwargs)


def snapshot_machine(
    mach: Machine,
    stem: Optional[str],
    *,
    args: Optional[Sequence[AbstractNode]] = None,
    **kwargs: Any,
) -> Machine:
    """Field-by-field sanitized copy of ``mach``.

    ``args`` are the snapshot's input nodes; by default every argument becomes
    a fresh empty source. Keyword arguments go through to the save hooks.
    """
    if not mach.has_fitresult:
        raise UntrainedMachineError(f"Cannot serialize {mach!r}: it has not been trained.")

    if args is None:
        args = tuple(Source() for _ in mach.args)
    copy = Machine(mach.model, *args, cache=mach.cache_data)

    for name, value in vars(mach).items():
        if name in _SET_BY_CONSTRUCTION:
            continue
        if name == "state":
            copy.state = SNAPSHOT_STATE
        elif name == "cache":
            copy.cache = sanitize_cache(value, stem, **kwargs)
        elif name in ("data", "resampled_data"):
            setattr(copy, name, ())
        elif name == "old_rows":
            copy.old_rows = None
        elif name == "_fitresult":
            copy.fitresult = persistable_fitresult(mach.model, value, stem, **kwargs)
        elif name == "report":
            copy.report = sanitize_report(value, stem, **kwargs)
        else:
            setattr(copy, name, value)
    return copy


def serializable(destination: Any, mach: Machine, **kwargs: Any) -> Machine:
    """Return a sanitized copy of ``mach`` ready to be persisted.

    ``destination`` (a path, an open stream or ``None``) only names the side
    files that save hooks may write. Keyword arguments go through to the hooks.
    """
    if not mach.has_fitresult:
        raise UntrainedMachineError(f"Cannot serialize {mach!r}: it has not been trained.")
    stem = filename_stem(destination)
    logger.debug("Building snapshot of %r (stem=%r)", mach, stem)
    return snapshot_machine(mach, stem, **kwargs)


__all__ = [
    "TRAINING_DATA_KEYS",
    "sanitize_cache",
    "sanitize_report",
    "persistable_fitresult",
    "snapshot_machine",
    "serializable",
]

"""Save machines to paths or streams and load them back."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from mlserial.components.learners.common import check_feature_count
from mlserial.contracts.model_configs import ModelConfig
from mlserial.contracts.save_options import SaveOptions
from mlserial.errors import MachineLoadError, UntrainedMachineError
from mlserial.io.envelope import SaveResult, decode_envelope, encode_envelope
from mlserial.io.restore import restore
from mlserial.io.snapshot import serializable
from mlserial.network.machines import Machine
from mlserial.registries.learners import get_learner

logger = logging.getLogger(__name__)

# state of a freshly loaded machine
LOADED_STATE = 1


def _is_path(obj: Any) -> bool:
    return isinstance(obj, (str, os.PathLike))


def _describe(destination: Any) -> str:
    if _is_path(destination):
        return os.fspath(destination)
    return getattr(destination, "name", None) or type(destination).__name__


def save(
    destination: Any,
    mach: Machine,
    *,
    verbosity: int = 1,
    format: Optional[str] = None,
    compression: Optional[str] = None,
    compresslevel: Optional[int] = None,
    **kwargs: Any,
) -> SaveResult:
    """Serialize a trained machine to ``destination`` (a path or a writable binary stream).

    Options left as ``None`` take their defaults from :class:`SaveOptions`.
    Remaining keyword arguments go to the model-specific save hooks. Nothing
    is written when the machine is untrained.
    """
    if not mach.has_fitresult:
        raise UntrainedMachineError(f"Cannot save {mach!r}: it has not been trained.")

    options = SaveOptions.resolve(format=format, compression=compression, compresslevel=compresslevel)
    snapshot = serializable(destination, mach, **kwargs)
    result = encode_envelope(snapshot.model, snapshot.fitresult, snapshot.report, options)

    if _is_path(destination):
        with open(destination, "wb") as f:
            f.write(result.content_bytes)
    else:
        destination.write(result.content_bytes)

    if verbosity > 0:
        logger.info(
            "Saved %r to %s (%s, compression=%s, %d bytes).",
            mach,
            _describe(destination),
            options.format,
            options.compression,
            result.size,
        )
    return result


def _read(source: Any) -> bytes:
    if _is_path(source):
        with open(source, "rb") as f:
            return f.read()
    if hasattr(source, "read"):
        return source.read()
    raise TypeError(f"Cannot load a machine from {type(source).__name__}; pass a path or a binary stream.")


def load_machine(source: Any, *args: Any, cache: bool = True, verbosity: int = 0) -> Machine:
    """Load a machine saved with :func:`save`, optionally rebinding it to new data.

    The loaded machine has ``state == 1``. Without data it can only operate on
    data passed explicitly to ``predict`` / ``transform``.
    """
    model, fitresult, report = decode_envelope(_read(source))
    if not isinstance(model, ModelConfig):
        raise MachineLoadError(f"Envelope holds {type(model).__name__}, not a model handle.")

    if args:
        get_learner(model).check_data(model, *args)
        if isinstance(report, dict):
            check_feature_count(args[0], report.get("n_features_in"), algo=model.algo)

    mach = Machine(model, *args, cache=cache)
    mach.state = LOADED_STATE
    mach.fitresult = fitresult
    mach.report = report
    restore(mach, source)

    if verbosity > 0:
        logger.info("Loaded %r from %s.", mach, _describe(source))
    return mach


__all__ = ["save", "load_machine", "SaveResult"]

"""Inverse of the snapshot: turn persisted fitresults back into live ones, in place."""

from __future__ import annotations

from typing import Any, Optional

from mlserial.contracts.model_configs import ModelConfig
from mlserial.io.naming import filename_stem
from mlserial.network.machines import Machine
from mlserial.network.signature import CompositeFitresult
from mlserial.registries.hooks import restore_fitresult


def restored_fitresult(model: ModelConfig, persisted: Any, stem: Optional[str] = None) -> Any:
    """Live form of ``persisted``.

    Composite networks keep their topology; only the fitresults of their
    machines are restored, in place.
    """
    if isinstance(persisted, CompositeFitresult):
        for m in persisted.machines():
            restore_machine(m, stem)
        return persisted
    return restore_fitresult(model, persisted, stem)


def restore_machine(mach: Machine, stem: Optional[str] = None) -> Machine:
    mach.fitresult = restored_fitresult(mach.model, mach.fitresult, stem)
    return mach


def restore(mach: Machine, source: Any = None) -> Machine:
    """Restore ``mach`` in place and return it.

    ``source`` is where the machine was loaded from; hooks use it to find side
    files written next to the envelope. Calling this twice on the same machine
    is not supported.
    """
    return restore_machine(mach, filename_stem(source))


__all__ = ["restore", "restore_machine", "restored_fitresult"]

"""Exception types raised by mlserial.

Every failure is terminal for the call that raised it: nothing here is retried
and nothing attempts partial recovery. Callers decide what to do next (rebind
data, retrain, pick another file).
"""

from __future__ import annotations


class MachineError(Exception):
    """Base class for all mlserial errors."""


class UntrainedMachineError(MachineError, RuntimeError):
    """Raised when a machine without a fitresult is saved, snapshotted or used."""


class InvalidArgumentError(MachineError, ValueError):
    """Raised when an operation receives unusable input.

    Typical causes: an empty source node was evaluated, a restored machine was
    asked to predict without data being rebound, or rebinding data does not
    match the model handle.
    """


class MachineLoadError(MachineError, ValueError):
    """Raised when a persisted envelope is corrupt or does not match expectations."""


class SideFileNotFoundError(MachineLoadError):
    """Raised when the side file holding opaque native state cannot be located."""


class UnsupportedModelError(MachineError, TypeError):
    """Raised when no learner is registered for a model handle type."""

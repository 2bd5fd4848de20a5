"""Runtime helpers that drive machines over repeated training rounds."""

from .controls import SaveControl

__all__ = ["SaveControl"]

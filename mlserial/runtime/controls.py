from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from mlserial.io.persistence import save
from mlserial.network.machines import Machine

logger = logging.getLogger(__name__)


@dataclass
class SaveControl:
    """Iteration control that saves the machine to a new numbered file on every update.

    With ``filename="machine.joblib"`` successive updates write
    ``machine1.joblib``, ``machine2.joblib``, ... Extra ``kwargs`` are passed to
    :func:`mlserial.save` (codec options and hook keywords).
    """

    filename: str = "machine.joblib"
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def numbered_filename(self, n: int) -> str:
        stem, ext = os.path.splitext(self.filename)
        return f"{stem}{n}{ext}"

    def update(self, mach: Machine, verbosity: int = 1, state: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        n = 1 if state is None else int(state["filenumber"]) + 1
        fname = self.numbered_filename(n)
        if verbosity > 0:
            logger.info('Saving "%s".', fname)
        save(fname, mach, verbosity=verbosity - 1, **self.kwargs)
        return {"filenumber": n}

    def done(self, state: Optional[Dict[str, Any]] = None) -> bool:
        return False

    def takedown(self, state: Optional[Dict[str, Any]] = None, verbosity: int = 0) -> Dict[str, Any]:
        if not state:
            return {"filename": None}
        return {"filename": self.numbered_filename(int(state["filenumber"]))}


__all__ = ["SaveControl"]

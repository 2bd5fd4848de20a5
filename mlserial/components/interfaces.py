from __future__ import annotations
from typing import Protocol, Tuple, Any, Dict, Optional

from mlserial.contracts.model_configs import ModelConfig

class Learner(Protocol):
    def fit(self, model: ModelConfig, verbosity: int, *data: Any) -> Tuple[Any, Any, Any]:
        """Train on ``data`` and return ``(fitresult, cache, report)``."""
        ...

    def predict(self, model: ModelConfig, fitresult: Any, X: Any) -> Any:
        ...

    def fitted_params(self, model: ModelConfig, fitresult: Any) -> Dict[str, Any]:
        """Return the learned parameters in a user-facing form."""
        ...

    def check_data(self, model: ModelConfig, *data: Any) -> None:
        """Raise InvalidArgumentError if ``data`` cannot be bound to ``model``."""
        ...

class SerializationHooks(Protocol):
    def save(self, model: ModelConfig, fitresult: Any, stem: Optional[str], **kwargs: Any) -> Any:
        """Return a persistable form of ``fitresult``.

        ``stem`` names any side files the hook writes; it is None when the
        destination is an anonymous stream.
        """
        ...

    def restore(self, model: ModelConfig, persisted: Any, stem: Optional[str] = None) -> Any:
        """Inverse of :meth:`save`: turn the persisted form back into a fitresult."""
        ...

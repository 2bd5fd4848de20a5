from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Tuple

from mlserial.contracts.model_configs import ModelConfig
from mlserial.core.data import select_rows
from mlserial.errors import InvalidArgumentError, UntrainedMachineError
from mlserial.network.nodes import AbstractNode, Source, reachable_machines
from mlserial.registries.learners import get_learner

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for a fitresult slot that has never been assigned."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"

    def __reduce__(self) -> str:
        return "UNSET"


UNSET = _Unset()

# Sentinel state of snapshots: never mistaken for a freshly trained machine.
SNAPSHOT_STATE = -1


class Machine:
    """Binds a model handle to data and holds the learned state.

    Fields
    ------
    model, args, cache_data:
        the handle, the input nodes (plain data are wrapped in sources) and
        whether the training data are kept on the machine after fitting.
    fitresult:
        learned parameters; reading it before the first successful fit raises
        :class:`~mlserial.errors.UntrainedMachineError`.
    cache, report:
        model-dependent cache and diagnostics returned by the learner.
    state:
        number of successful fits (``-1`` for snapshots).
    old_model, old_upstream_state, old_rows:
        what the last fit saw; used to skip needless retraining.
    data, resampled_data:
        training data as bound / as resampled for the last fit.
    """

    def __init__(self, model: ModelConfig, *args: Any, cache: bool = True):
        if not isinstance(model, ModelConfig):
            raise TypeError(f"Machine model must be a ModelConfig, got {type(model).__name__}")
        self.model = model
        self.args: Tuple[AbstractNode, ...] = tuple(
            a if isinstance(a, AbstractNode) else Source(a) for a in args
        )
        self.cache_data = bool(cache)
        self._fitresult: Any = UNSET
        self.cache: Any = None
        self.report: Any = None
        self.state = 0
        self.frozen = False
        self.fit_okay = False
        self.old_model: Optional[ModelConfig] = None
        self.old_upstream_state: Optional[Tuple[int, ...]] = None
        self.old_rows: Optional[Tuple[int, ...]] = None
        self.data: Tuple[Any, ...] = ()
        self.resampled_data: Tuple[Any, ...] = ()

    # ---------------- fitted state ----------------

    @property
    def has_fitresult(self) -> bool:
        return self._fitresult is not UNSET

    @property
    def fitresult(self) -> Any:
        if self._fitresult is UNSET:
            raise UntrainedMachineError(f"{self!r} has not been trained.")
        return self._fitresult

    @fitresult.setter
    def fitresult(self, value: Any) -> None:
        self._fitresult = value

    # ---------------- lifecycle ----------------

    def freeze(self) -> "Machine":
        self.frozen = True
        return self

    def thaw(self) -> "Machine":
        self.frozen = False
        return self

    def _upstream_state(self) -> Tuple[int, ...]:
        return tuple(m.state for m in reachable_machines(*self.args))

    def fit(
        self,
        *,
        rows: Optional[Sequence[int]] = None,
        verbosity: int = 1,
        force: bool = False,
    ) -> "Machine":
        """Train on the data bound to ``args`` (optionally restricted to ``rows``).

        Retraining is skipped when the model, the rows and the state of every
        upstream machine are unchanged since the last fit, unless ``force``.
        """
        if self.frozen:
            if verbosity > 0:
                logger.info("Not retraining %r: machine is frozen.", self)
            return self

        rows_key = None if rows is None else tuple(int(r) for r in rows)
        upstream = self._upstream_state()
        stale = (
            force
            or not self.has_fitresult
            or self.model != self.old_model
            or rows_key != self.old_rows
            or upstream != self.old_upstream_state
        )
        if not stale:
            if verbosity > 0:
                logger.info("Not retraining %r: it is up to date.", self)
            return self

        data = tuple(arg() for arg in self.args)
        resampled = data if rows_key is None else tuple(select_rows(d, rows_key) for d in data)

        if verbosity > 0:
            logger.info("Training %r.", self)
        learner = get_learner(self.model)
        try:
            fitresult, cache, report = learner.fit(self.model, verbosity - 1, *resampled)
        except Exception:
            self.fit_okay = False
            raise

        self._fitresult = fitresult
        self.cache = cache
        self.report = report
        self.state = max(self.state, 0) + 1
        self.fit_okay = True
        self.old_model = self.model
        self.old_rows = rows_key
        self.old_upstream_state = upstream
        if self.cache_data:
            self.data = data
            self.resampled_data = resampled
        else:
            self.data = ()
            self.resampled_data = ()
        return self

    # ---------------- operations ----------------

    def _operate(self, operation: str, *args: Any) -> Any:
        if not self.has_fitresult:
            raise UntrainedMachineError(f"Cannot {operation}: {self!r} has not been trained.")
        if not args:
            if not self.args:
                raise InvalidArgumentError(
                    f"Cannot {operation}: {self!r} has no data bound; pass the data explicitly."
                )
            args = (self.args[0](),)
        learner = get_learner(self.model)
        method = getattr(learner, operation, None)
        if method is None:
            raise InvalidArgumentError(f"Model {self.model.algo!r} does not support {operation}().")
        return method(self.model, self.fitresult, *args)

    def predict(self, *args: Any) -> Any:
        return self._operate("predict", *args)

    def predict_proba(self, *args: Any) -> Any:
        return self._operate("predict_proba", *args)

    def transform(self, *args: Any) -> Any:
        return self._operate("transform", *args)

    def fitted_params(self) -> Any:
        learner = get_learner(self.model)
        return learner.fitted_params(self.model, self.fitresult)

    def __repr__(self) -> str:
        return f"Machine({self.model.algo}, {len(self.args)} args, state={self.state})"


__all__ = ["Machine", "UNSET", "SNAPSHOT_STATE"]

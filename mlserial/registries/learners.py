from __future__ import annotations

from typing import Callable, Type

from mlserial.contracts.model_configs import ModelConfig
from mlserial.components.interfaces import Learner
from mlserial.errors import UnsupportedModelError
from mlserial.registries.base import Registry


_LEARNERS_BY_CONFIG: Registry[Type[ModelConfig], Learner] = Registry(_name="learners_by_config")
_LEARNERS_BY_ALGO: Registry[str, Learner] = Registry(_name="learners_by_algo")

_BUILTINS_LOADED = False


def register_learner(config_type: Type[ModelConfig]) -> Callable[[Learner], Learner]:
    """Decorator/registrar binding a Learner to a model handle type.

    Also registers the learner under the handle's default ``algo`` tag so
    handles subclassed outside this package still resolve.
    """

    def deco(learner: Learner) -> Learner:
        _LEARNERS_BY_CONFIG.register(config_type)(learner)
        algo = config_type.model_fields.get("algo")
        if algo is not None and isinstance(algo.default, str):
            _LEARNERS_BY_ALGO.register(algo.default)(learner)
        return learner

    return deco


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    # Import triggers registration side-effects.
    from mlserial.registries.builtins import learners as _  # noqa: F401

    _BUILTINS_LOADED = True


def get_learner(model: ModelConfig) -> Learner:
    """Return the Learner for ``model`` (config type, then MRO, then algo tag)."""

    _ensure_builtins()

    t = type(model)
    learner = _LEARNERS_BY_CONFIG.try_get(t)

    if learner is None:
        for base in t.mro()[1:]:
            learner = _LEARNERS_BY_CONFIG.try_get(base)
            if learner is not None:
                break

    if learner is None:
        learner = _LEARNERS_BY_ALGO.try_get(str(getattr(model, "algo", "")))

    if learner is None:
        raise UnsupportedModelError(f"No learner registered for {t.__name__} (algo={getattr(model, 'algo', None)!r})")

    return learner


def list_algos() -> list[str]:
    _ensure_builtins()
    return sorted(_LEARNERS_BY_ALGO.keys())

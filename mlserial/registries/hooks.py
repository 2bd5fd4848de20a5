from __future__ import annotations

from typing import Any, Callable, Optional

from mlserial.contracts.model_configs import ModelConfig
from mlserial.components.interfaces import SerializationHooks
from mlserial.registries.base import Registry


class PassthroughHooks:
    """Default hooks: in-memory fitted state persists as-is."""

    def save(self, model: ModelConfig, fitresult: Any, stem: Optional[str], **kwargs: Any) -> Any:
        return fitresult

    def restore(self, model: ModelConfig, persisted: Any, stem: Optional[str] = None) -> Any:
        return persisted


PASSTHROUGH = PassthroughHooks()

_HOOKS_BY_ALGO: Registry[str, SerializationHooks] = Registry(_name="serialization_hooks_by_algo")

_BUILTINS_LOADED = False


def register_hooks(algo: str) -> Callable[[SerializationHooks], SerializationHooks]:
    """Register save/restore hooks for every handle whose ``algo`` is ``algo``.

    Hooks are looked up by the handle's tag, not its class, so one hook pair
    serves every handle that shares a tag.
    """
    return _HOOKS_BY_ALGO.register(str(algo))


def unregister_hooks(algo: str) -> Optional[SerializationHooks]:
    return _HOOKS_BY_ALGO.unregister(str(algo))


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    from mlserial.registries.builtins import hooks as _  # noqa: F401

    _BUILTINS_LOADED = True


def get_hooks(model: ModelConfig) -> SerializationHooks:
    """Hooks for ``model``; falls back to :data:`PASSTHROUGH`, never fails."""
    _ensure_builtins()
    hooks = _HOOKS_BY_ALGO.try_get(str(getattr(model, "algo", "")))
    return PASSTHROUGH if hooks is None else hooks


def save_fitresult(model: ModelConfig, fitresult: Any, stem: Optional[str], **kwargs: Any) -> Any:
    return get_hooks(model).save(model, fitresult, stem, **kwargs)


def restore_fitresult(model: ModelConfig, persisted: Any, stem: Optional[str] = None) -> Any:
    return get_hooks(model).restore(model, persisted, stem)

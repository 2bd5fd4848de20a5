from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Iterable, Iterator, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class Registry(Generic[K, V]):
    """Small key -> value registry used for learners and serialization hooks.

    Typical usage:
        HOOKS = Registry[str, SerializationHooks](_name="hooks")

        HOOKS.register("xgboost_regressor")(XGBoostHooks())

        hooks = HOOKS.try_get(model.algo, PASSTHROUGH)

    Registering a key twice replaces the previous value, which lets callers
    override a built-in with their own implementation.
    """

    _items: Dict[K, V] = field(default_factory=dict)
    _name: str = "registry"

    def register(self, key: K) -> Callable[[V], V]:
        def deco(value: V) -> V:
            self._items[key] = value
            return value

        return deco

    def unregister(self, key: K) -> Optional[V]:
        return self._items.pop(key, None)

    def get(self, key: K) -> V:
        if key not in self._items:
            raise KeyError(f"{self._name}: unknown key {key!r}")
        return self._items[key]

    def try_get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        return self._items.get(key, default)

    def keys(self) -> Iterable[K]:
        return self._items.keys()

    def items(self) -> Iterable[tuple[K, V]]:
        return self._items.items()

    def __contains__(self, key: K) -> bool:  # pragma: no cover
        return key in self._items

    def __iter__(self) -> Iterator[K]:  # pragma: no cover
        return iter(self._items)

"""Learning-network nodes.

A network is a DAG of :class:`Source` placeholders and :class:`Node`
operations. A node may reference a machine whose trained state its operation
consumes; that machine's own ``args`` are the *training edges* of the network.

Traversal helpers here are identity-based: two distinct nodes or machines are
never merged, even when they compare equal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Tuple

from mlserial.errors import InvalidArgumentError

if TYPE_CHECKING:  # pragma: no cover
    from mlserial.network.machines import Machine


class AbstractNode:
    args: Tuple["AbstractNode", ...] = ()
    machine: Optional["Machine"] = None

    def __call__(self, *Xnew: Any) -> Any:  # pragma: no cover
        raise NotImplementedError


class Source(AbstractNode):
    """Placeholder for external input data.

    Calling a source with new data returns that data; calling it without
    arguments returns the bound data, or raises if nothing is bound.
    """

    def __init__(self, data: Any = None):
        self.data = data

    @property
    def is_empty(self) -> bool:
        return self.data is None

    def __call__(self, *Xnew: Any) -> Any:
        if Xnew:
            return Xnew[0]
        if self.data is None:
            raise InvalidArgumentError(
                "Source node has no data bound. A restored machine needs data passed to the "
                "operation explicitly, or rebound with mlserial.machine(source, X, ...)."
            )
        return self.data

    def __repr__(self) -> str:
        return "Source(<empty>)" if self.data is None else f"Source({type(self.data).__name__})"


class Node(AbstractNode):
    """Operation node.

    ``operation`` is called as ``operation(machine, *values)`` when a machine is
    attached, else as ``operation(*values)``, where ``values`` are the results
    of calling each argument node.
    """

    def __init__(
        self,
        operation: Callable[..., Any],
        machine: Optional["Machine"] = None,
        args: Iterable[AbstractNode] = (),
    ):
        self.operation = operation
        self.machine = machine
        self.args = tuple(args)
        for a in self.args:
            if not isinstance(a, AbstractNode):
                raise TypeError(f"Node arguments must be nodes, got {type(a).__name__}")

    def __call__(self, *Xnew: Any) -> Any:
        values = [arg(*Xnew) for arg in self.args]
        if self.machine is None:
            return self.operation(*values)
        return self.operation(self.machine, *values)

    def __repr__(self) -> str:
        op = getattr(self.operation, "__name__", None) or getattr(
            getattr(self.operation, "func", None), "__name__", type(self.operation).__name__
        )
        mach = "" if self.machine is None else f", machine={self.machine.model.algo}"
        return f"Node({op}{mach}, {len(self.args)} args)"


def source(data: Any = None) -> Source:
    return Source(data)


def node(operation: Callable[..., Any], *args: AbstractNode) -> Node:
    """Static (machine-free) operation node."""
    return Node(operation, None, args)


def _upstream(n: AbstractNode) -> Tuple[AbstractNode, ...]:
    if n.machine is None:
        return n.args
    return tuple(n.machine.args) + n.args


def reachable_nodes(*outputs: AbstractNode) -> List[AbstractNode]:
    """All ancestors of ``outputs`` (inclusive), training edges included.

    The result is topologically ordered: every node appears after all of its
    arguments and after the arguments of its machine.
    """
    order: List[AbstractNode] = []
    done: Dict[int, AbstractNode] = {}
    active: Dict[int, AbstractNode] = {}

    def visit(n: AbstractNode) -> None:
        key = id(n)
        if key in done:
            return
        if key in active:
            raise ValueError("Learning network contains a cycle.")
        active[key] = n
        for parent in _upstream(n):
            visit(parent)
        del active[key]
        done[key] = n
        order.append(n)

    for out in outputs:
        visit(out)
    return order


def reachable_machines(*outputs: AbstractNode) -> List["Machine"]:
    """Identity-unique machines attached to nodes reachable from ``outputs``."""
    seen: Dict[int, "Machine"] = {}
    for n in reachable_nodes(*outputs):
        m = n.machine
        if m is not None and id(m) not in seen:
            seen[id(m)] = m
    return list(seen.values())


def reachable_sources(*outputs: AbstractNode) -> List[Source]:
    return [n for n in reachable_nodes(*outputs) if isinstance(n, Source)]


__all__ = [
    "AbstractNode",
    "Source",
    "Node",
    "source",
    "node",
    "reachable_nodes",
    "reachable_machines",
    "reachable_sources",
]

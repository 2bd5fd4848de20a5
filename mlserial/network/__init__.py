"""Machines and learning networks."""

from .machines import SNAPSHOT_STATE, UNSET, Machine
from .nodes import (
    AbstractNode,
    Node,
    Source,
    node,
    reachable_machines,
    reachable_nodes,
    reachable_sources,
    source,
)
from .signature import OPERATIONS, CompositeFitresult

__all__ = [
    "Machine",
    "UNSET",
    "SNAPSHOT_STATE",
    "AbstractNode",
    "Node",
    "Source",
    "node",
    "source",
    "reachable_nodes",
    "reachable_machines",
    "reachable_sources",
    "CompositeFitresult",
    "OPERATIONS",
]

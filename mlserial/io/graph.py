"""Rewrite of a composite fitresult into a data-free copy of its network.

The rewrite walks every node the signature outputs depend on, once, in
topological order:

  - each source maps to a fresh empty source;
  - each static node is rebuilt on its translated arguments;
  - each machine is snapshotted once, rebound to its translated arguments,
    and shared by every node that referenced the original.

Translation maps are keyed by object identity, so two machines that compare
equal stay distinct and a machine used at several positions stays shared.
Nodes no output depends on are not translated.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mlserial.network.machines import Machine
from mlserial.network.nodes import AbstractNode, Node, Source
from mlserial.network.signature import REPORT_KEY, CompositeFitresult

logger = logging.getLogger(__name__)


def rewrite_composite(fitresult: CompositeFitresult, stem: Optional[str], **kwargs: Any) -> CompositeFitresult:
    from mlserial.io.snapshot import snapshot_machine

    nodes = fitresult.nodes()
    node_map: Dict[int, AbstractNode] = {}
    machine_map: Dict[int, Machine] = {}

    for n in nodes:
        if isinstance(n, Source):
            node_map[id(n)] = Source()

    for n in nodes:
        if isinstance(n, Source):
            continue
        if not isinstance(n, Node):
            raise TypeError(f"Cannot rewrite network node of type {type(n).__name__}")
        args = tuple(node_map[id(a)] for a in n.args)
        m = n.machine
        if m is None:
            node_map[id(n)] = Node(n.operation, None, args)
            continue
        new_m = machine_map.get(id(m))
        if new_m is None:
            new_args = tuple(node_map[id(a)] for a in m.args)
            new_m = snapshot_machine(m, stem, args=new_args, **kwargs)
            machine_map[id(m)] = new_m
        node_map[id(n)] = Node(n.operation, new_m, args)

    signature: Dict[str, Any] = {
        role: node_map[id(out)] for role, out in fitresult.operation_nodes().items()
    }
    report_nodes = fitresult.report_nodes()
    if report_nodes:
        signature[REPORT_KEY] = {name: node_map[id(out)] for name, out in report_nodes.items()}

    logger.debug(
        "Rewrote learning network: %d nodes, %d machines, %d sources.",
        len(nodes),
        len(machine_map),
        sum(isinstance(n, Source) for n in nodes),
    )
    return CompositeFitresult(signature, dict(fitresult.report_additions))


__all__ = ["rewrite_composite"]

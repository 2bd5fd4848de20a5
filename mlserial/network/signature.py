from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from mlserial.network.nodes import AbstractNode, reachable_machines, reachable_nodes

if TYPE_CHECKING:  # pragma: no cover
    from mlserial.network.machines import Machine

OPERATIONS = ("predict", "predict_proba", "transform")
REPORT_KEY = "report"


@dataclass
class CompositeFitresult:
    """Fitted state of a composite model: a learning network.

    ``signature`` maps operation roles (``predict``, ``transform``, ...) to the
    network nodes that implement them; its optional ``"report"`` entry maps
    report names to report nodes. ``report_additions`` holds the values those
    report nodes produced at training time.
    """

    signature: Dict[str, Any]
    report_additions: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key, value in self.signature.items():
            if key == REPORT_KEY:
                if not isinstance(value, Mapping):
                    raise TypeError("signature['report'] must map names to nodes")
                continue
            if key not in OPERATIONS:
                raise ValueError(f"Unknown signature role {key!r}; expected one of {OPERATIONS}")
            if not isinstance(value, AbstractNode):
                raise TypeError(f"signature[{key!r}] must be a node")

    def operation_nodes(self) -> Dict[str, AbstractNode]:
        return {k: v for k, v in self.signature.items() if k != REPORT_KEY}

    def report_nodes(self) -> Dict[str, AbstractNode]:
        return dict(self.signature.get(REPORT_KEY, {}))

    def output_nodes(self) -> List[AbstractNode]:
        return [*self.operation_nodes().values(), *self.report_nodes().values()]

    def nodes(self) -> List[AbstractNode]:
        """All nodes needed to produce every output, topologically ordered."""
        return reachable_nodes(*self.output_nodes())

    def machines(self) -> List["Machine"]:
        return reachable_machines(*self.output_nodes())

    def operation(self, name: str) -> AbstractNode:
        try:
            return self.operation_nodes()[name]
        except KeyError:
            raise AttributeError(f"Composite does not expose {name}()") from None


__all__ = ["CompositeFitresult", "OPERATIONS", "REPORT_KEY"]

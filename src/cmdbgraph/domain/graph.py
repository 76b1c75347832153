"""In-memory CMDB graph — typed nodes, typed edges, active filters.

The graph is a derived value: it is rebuilt whenever records or filters
change and never mutated in place. Annotation (impact flags) produces a new
graph via ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, field_validator

from cmdbgraph.domain.records import ConfigurationItem, Service
from cmdbgraph.domain.types import EdgeKind, NodeKind


@dataclass(frozen=True, order=True)
class NodeRef:
    """Tagged reference to a graph node: ``(kind, entity_id)``.

    The composite string id (``service-3``, ``ci-7``) exists for the
    rendering layer; code dispatches on :attr:`kind`.
    """

    kind: NodeKind
    entity_id: int

    @property
    def node_id(self) -> str:
        return f"{self.kind.value}-{self.entity_id}"

    @classmethod
    def service(cls, entity_id: int) -> NodeRef:
        return cls(NodeKind.SERVICE, entity_id)

    @classmethod
    def ci(cls, entity_id: int) -> NodeRef:
        return cls(NodeKind.CI, entity_id)

    @classmethod
    def parse(cls, node_id: str) -> NodeRef | None:
        """Parse a composite id. Returns None for anything malformed."""
        prefix, sep, raw_id = node_id.partition("-")
        if not sep:
            return None
        try:
            kind = NodeKind(prefix)
            entity_id = int(raw_id)
        except ValueError:
            return None
        return cls(kind, entity_id)

    def label(self) -> str:
        """Human label used by the impact panel (``Service #3``, ``CI #7``)."""
        name = "Service" if self.kind is NodeKind.SERVICE else "CI"
        return f"{name} #{self.entity_id}"

    def __str__(self) -> str:
        return self.node_id


@dataclass(frozen=True)
class GraphNode:
    """A Service or CI placed in the graph."""

    ref: NodeRef
    record: Service | ConfigurationItem
    is_impacted: bool = False
    is_source: bool = False

    @property
    def id(self) -> str:
        return self.ref.node_id

    @property
    def kind(self) -> NodeKind:
        return self.ref.kind

    @property
    def label(self) -> str:
        return self.record.name


@dataclass(frozen=True)
class GraphEdge:
    """A directed edge between two nodes in the graph."""

    id: str
    source: str
    target: str
    kind: EdgeKind
    relationship_type: str
    critical: bool = False
    is_impacted: bool = False


@dataclass(frozen=True)
class CmdbGraph:
    """Ordered node and edge collections with id lookup.

    Invariants: node ids are unique; every edge endpoint is a node id.
    """

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
    _index: dict[str, GraphNode] = field(
        init=False, repr=False, compare=False, hash=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {n.id: n for n in self.nodes})

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, node_id: str) -> GraphNode | None:
        return self._index.get(node_id)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def count(self, kind: NodeKind) -> int:
        return sum(1 for n in self.nodes if n.kind is kind)


class GraphFilters(BaseModel):
    """Active filters applied by the graph builder.

    ``ci_type`` and ``environment`` match exactly; None (or an empty string)
    matches everything.
    """

    model_config = {"frozen": True}

    include_services: bool = True
    include_cis: bool = True
    ci_type: str | None = None
    environment: str | None = None
    active_relationships_only: bool = False

    @field_validator("ci_type", "environment", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def matches_ci(self, ci: ConfigurationItem) -> bool:
        """True when *ci* passes both the type and the environment filter."""
        if not self.include_cis:
            return False
        if self.ci_type is not None and ci.ci_type != self.ci_type:
            return False
        return self.environment is None or ci.environment == self.environment

"""GraphEngine — lazy-built NetworkX view of a :class:`CmdbGraph`.

Rebuilt per graph, no cross-graph cache. The MultiDiGraph keeps parallel
edges (a service may map to the same CI under several relationship types)
keyed by edge id, and preserves insertion order for deterministic traversal.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

import networkx as nx

from cmdbgraph.domain.types import EdgeKind

if TYPE_CHECKING:
    from cmdbgraph.domain.graph import CmdbGraph

type _Graph = nx.MultiDiGraph


class GraphEngine:
    """Lazy-loading NetworkX adjacency over a built CMDB graph."""

    def __init__(self, cmdb_graph: CmdbGraph) -> None:
        self._cmdb_graph = cmdb_graph
        self._graph: _Graph | None = None

    @property
    def cmdb_graph(self) -> CmdbGraph:
        return self._cmdb_graph

    @property
    def graph(self) -> _Graph:
        """Return the graph, building it on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    def _build(self) -> _Graph:
        """Add every node first (so isolated nodes are visible), then edges."""
        g: _Graph = nx.MultiDiGraph()
        for node in self._cmdb_graph.nodes:
            g.add_node(node.id, kind=node.kind)
        for edge in self._cmdb_graph.edges:
            g.add_edge(
                edge.source,
                edge.target,
                key=edge.id,
                kind=edge.kind,
                critical=edge.critical,
            )
        return g

    def incoming(self, node_id: str, kind: EdgeKind) -> Iterator[str]:
        """Yield the sources of *node_id*'s incoming edges of *kind*."""
        for source, _, edge_kind in self.graph.in_edges(node_id, data="kind"):
            if edge_kind is kind:
                yield source

    def outgoing(self, node_id: str, kind: EdgeKind) -> Iterator[str]:
        """Yield the targets of *node_id*'s outgoing edges of *kind*."""
        for _, target, edge_kind in self.graph.out_edges(node_id, data="kind"):
            if edge_kind is kind:
                yield target

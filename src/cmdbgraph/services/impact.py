"""Impact analysis — blast radius of a failing Service or CI.

Propagation rules:
- From a CI: every CI that depends on it (incoming ``ci_depends_on``)
  and every service that uses it (incoming ``service_uses_ci``).
- From a service: every CI it uses (outgoing ``service_uses_ci``).
  Services never reach other services directly, only through shared CIs.

Worklist traversal with a visited set; each node is processed once, so
dependency cycles terminate. O(V + E).
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace

from cmdbgraph.domain.graph import CmdbGraph, NodeRef
from cmdbgraph.domain.types import EdgeKind, NodeKind
from cmdbgraph.infrastructure.graph.engine import GraphEngine

logger = logging.getLogger(__name__)


def _resolve(source: str | NodeRef) -> str:
    return source.node_id if isinstance(source, NodeRef) else source


def compute_impact(
    graph: CmdbGraph | GraphEngine,
    source: str | NodeRef,
) -> frozenset[str]:
    """Return the ids of every node impacted by *source* failing, *source* included.

    An id that matches no node yields an empty set.
    """
    engine = graph if isinstance(graph, GraphEngine) else GraphEngine(graph)
    source_id = _resolve(source)
    if source_id not in engine.cmdb_graph:
        logger.debug("Impact source %s not in graph", source_id)
        return frozenset()

    impacted: set[str] = {source_id}
    worklist: deque[str] = deque([source_id])

    while worklist:
        current = worklist.popleft()
        node = engine.cmdb_graph.node(current)
        if node is None:
            continue

        if node.kind is NodeKind.CI:
            reached = [
                *engine.incoming(current, EdgeKind.CI_DEPENDS_ON),
                *engine.incoming(current, EdgeKind.SERVICE_USES_CI),
            ]
        else:
            reached = list(engine.outgoing(current, EdgeKind.SERVICE_USES_CI))

        for neighbor in reached:
            if neighbor not in impacted:
                impacted.add(neighbor)
                worklist.append(neighbor)

    return frozenset(impacted)


@dataclass(frozen=True)
class ImpactReport:
    """Impact of one source, ready for display."""

    source: NodeRef
    impacted: frozenset[str]
    impacted_edges: frozenset[str]
    service_count: int
    ci_count: int

    @property
    def affected_count(self) -> int:
        """Impacted items excluding the source itself."""
        return max(len(self.impacted) - 1, 0)

    @property
    def source_label(self) -> str:
        return self.source.label()

    def ordered_ids(self, graph: CmdbGraph) -> list[str]:
        """Impacted ids in graph order, for stable presentation."""
        return [nid for nid in graph.node_ids if nid in self.impacted]


def impacted_edge_ids(graph: CmdbGraph, impacted: frozenset[str]) -> frozenset[str]:
    """Edges whose endpoints are both impacted."""
    return frozenset(
        e.id for e in graph.edges if e.source in impacted and e.target in impacted
    )


def analyze_impact(graph: CmdbGraph, source: str | NodeRef) -> ImpactReport | None:
    """Compute a full :class:`ImpactReport`, or None when *source* is unknown."""
    source_id = _resolve(source)
    ref = NodeRef.parse(source_id)
    impacted = compute_impact(graph, source_id)
    if ref is None or not impacted:
        return None

    kinds = [graph.node(nid).kind for nid in impacted if graph.node(nid) is not None]
    return ImpactReport(
        source=ref,
        impacted=impacted,
        impacted_edges=impacted_edge_ids(graph, impacted),
        service_count=sum(1 for k in kinds if k is NodeKind.SERVICE),
        ci_count=sum(1 for k in kinds if k is NodeKind.CI),
    )


def annotate_graph(
    graph: CmdbGraph,
    impacted: frozenset[str],
    source: str | NodeRef | None = None,
) -> CmdbGraph:
    """Return a copy of *graph* with impact flags set on nodes and edges.

    The input graph and its nodes are left untouched.
    """
    source_id = _resolve(source) if source is not None else None
    nodes = tuple(
        replace(n, is_impacted=n.id in impacted, is_source=n.id == source_id)
        for n in graph.nodes
    )
    edges = tuple(
        replace(e, is_impacted=e.source in impacted and e.target in impacted)
        for e in graph.edges
    )
    return CmdbGraph(nodes=nodes, edges=edges)

"""Graph builder — entity records + filters → :class:`CmdbGraph`.

Pure function, no infrastructure dependencies. Output order follows input
order (services first, then CIs; mappings first, then CI relationships) so
the layout stays reproducible across rebuilds of unchanged data.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cmdbgraph.domain.graph import CmdbGraph, GraphEdge, GraphFilters, GraphNode, NodeRef
from cmdbgraph.domain.records import (
    CiRelationship,
    ConfigurationItem,
    Service,
    ServiceCiMapping,
)
from cmdbgraph.domain.types import EdgeKind

logger = logging.getLogger(__name__)

DEFAULT_DEPENDENCY_TYPES: tuple[str, ...] = ("DependsOn",)


@dataclass(frozen=True)
class BuildStats:
    """Records the builder left out, by reason."""

    filtered_cis: int = 0
    dropped_mappings: int = 0
    dropped_relationships: int = 0
    duplicate_records: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "filtered_cis": self.filtered_cis,
            "mappings": self.dropped_mappings,
            "relationships": self.dropped_relationships,
            "duplicates": self.duplicate_records,
        }


def normalize_relationship_type(label: str) -> str:
    """``"Depends On"`` and ``"dependsOn"`` both normalize to ``"dependson"``."""
    return "".join(label.split()).casefold()


def classify_relationship(label: str, dependency_types: Iterable[str]) -> EdgeKind:
    """Map a CI relationship label to its edge kind."""
    wanted = {normalize_relationship_type(t) for t in dependency_types}
    if normalize_relationship_type(label) in wanted:
        return EdgeKind.CI_DEPENDS_ON
    return EdgeKind.CI_RELATED


def build_graph(
    services: Sequence[Service],
    cis: Sequence[ConfigurationItem],
    mappings: Sequence[ServiceCiMapping],
    relationships: Sequence[CiRelationship],
    filters: GraphFilters | None = None,
    *,
    dependency_types: Iterable[str] = DEFAULT_DEPENDENCY_TYPES,
) -> CmdbGraph:
    """Build the filtered CMDB graph.

    See :func:`build_graph_with_stats` for the rules; this variant discards
    the drop counters.
    """
    graph, _ = build_graph_with_stats(
        services, cis, mappings, relationships, filters, dependency_types=dependency_types
    )
    return graph


def build_graph_with_stats(
    services: Sequence[Service],
    cis: Sequence[ConfigurationItem],
    mappings: Sequence[ServiceCiMapping],
    relationships: Sequence[CiRelationship],
    filters: GraphFilters | None = None,
    *,
    dependency_types: Iterable[str] = DEFAULT_DEPENDENCY_TYPES,
) -> tuple[CmdbGraph, BuildStats]:
    """Build the filtered CMDB graph and report what was left out.

    - One node per service when ``include_services`` is set.
    - One node per CI passing both the type and the environment filter.
    - One ``service_uses_ci`` edge per mapping whose service and CI are
      both in the graph.
    - One CI-to-CI edge per relationship whose endpoints are both in the
      graph; dependency labels become ``ci_depends_on``, all others
      ``ci_related``.

    References to missing or filtered-out entities are dropped silently.
    When a record id repeats, the first record wins.
    """
    filters = filters or GraphFilters()
    dependency_kinds = tuple(dependency_types)

    nodes: list[GraphNode] = []
    seen: set[NodeRef] = set()
    duplicates = 0

    def _add(ref: NodeRef, record: Service | ConfigurationItem) -> None:
        nonlocal duplicates
        if ref in seen:
            duplicates += 1
            logger.debug("Duplicate record %s ignored", ref)
            return
        seen.add(ref)
        nodes.append(GraphNode(ref=ref, record=record))

    if filters.include_services:
        for service in services:
            _add(NodeRef.service(service.id), service)

    filtered_cis = 0
    for ci in cis:
        if filters.matches_ci(ci):
            _add(NodeRef.ci(ci.id), ci)
        else:
            filtered_cis += 1

    edges: list[GraphEdge] = []
    dropped_mappings = 0
    for mapping in mappings:
        service_ref = NodeRef.service(mapping.service_id)
        ci_ref = NodeRef.ci(mapping.ci_id)
        if service_ref not in seen or ci_ref not in seen:
            dropped_mappings += 1
            continue
        edges.append(
            GraphEdge(
                id=f"service-ci-{mapping.id}",
                source=service_ref.node_id,
                target=ci_ref.node_id,
                kind=EdgeKind.SERVICE_USES_CI,
                relationship_type=mapping.relationship_type,
                critical=mapping.is_critical,
            )
        )

    dropped_relationships = 0
    for rel in relationships:
        source_ref = NodeRef.ci(rel.source_ci_id)
        target_ref = NodeRef.ci(rel.target_ci_id)
        if source_ref not in seen or target_ref not in seen:
            dropped_relationships += 1
            continue
        if filters.active_relationships_only and not rel.is_active:
            dropped_relationships += 1
            continue
        edges.append(
            GraphEdge(
                id=f"ci-ci-{rel.id}",
                source=source_ref.node_id,
                target=target_ref.node_id,
                kind=classify_relationship(rel.relationship_type, dependency_kinds),
                relationship_type=rel.relationship_type,
            )
        )

    stats = BuildStats(
        filtered_cis=filtered_cis,
        dropped_mappings=dropped_mappings,
        dropped_relationships=dropped_relationships,
        duplicate_records=duplicates,
    )
    if dropped_mappings or dropped_relationships:
        logger.debug(
            "Dropped %d mappings and %d relationships with excluded endpoints",
            dropped_mappings,
            dropped_relationships,
        )
    return CmdbGraph(nodes=tuple(nodes), edges=tuple(edges)), stats

"""Render view — the positioned, annotated graph handed to the drawing layer.

build → impact (when a source is selected) → annotate → layout → project.
Every stage is recomputed wholesale; nothing here is cached or mutated.
The models serialise with camelCase aliases (``isImpacted``, ``strokeWidth``)
via ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from cmdbgraph.config.models import CmdbGraphConfig
from cmdbgraph.domain import styles
from cmdbgraph.domain.builder import build_graph
from cmdbgraph.domain.graph import CmdbGraph, GraphEdge, GraphFilters, GraphNode, NodeRef
from cmdbgraph.domain.records import CmdbSnapshot, Service
from cmdbgraph.domain.types import EdgeKind, LayoutDirection, NodeKind
from cmdbgraph.layout.engine import LayoutResult, PositionedNode, layout
from cmdbgraph.services.impact import ImpactReport, analyze_impact, annotate_graph
from cmdbgraph.services.telemetry import trace_span

_VIEW_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Position(BaseModel):
    model_config = _VIEW_CONFIG

    x: float
    y: float


class RenderNode(BaseModel):
    """A positioned node with everything the drawing layer shows on it."""

    model_config = _VIEW_CONFIG

    id: str
    kind: NodeKind
    entity_id: int
    label: str
    position: Position
    width: float
    height: float
    rank: int
    is_impacted: bool = False
    is_source: bool = False
    icon: str
    accent_color: str
    status: str
    # service metadata
    criticality: str | None = None
    criticality_color: str | None = None
    status_color: str | None = None
    owner: str | None = None
    # CI metadata
    ci_type: str | None = None
    environment: str | None = None
    environment_color: str | None = None


class RenderEdge(BaseModel):
    """An edge plus stroke hints."""

    model_config = _VIEW_CONFIG

    id: str
    source: str
    target: str
    kind: EdgeKind
    label: str
    critical: bool = False
    is_impacted: bool = False
    stroke: str
    stroke_width: int = 2
    animated: bool = False
    dashed: bool = False


class GraphStats(BaseModel):
    """Counts over the unfiltered snapshot."""

    model_config = _VIEW_CONFIG

    services: int
    cis: int
    relationships: int


class FilterOptions(BaseModel):
    model_config = _VIEW_CONFIG

    ci_types: list[str]
    environments: list[str]


class ImpactSummary(BaseModel):
    model_config = _VIEW_CONFIG

    source_id: str
    source_label: str
    affected_count: int
    service_count: int
    ci_count: int
    impacted_ids: list[str]


class GraphView(BaseModel):
    model_config = _VIEW_CONFIG

    nodes: list[RenderNode]
    edges: list[RenderEdge]
    width: float
    height: float
    direction: LayoutDirection
    stats: GraphStats
    filter_options: FilterOptions
    impact: ImpactSummary | None = None


def render_node(positioned: PositionedNode[GraphNode]) -> RenderNode:
    node = positioned.item
    common = {
        "id": node.id,
        "kind": node.kind,
        "entity_id": node.ref.entity_id,
        "label": node.label,
        "position": Position(x=positioned.x, y=positioned.y),
        "width": positioned.width,
        "height": positioned.height,
        "rank": positioned.rank,
        "is_impacted": node.is_impacted,
        "is_source": node.is_source,
        "status": node.record.status,
    }
    record = node.record
    if isinstance(record, Service):
        return RenderNode(
            **common,
            icon=styles.SERVICE_ICON,
            accent_color=styles.color_for(styles.CRITICALITY_COLORS, record.criticality.value),
            criticality=record.criticality.value,
            criticality_color=styles.color_for(styles.CRITICALITY_COLORS, record.criticality.value),
            status_color=styles.color_for(styles.SERVICE_STATUS_COLORS, record.status),
            owner=record.owner,
        )
    return RenderNode(
        **common,
        icon=styles.CI_TYPE_ICONS.get(record.ci_type, styles.DEFAULT_CI_ICON),
        accent_color=styles.color_for(styles.CI_TYPE_COLORS, record.ci_type),
        ci_type=record.ci_type,
        environment=record.environment,
        environment_color=styles.color_for(styles.ENVIRONMENT_COLORS, record.environment),
    )


def render_edge(edge: GraphEdge) -> RenderEdge:
    """Critical mappings: red, thick, animated. Impacted: orange, animated.
    CI-to-CI links are dashed."""
    if edge.kind is EdgeKind.SERVICE_USES_CI:
        if edge.critical:
            stroke = styles.CRITICAL_STROKE
        elif edge.is_impacted:
            stroke = styles.IMPACTED_STROKE
        else:
            stroke = styles.MAPPING_STROKE
        return RenderEdge(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            kind=edge.kind,
            label=edge.relationship_type,
            critical=edge.critical,
            is_impacted=edge.is_impacted,
            stroke=stroke,
            stroke_width=3 if edge.critical else 2,
            animated=edge.critical or edge.is_impacted,
        )
    return RenderEdge(
        id=edge.id,
        source=edge.source,
        target=edge.target,
        kind=edge.kind,
        label=edge.relationship_type,
        is_impacted=edge.is_impacted,
        stroke=styles.IMPACTED_STROKE if edge.is_impacted else styles.CI_LINK_STROKE,
        animated=edge.is_impacted,
        dashed=True,
    )


def summarize_impact(report: ImpactReport, graph: CmdbGraph) -> ImpactSummary:
    return ImpactSummary(
        source_id=report.source.node_id,
        source_label=report.source_label,
        affected_count=report.affected_count,
        service_count=report.service_count,
        ci_count=report.ci_count,
        impacted_ids=report.ordered_ids(graph),
    )


def build_view(
    snapshot: CmdbSnapshot,
    filters: GraphFilters | None = None,
    impact_source: str | NodeRef | None = None,
    direction: LayoutDirection | str | None = None,
    config: CmdbGraphConfig | None = None,
) -> GraphView:
    """Run the whole pipeline for one render.

    An *impact_source* that is not in the filtered graph yields a view
    without impact annotation.
    """
    config = config or CmdbGraphConfig()
    filters = filters or config.filters

    with trace_span("build") as span:
        graph = build_graph(
            snapshot.services,
            snapshot.cis,
            snapshot.mappings,
            snapshot.relationships,
            filters,
            dependency_types=config.impact.dependency_relationship_types,
        )
        if span:
            span.annotate("nodes", len(graph.nodes))
            span.annotate("edges", len(graph.edges))

    report: ImpactReport | None = None
    if impact_source is not None:
        with trace_span("impact") as span:
            report = analyze_impact(graph, impact_source)
            if span:
                span.annotate("impacted", len(report.impacted) if report else 0)

    if report is not None:
        graph_for_layout = annotate_graph(graph, report.impacted, report.source)
    else:
        graph_for_layout = annotate_graph(graph, frozenset())

    with trace_span("layout") as span:
        positioned: LayoutResult[GraphNode, GraphEdge] = layout(
            graph_for_layout.nodes,
            graph_for_layout.edges,
            direction,
            config=config.layout,
        )
        if span:
            span.annotate("crossings", positioned.crossings)

    return GraphView(
        nodes=[render_node(p) for p in positioned.nodes],
        edges=[render_edge(e) for e in positioned.edges],
        width=positioned.width,
        height=positioned.height,
        direction=positioned.direction,
        stats=GraphStats(
            services=len(snapshot.services),
            cis=len(snapshot.cis),
            relationships=snapshot.relationship_count,
        ),
        filter_options=FilterOptions(
            ci_types=snapshot.ci_types(),
            environments=snapshot.environments(),
        ),
        impact=summarize_impact(report, graph) if report is not None else None,
    )

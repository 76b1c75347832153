"""CmdbGraphService — the pipeline behind the CMDB graph screen.

Four read-only operations over a :class:`CmdbSnapshot`, each returning a
:class:`ServiceResult`:

- ``build``  — filtered graph plus counts of what was left out
- ``impact`` — blast radius of one node
- ``layout`` — layered positions for the filtered graph
- ``view``   — everything the renderer needs in one payload

Nothing is cached between calls: every call rebuilds from the snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cmdbgraph.config.logging import configure_logging
from cmdbgraph.config.models import CmdbGraphConfig
from cmdbgraph.config.settings import CmdbGraphSettings
from cmdbgraph.domain.builder import BuildStats, build_graph_with_stats
from cmdbgraph.domain.graph import CmdbGraph, GraphFilters, NodeRef
from cmdbgraph.domain.records import CmdbSnapshot
from cmdbgraph.domain.types import LayoutDirection, NodeKind
from cmdbgraph.layout.engine import layout
from cmdbgraph.services.impact import analyze_impact
from cmdbgraph.services.result import ServiceError, ServiceResult
from cmdbgraph.services.telemetry import enable_telemetry, trace_span, traced
from cmdbgraph.services.view import build_view, summarize_impact

logger = logging.getLogger(__name__)


class CmdbGraphService:
    """Builds, analyses and lays out the CMDB dependency graph."""

    def __init__(self, config: CmdbGraphConfig | None = None) -> None:
        self._config = config or CmdbGraphConfig()

    @classmethod
    def from_settings(cls, settings: CmdbGraphSettings) -> CmdbGraphService:
        """Configure logging (and telemetry when verbose) and build a service."""
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()
        return cls(settings.to_config())

    @property
    def config(self) -> CmdbGraphConfig:
        return self._config

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _build(
        self, snapshot: CmdbSnapshot, filters: GraphFilters | None
    ) -> tuple[CmdbGraph, BuildStats]:
        with trace_span("build") as span:
            graph, stats = build_graph_with_stats(
                snapshot.services,
                snapshot.cis,
                snapshot.mappings,
                snapshot.relationships,
                filters or self._config.filters,
                dependency_types=self._config.impact.dependency_relationship_types,
            )
            if span:
                span.annotate("nodes", len(graph.nodes))
                span.annotate("edges", len(graph.edges))
        return graph, stats

    @staticmethod
    def _source_id(source: str | NodeRef) -> str:
        return source.node_id if isinstance(source, NodeRef) else source

    # ------------------------------------------------------------------
    # build
    # ------------------------------------------------------------------

    @traced
    def build(
        self, snapshot: CmdbSnapshot, filters: GraphFilters | None = None
    ) -> ServiceResult:
        """Build the filtered graph.

        ``data["dropped"]`` counts mappings and relationships whose endpoints
        were filtered out or missing; they are not errors.
        """
        graph, stats = self._build(snapshot, filters)
        return ServiceResult(
            ok=True,
            op="build",
            data={
                "graph": graph,
                "node_count": len(graph.nodes),
                "edge_count": len(graph.edges),
                "services": graph.count(NodeKind.SERVICE),
                "cis": graph.count(NodeKind.CI),
                "dropped": stats.as_dict(),
            },
        )

    # ------------------------------------------------------------------
    # impact: blast radius
    # ------------------------------------------------------------------

    @traced
    def impact(
        self,
        snapshot: CmdbSnapshot,
        source: str | NodeRef,
        filters: GraphFilters | None = None,
    ) -> ServiceResult:
        """Everything that fails when *source* fails.

        An unknown source is reported as ``NOT_FOUND`` with an empty
        ``impacted`` list, never raised.
        """
        source_id = self._source_id(source)
        graph, _ = self._build(snapshot, filters)

        with trace_span("impact"):
            report = analyze_impact(graph, source_id)

        if report is None:
            return ServiceResult(
                ok=False,
                op="impact",
                data={"source_id": source_id, "impacted": [], "affected_count": 0},
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"Node '{source_id}' not found in graph",
                ),
            )

        summary = summarize_impact(report, graph)
        return ServiceResult(
            ok=True,
            op="impact",
            data={
                "source_id": summary.source_id,
                "source_label": summary.source_label,
                "impacted": summary.impacted_ids,
                "affected_count": summary.affected_count,
                "services": summary.service_count,
                "cis": summary.ci_count,
                "impacted_edges": sorted(report.impacted_edges),
            },
        )

    # ------------------------------------------------------------------
    # layout
    # ------------------------------------------------------------------

    @traced
    def layout(
        self,
        snapshot: CmdbSnapshot,
        filters: GraphFilters | None = None,
        *,
        direction: LayoutDirection | str | None = None,
        sizes: Mapping[str, tuple[float, float]] | None = None,
    ) -> ServiceResult:
        """Position the filtered graph with the layered layout."""
        graph, _ = self._build(snapshot, filters)

        with trace_span("layout") as span:
            result = layout(
                graph.nodes,
                graph.edges,
                direction,
                config=self._config.layout,
                sizes=sizes,
            )
            if span:
                span.annotate("crossings", result.crossings)

        positions: dict[str, dict[str, Any]] = {
            p.id: {"x": p.x, "y": p.y, "rank": p.rank, "order": p.order} for p in result.nodes
        }
        return ServiceResult(
            ok=True,
            op="layout",
            data={
                "layout": result,
                "positions": positions,
                "width": result.width,
                "height": result.height,
                "crossings": result.crossings,
                "reversed_edges": sorted(result.reversed_edges),
            },
        )

    # ------------------------------------------------------------------
    # view: full render payload
    # ------------------------------------------------------------------

    @traced
    def view(
        self,
        snapshot: CmdbSnapshot,
        filters: GraphFilters | None = None,
        *,
        impact_source: str | NodeRef | None = None,
        direction: LayoutDirection | str | None = None,
    ) -> ServiceResult:
        """Render payload: positioned nodes, styled edges, stats, impact summary."""
        view = build_view(
            snapshot,
            filters,
            impact_source=impact_source,
            direction=direction,
            config=self._config,
        )

        warnings: list[str] = []
        if impact_source is not None and view.impact is None:
            source_id = self._source_id(impact_source)
            logger.debug("Impact source %s not in graph; rendering without impact", source_id)
            warnings.append(f"Impact source '{source_id}' not found in graph")

        return ServiceResult(ok=True, op="view", data={"view": view}, warnings=warnings)

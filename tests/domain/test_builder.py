"""Tests for the graph builder — filtering, edge typing, dropped references."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pytest

from cmdbgraph.domain.builder import (
    build_graph,
    build_graph_with_stats,
    classify_relationship,
    normalize_relationship_type,
)
from cmdbgraph.domain.graph import CmdbGraph, GraphFilters
from cmdbgraph.domain.records import CmdbSnapshot
from cmdbgraph.domain.types import EdgeKind, NodeKind

Factories = dict[str, Callable[..., Any]]


def _build(snapshot: CmdbSnapshot, filters: GraphFilters | None = None) -> CmdbGraph:
    return build_graph(
        snapshot.services, snapshot.cis, snapshot.mappings, snapshot.relationships, filters
    )


class TestRelationshipTypes:
    @pytest.mark.parametrize("label", ["DependsOn", "dependsOn", "Depends On", " DEPENDSON "])
    def test_dependency_labels(self, label: str) -> None:
        assert classify_relationship(label, ("DependsOn",)) is EdgeKind.CI_DEPENDS_ON

    @pytest.mark.parametrize("label", ["ConnectsTo", "HostedBy", "Uses", ""])
    def test_other_labels_are_related(self, label: str) -> None:
        assert classify_relationship(label, ("DependsOn",)) is EdgeKind.CI_RELATED

    def test_custom_dependency_types(self) -> None:
        assert classify_relationship("RunsOn", ("DependsOn", "Runs On")) is EdgeKind.CI_DEPENDS_ON

    def test_normalize(self) -> None:
        assert normalize_relationship_type("Depends On") == "dependson"


class TestNodes:
    def test_services_then_cis_in_input_order(self, chain_snapshot: CmdbSnapshot) -> None:
        graph = _build(chain_snapshot)
        assert graph.node_ids == ["service-1", "ci-1", "ci-2", "ci-3"]

    def test_exclude_services(self, chain_snapshot: CmdbSnapshot) -> None:
        graph = _build(chain_snapshot, GraphFilters(include_services=False))
        assert graph.count(NodeKind.SERVICE) == 0
        # mappings lose their service endpoint
        assert all(e.kind is not EdgeKind.SERVICE_USES_CI for e in graph.edges)
        assert len(graph.edges) == 2

    def test_exclude_cis(self, chain_snapshot: CmdbSnapshot) -> None:
        graph = _build(chain_snapshot, GraphFilters(include_cis=False))
        assert graph.node_ids == ["service-1"]
        assert graph.edges == ()

    def test_type_filter(self, chain_snapshot: CmdbSnapshot) -> None:
        graph = _build(chain_snapshot, GraphFilters(ci_type="Server"))
        assert graph.node_ids == ["service-1", "ci-1"]
        assert [e.id for e in graph.edges] == ["service-ci-1"]

    def test_environment_filter_drops_edges(self, chain_snapshot: CmdbSnapshot) -> None:
        graph = _build(chain_snapshot, GraphFilters(environment="Production"))
        assert "ci-2" not in graph
        assert [e.id for e in graph.edges] == ["service-ci-1"]

    def test_duplicate_ids_first_wins(self, factories: Factories) -> None:
        snapshot = CmdbSnapshot(
            cis=(factories["ci"](1, name="first"), factories["ci"](1, name="second")),
        )
        graph, stats = build_graph_with_stats((), snapshot.cis, (), ())
        assert len(graph) == 1
        node = graph.node("ci-1")
        assert node is not None
        assert node.label == "first"
        assert stats.duplicate_records == 1

    def test_service_and_ci_may_share_entity_id(self, chain_snapshot: CmdbSnapshot) -> None:
        graph = _build(chain_snapshot)
        assert "service-1" in graph
        assert "ci-1" in graph


class TestEdges:
    def test_mapping_edge(self, portal_snapshot: CmdbSnapshot) -> None:
        graph = _build(portal_snapshot)
        edge = next(e for e in graph.edges if e.id == "service-ci-1")
        assert edge.source == "service-1"
        assert edge.target == "ci-1"
        assert edge.kind is EdgeKind.SERVICE_USES_CI
        assert edge.critical is True
        assert edge.relationship_type == "Contains"

    def test_relationship_edges(self, portal_snapshot: CmdbSnapshot) -> None:
        graph = _build(portal_snapshot)
        kinds = {e.id: e.kind for e in graph.edges if e.id.startswith("ci-ci-")}
        assert kinds == {
            "ci-ci-1": EdgeKind.CI_DEPENDS_ON,
            "ci-ci-2": EdgeKind.CI_DEPENDS_ON,
            "ci-ci-3": EdgeKind.CI_RELATED,
        }

    def test_mappings_before_relationships(self, portal_snapshot: CmdbSnapshot) -> None:
        ids = [e.id for e in _build(portal_snapshot).edges]
        assert ids == [
            "service-ci-1",
            "service-ci-2",
            "service-ci-3",
            "ci-ci-1",
            "ci-ci-2",
            "ci-ci-3",
        ]

    def test_every_edge_endpoint_is_a_node(self, portal_snapshot: CmdbSnapshot) -> None:
        for filters in (
            GraphFilters(),
            GraphFilters(environment="Production"),
            GraphFilters(ci_type="Database"),
            GraphFilters(include_services=False),
        ):
            graph = _build(portal_snapshot, filters)
            for edge in graph.edges:
                assert edge.source in graph
                assert edge.target in graph

    def test_dangling_references_dropped(self, factories: Factories) -> None:
        graph, stats = build_graph_with_stats(
            [factories["service"](1)],
            [factories["ci"](1)],
            [factories["mapping"](1, 1, 99), factories["mapping"](2, 42, 1)],
            [factories["relationship"](1, 1, 77)],
        )
        assert graph.edges == ()
        assert stats.as_dict() == {
            "filtered_cis": 0,
            "mappings": 2,
            "relationships": 1,
            "duplicates": 0,
        }

    def test_inactive_relationships_kept_by_default(self, factories: Factories) -> None:
        rels = [factories["relationship"](1, 2, 1, is_active=False)]
        cis = [factories["ci"](1), factories["ci"](2)]
        graph = build_graph((), cis, (), rels)
        assert [e.id for e in graph.edges] == ["ci-ci-1"]

    def test_active_relationships_only(self, factories: Factories) -> None:
        rels = [
            factories["relationship"](1, 2, 1, is_active=False),
            factories["relationship"](2, 3, 1),
        ]
        cis = [factories["ci"](1), factories["ci"](2), factories["ci"](3)]
        graph, stats = build_graph_with_stats(
            (), cis, (), rels, GraphFilters(active_relationships_only=True)
        )
        assert [e.id for e in graph.edges] == ["ci-ci-2"]
        assert stats.dropped_relationships == 1

    def test_dependency_types_keyword(self, factories: Factories) -> None:
        cis = [factories["ci"](1), factories["ci"](2)]
        rels = [factories["relationship"](1, 2, 1, rel_type="HostedBy")]
        graph = build_graph((), cis, (), rels, dependency_types=("DependsOn", "HostedBy"))
        assert graph.edges[0].kind is EdgeKind.CI_DEPENDS_ON

    def test_empty_input(self) -> None:
        graph = build_graph((), (), (), ())
        assert graph.nodes == ()
        assert graph.edges == ()

    def test_drops_logged_at_debug(
        self, factories: Factories, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="cmdbgraph.domain.builder"):
            build_graph([factories["service"](1)], (), [factories["mapping"](1, 1, 5)], ())
        assert "Dropped 1 mappings" in caplog.text

    def test_stats_count_filtered_cis(self, chain_snapshot: CmdbSnapshot) -> None:
        _, stats = build_graph_with_stats(
            chain_snapshot.services,
            chain_snapshot.cis,
            chain_snapshot.mappings,
            chain_snapshot.relationships,
            GraphFilters(environment="Production"),
        )
        assert stats.filtered_cis == 1
        assert stats.dropped_relationships == 2

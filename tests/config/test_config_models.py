"""Tests for config models — defaults and sparse overrides."""

import pytest

from cmdbgraph.config.models import CmdbGraphConfig, ImpactConfig, LayoutConfig
from cmdbgraph.domain.types import LayoutDirection


class TestLayoutConfig:
    def test_defaults_match_graph_screen(self) -> None:
        cfg = LayoutConfig()
        assert cfg.direction is LayoutDirection.TB
        assert cfg.node_width == 200
        assert cfg.node_height == 100
        assert cfg.node_sep == 80
        assert cfg.rank_sep == 120
        assert cfg.margin_x == 50
        assert cfg.margin_y == 50

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            LayoutConfig(node_width=0)

    def test_frozen(self) -> None:
        cfg = LayoutConfig()
        with pytest.raises(Exception):
            cfg.node_sep = 10  # type: ignore[misc]


class TestCmdbGraphConfig:
    def test_full_defaults(self) -> None:
        cfg = CmdbGraphConfig()
        assert cfg.impact.dependency_relationship_types == ("DependsOn",)
        assert cfg.filters.include_services is True
        assert cfg.filters.include_cis is True
        assert cfg.filters.ci_type is None
        assert cfg.filters.environment is None

    def test_sparse_override(self) -> None:
        cfg = CmdbGraphConfig.model_validate(
            {
                "layout": {"direction": "LR", "rank_sep": 60},
                "filters": {"environment": "Production"},
            }
        )
        assert cfg.layout.direction is LayoutDirection.LR
        assert cfg.layout.rank_sep == 60
        assert cfg.layout.node_sep == 80  # default preserved
        assert cfg.filters.environment == "Production"
        assert cfg.filters.include_services is True

    def test_dependency_types_from_list(self) -> None:
        cfg = ImpactConfig.model_validate(
            {"dependency_relationship_types": ["DependsOn", "RunsOn"]}
        )
        assert cfg.dependency_relationship_types == ("DependsOn", "RunsOn")

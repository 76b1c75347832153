"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, cmdbgraph.toml only contains overrides.
The layout defaults reproduce the spacing of the CMDB graph screen.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from cmdbgraph.domain.graph import GraphFilters
from cmdbgraph.domain.types import LayoutDirection


class LayoutConfig(BaseModel):
    """[layout] section."""

    model_config = {"frozen": True}

    direction: LayoutDirection = LayoutDirection.TB
    node_width: float = Field(default=200.0, gt=0)
    node_height: float = Field(default=100.0, gt=0)
    node_sep: float = Field(default=80.0, ge=0)
    edge_sep: float = Field(default=20.0, ge=0)
    rank_sep: float = Field(default=120.0, ge=0)
    margin_x: float = Field(default=50.0, ge=0)
    margin_y: float = Field(default=50.0, ge=0)
    ordering_passes: int = Field(default=24, ge=0)
    alignment_passes: int = Field(default=4, ge=0)


class ImpactConfig(BaseModel):
    """[impact] section."""

    model_config = {"frozen": True}

    dependency_relationship_types: tuple[str, ...] = ("DependsOn",)


class CmdbGraphConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    impact: ImpactConfig = Field(default_factory=ImpactConfig)
    filters: GraphFilters = Field(default_factory=GraphFilters)

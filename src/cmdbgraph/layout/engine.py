"""Layered (Sugiyama-style) layout — ranks, then order, then coordinates.

The engine is independent of impact analysis and of any rendering toolkit:
it positions anything with an ``id`` and connects anything with
``source``/``target``. Same input in the same order, same positions.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from cmdbgraph.config.models import LayoutConfig
from cmdbgraph.domain.types import LayoutDirection
from cmdbgraph.layout.coordinates import Box, assign_coordinates, dummy_free, sizes_from
from cmdbgraph.layout.ordering import normalize_long_edges, order_layers
from cmdbgraph.layout.ranking import assign_ranks, break_cycles

logger = logging.getLogger(__name__)


class LayoutNode(Protocol):
    @property
    def id(self) -> str: ...


class LayoutEdge(Protocol):
    @property
    def source(self) -> str: ...

    @property
    def target(self) -> str: ...


N = TypeVar("N", bound=LayoutNode)
E = TypeVar("E", bound=LayoutEdge)


@dataclass(frozen=True)
class PositionedNode(Generic[N]):
    """An input node plus its computed top-left position and size."""

    item: N
    x: float
    y: float
    width: float
    height: float
    rank: int
    order: int

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class LayoutResult(Generic[N, E]):
    """Positioned nodes (input order) and the untouched edges."""

    nodes: tuple[PositionedNode[N], ...] = ()
    edges: tuple[E, ...] = ()
    width: float = 0.0
    height: float = 0.0
    direction: LayoutDirection = LayoutDirection.TB
    reversed_edges: frozenset[tuple[str, str]] = frozenset()
    crossings: int = 0

    def position(self, node_id: str) -> PositionedNode[N] | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @property
    def ranks(self) -> dict[str, int]:
        return {n.id: n.rank for n in self.nodes}


def layout(
    nodes: Sequence[N],
    edges: Sequence[E],
    direction: LayoutDirection | str | None = None,
    *,
    config: LayoutConfig | None = None,
    sizes: Mapping[str, tuple[float, float]] | None = None,
) -> LayoutResult[N, E]:
    """Assign every node a position with a layered drawing.

    Args:
        nodes: Items to place; only ``id`` is read. Repeated ids share one slot.
        edges: Connections; only ``source``/``target`` are read. Edges with
            an unknown endpoint are passed through but ignored for placement.
        direction: ``TB`` or ``LR``; defaults to ``config.direction``.
        config: Spacing, node size and sweep limits.
        sizes: Per-node ``(width, height)`` overrides keyed by node id.
    """
    config = config or LayoutConfig()
    direction = LayoutDirection(direction) if direction is not None else config.direction

    if not nodes:
        return LayoutResult(edges=tuple(edges), direction=direction)

    node_ids: list[str] = list(dict.fromkeys(n.id for n in nodes))
    acyclic = break_cycles(node_ids, ((e.source, e.target) for e in edges))
    ranks = assign_ranks(acyclic.dag)
    layered = normalize_long_edges(acyclic.dag, ranks)
    layers, crossings = order_layers(layered, node_ids, passes=config.ordering_passes)

    size_of = sizes_from(sizes, config)
    placement = assign_coordinates(layers, layered.graph, size_of, config, direction)

    order_in_rank = {
        node: i for layer in dummy_free(layers) for i, node in enumerate(layer)
    }
    positioned: list[PositionedNode[N]] = []
    for item in nodes:
        box: Box = placement.boxes[item.id]
        positioned.append(
            PositionedNode(
                item=item,
                x=box.x,
                y=box.y,
                width=box.width,
                height=box.height,
                rank=ranks[item.id],
                order=order_in_rank[item.id],
            )
        )

    if acyclic.reversed_edges:
        logger.debug("Reversed %d feedback edges", len(acyclic.reversed_edges))
    return LayoutResult(
        nodes=tuple(positioned),
        edges=tuple(edges),
        width=placement.width,
        height=placement.height,
        direction=direction,
        reversed_edges=frozenset(
            (str(s), str(t)) for s, t in acyclic.reversed_edges
        ),
        crossings=crossings,
    )

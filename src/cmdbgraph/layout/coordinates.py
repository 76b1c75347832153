"""Coordinate assignment — phase 4 of the layered layout.

Works in a direction-neutral frame: the *cross* axis runs along a rank,
the *rank* axis across ranks. TB maps (cross, rank) to (x, y); LR maps it
to (y, x) and swaps node width and height accordingly.

Within a rank nodes are packed with ``node_sep`` (``edge_sep`` next to
dummies) and centred on the widest rank. Alignment passes then pull each
node toward the mean centre of its neighbours in the adjacent rank. The
pull is resolved by a forward and a backward constrained sweep whose
average keeps every separation.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass

import networkx as nx

from cmdbgraph.config.models import LayoutConfig
from cmdbgraph.domain.types import LayoutDirection
from cmdbgraph.layout.ordering import is_dummy


@dataclass(frozen=True)
class Box:
    """Centre point and size of a placed node, in screen coordinates."""

    cx: float
    cy: float
    width: float
    height: float

    @property
    def x(self) -> float:
        return self.cx - self.width / 2

    @property
    def y(self) -> float:
        return self.cy - self.height / 2


@dataclass(frozen=True)
class Placement:
    boxes: dict[Hashable, Box]
    width: float
    height: float


def _cross_size(size: tuple[float, float], direction: LayoutDirection) -> float:
    return size[0] if direction is LayoutDirection.TB else size[1]


def _rank_size(size: tuple[float, float], direction: LayoutDirection) -> float:
    return size[1] if direction is LayoutDirection.TB else size[0]


def _separation(a: Hashable, b: Hashable, config: LayoutConfig) -> float:
    dummies = is_dummy(a) + is_dummy(b)
    if dummies == 0:
        return config.node_sep
    if dummies == 2:
        return config.edge_sep
    return (config.node_sep + config.edge_sep) / 2


def _constrained(desired: list[float], gaps: list[float]) -> list[float]:
    """Closest ordered positions to *desired* honouring minimum *gaps*.

    ``gaps[i]`` is the minimum distance between positions ``i`` and ``i + 1``.
    """
    n = len(desired)
    forward = list(desired)
    for i in range(1, n):
        forward[i] = max(desired[i], forward[i - 1] + gaps[i - 1])
    backward = list(desired)
    for i in range(n - 2, -1, -1):
        backward[i] = min(desired[i], backward[i + 1] - gaps[i])
    return [(f + b) / 2 for f, b in zip(forward, backward, strict=True)]


def assign_coordinates(
    layers: Sequence[Sequence[Hashable]],
    g: nx.DiGraph,
    size_of: Callable[[Hashable], tuple[float, float]],
    config: LayoutConfig,
    direction: LayoutDirection,
) -> Placement:
    """Place every node of *layers*; *size_of* returns ``(width, height)``."""
    if not any(layers):
        return Placement(boxes={}, width=0.0, height=0.0)

    half = {n: _cross_size(size_of(n), direction) / 2 for layer in layers for n in layer}
    gaps = [
        [
            half[a] + _separation(a, b, config) + half[b]
            for a, b in zip(layer, layer[1:], strict=False)
        ]
        for layer in layers
    ]

    # Initial packing, each rank centred on the widest one.
    cross: dict[Hashable, float] = {}
    extents: list[float] = []
    for layer, layer_gaps in zip(layers, gaps, strict=True):
        position = half[layer[0]] if layer else 0.0
        for i, node in enumerate(layer):
            if i:
                position += layer_gaps[i - 1]
            cross[node] = position
        extents.append(position + half[layer[-1]] if layer else 0.0)
    widest = max(extents)
    for layer, extent in zip(layers, extents, strict=True):
        for node in layer:
            cross[node] += (widest - extent) / 2

    for p in range(config.alignment_passes):
        downward = p % 2 == 0
        indices = range(1, len(layers)) if downward else range(len(layers) - 2, -1, -1)
        for r in indices:
            layer = layers[r]
            if not layer:
                continue
            desired: list[float] = []
            for node in layer:
                neighbors = list(g.predecessors(node) if downward else g.successors(node))
                if neighbors:
                    desired.append(sum(cross[n] for n in neighbors) / len(neighbors))
                else:
                    desired.append(cross[node])
            for node, value in zip(layer, _constrained(desired, gaps[r]), strict=True):
                cross[node] = value

    # Rank axis: each rank is as deep as its deepest node.
    rank_center: list[float] = []
    offset = 0.0
    for layer in layers:
        depth = max((_rank_size(size_of(n), direction) for n in layer), default=0.0)
        rank_center.append(offset + depth / 2)
        offset += depth + config.rank_sep

    real = [n for layer in layers for n in layer if not is_dummy(n)]
    if direction is LayoutDirection.TB:
        cross_margin, rank_margin = config.margin_x, config.margin_y
    else:
        cross_margin, rank_margin = config.margin_y, config.margin_x
    shift = cross_margin - min(cross[n] - half[n] for n in real)

    boxes: dict[Hashable, Box] = {}
    for r, layer in enumerate(layers):
        for node in layer:
            c = cross[node] + shift
            k = rank_center[r] + rank_margin
            width, height = size_of(node)
            if direction is LayoutDirection.TB:
                boxes[node] = Box(cx=c, cy=k, width=width, height=height)
            else:
                boxes[node] = Box(cx=k, cy=c, width=width, height=height)

    real_boxes = [boxes[n] for n in real]
    return Placement(
        boxes=boxes,
        width=max(b.x + b.width for b in real_boxes) + config.margin_x,
        height=max(b.y + b.height for b in real_boxes) + config.margin_y,
    )


def dummy_free(layers: Sequence[Sequence[Hashable]]) -> list[list[Hashable]]:
    """Rank orders with dummy nodes removed."""
    return [[n for n in layer if not is_dummy(n)] for layer in layers]


def sizes_from(
    overrides: Mapping[str, tuple[float, float]] | None,
    config: LayoutConfig,
) -> Callable[[Hashable], tuple[float, float]]:
    """Size lookup: dummies are points, real nodes use overrides or the defaults."""
    default = (config.node_width, config.node_height)
    overrides = overrides or {}

    def size_of(node: Hashable) -> tuple[float, float]:
        if is_dummy(node):
            return (0.0, 0.0)
        return overrides.get(node, default)  # type: ignore[call-overload]

    return size_of

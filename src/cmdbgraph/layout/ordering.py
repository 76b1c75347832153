"""Long-edge normalisation and crossing reduction — phase 3 of the layout.

Edges spanning several ranks are split with dummy nodes so every edge joins
adjacent ranks. Rank orders then go through alternating barycenter sweeps
(down using predecessors, up using successors); the ordering with the
fewest crossings wins. Nodes with no neighbour in the fixed rank keep their
slot, so unrelated nodes do not drift between re-renders.
"""

from __future__ import annotations

from bisect import bisect_right, insort
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass

import networkx as nx

# Sweeps without improvement before giving up.
_MAX_STALE_PASSES = 4


@dataclass(frozen=True)
class Dummy:
    """Placeholder for the *step*-th intermediate rank of a long edge."""

    edge_index: int
    step: int


@dataclass(frozen=True)
class LayeredGraph:
    """A DAG where every edge joins rank ``r`` to rank ``r + 1``."""

    graph: nx.DiGraph
    ranks: dict[Hashable, int]

    @property
    def rank_count(self) -> int:
        return max(self.ranks.values(), default=-1) + 1


def is_dummy(node: Hashable) -> bool:
    return isinstance(node, Dummy)


def normalize_long_edges(dag: nx.DiGraph, ranks: Mapping[Hashable, int]) -> LayeredGraph:
    """Replace each edge spanning k > 1 ranks with a chain of k - 1 dummies."""
    g: nx.DiGraph = nx.DiGraph()
    g.add_nodes_from(dag.nodes)
    layered_ranks: dict[Hashable, int] = dict(ranks)

    for index, (source, target) in enumerate(dag.edges()):
        span = ranks[target] - ranks[source]
        previous = source
        for step in range(1, span):
            dummy = Dummy(index, step)
            layered_ranks[dummy] = ranks[source] + step
            g.add_edge(previous, dummy)
            previous = dummy
        g.add_edge(previous, target)

    return LayeredGraph(graph=g, ranks=layered_ranks)


def initial_order(layered: LayeredGraph, node_ids: Sequence[Hashable]) -> list[list[Hashable]]:
    """DFS discovery order, starting from real nodes sorted by (rank, input index)."""
    layers: list[list[Hashable]] = [[] for _ in range(layered.rank_count)]
    visited: set[Hashable] = set()
    index = {node: i for i, node in enumerate(node_ids)}
    starts = sorted(node_ids, key=lambda n: (layered.ranks[n], index[n]))

    for start in starts:
        if start in visited:
            continue
        stack = [start]
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            layers[layered.ranks[node]].append(node)
            # Reversed so the first successor is visited first.
            stack.extend(reversed(list(layered.graph.successors(node))))
    return layers


def count_crossings(layers: Sequence[Sequence[Hashable]], g: nx.DiGraph) -> int:
    """Total edge crossings between every pair of adjacent ranks."""
    total = 0
    for upper, lower in zip(layers, layers[1:], strict=False):
        lower_pos = {node: i for i, node in enumerate(lower)}
        pairs = sorted(
            (i, lower_pos[succ])
            for i, node in enumerate(upper)
            for succ in g.successors(node)
            if succ in lower_pos
        )
        seen: list[int] = []
        for _, target_pos in pairs:
            total += len(seen) - bisect_right(seen, target_pos)
            insort(seen, target_pos)
    return total


def _barycenter_sort(
    layer: list[Hashable],
    neighbor_pos: Mapping[Hashable, int],
    neighbors_of: Mapping[Hashable, list[Hashable]],
) -> list[Hashable]:
    """Reorder *layer* by neighbour barycenter; nodes without neighbours keep their slot."""
    sortable: list[tuple[float, int, Hashable]] = []
    fixed: dict[int, Hashable] = {}
    for i, node in enumerate(layer):
        positions = [neighbor_pos[n] for n in neighbors_of[node] if n in neighbor_pos]
        if positions:
            sortable.append((sum(positions) / len(positions), i, node))
        else:
            fixed[i] = node

    sortable.sort(key=lambda item: (item[0], item[1]))
    movable = iter(node for _, _, node in sortable)
    return [fixed[i] if i in fixed else next(movable) for i in range(len(layer))]


def _sweep(layers: list[list[Hashable]], g: nx.DiGraph, *, downward: bool) -> None:
    if downward:
        indices = range(1, len(layers))
        neighbors_of = {n: list(g.predecessors(n)) for n in g.nodes}
        step = -1
    else:
        indices = range(len(layers) - 2, -1, -1)
        neighbors_of = {n: list(g.successors(n)) for n in g.nodes}
        step = 1
    for r in indices:
        fixed_pos = {node: i for i, node in enumerate(layers[r + step])}
        layers[r] = _barycenter_sort(layers[r], fixed_pos, neighbors_of)


def order_layers(
    layered: LayeredGraph,
    node_ids: Sequence[Hashable],
    *,
    passes: int = 24,
) -> tuple[list[list[Hashable]], int]:
    """Return the best rank orders found and their crossing count."""
    layers = initial_order(layered, node_ids)
    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(best, layered.graph)

    stale = 0
    for i in range(passes):
        if best_crossings == 0 or stale >= _MAX_STALE_PASSES:
            break
        _sweep(layers, layered.graph, downward=i % 2 == 0)
        crossings = count_crossings(layers, layered.graph)
        if crossings < best_crossings:
            best = [list(layer) for layer in layers]
            best_crossings = crossings
            stale = 0
        else:
            stale += 1

    return best, best_crossings

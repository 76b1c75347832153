"""Cycle breaking and rank assignment — phases 1 and 2 of the layered layout.

Cycle breaking runs a DFS in input order and reverses every back edge,
the classic DFS acyclic pass. Ranking is longest-path from the
sources: a node with no incoming edge sits on rank 0, every other node one
rank below its deepest predecessor.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass

import networkx as nx

_UNVISITED, _ON_STACK, _DONE = 0, 1, 2


@dataclass(frozen=True)
class AcyclicGraph:
    """Result of cycle breaking.

    Attributes:
        dag: The input graph with back edges reversed, self-loops dropped
            and parallel edges collapsed.
        reversed_edges: Original ``(source, target)`` pairs that were flipped.
    """

    dag: nx.DiGraph
    reversed_edges: frozenset[tuple[Hashable, Hashable]]


def find_back_edges(g: nx.DiGraph, roots: Iterable[Hashable]) -> set[tuple[Hashable, Hashable]]:
    """Iterative DFS from *roots* (in order); return edges closing a cycle."""
    state: dict[Hashable, int] = dict.fromkeys(g.nodes, _UNVISITED)
    back: set[tuple[Hashable, Hashable]] = set()

    for root in roots:
        if state[root] != _UNVISITED:
            continue
        state[root] = _ON_STACK
        stack = [(root, iter(g.successors(root)))]
        while stack:
            node, successors = stack[-1]
            for succ in successors:
                if state[succ] == _ON_STACK:
                    back.add((node, succ))
                elif state[succ] == _UNVISITED:
                    state[succ] = _ON_STACK
                    stack.append((succ, iter(g.successors(succ))))
                    break
            else:
                state[node] = _DONE
                stack.pop()
    return back


def break_cycles(
    node_ids: Sequence[Hashable],
    edges: Iterable[tuple[Hashable, Hashable]],
) -> AcyclicGraph:
    """Build a DAG over *node_ids* from *edges*, reversing feedback edges.

    Edges with an endpoint outside *node_ids* are ignored.
    """
    g: nx.DiGraph = nx.DiGraph()
    g.add_nodes_from(node_ids)
    for source, target in edges:
        if source == target or source not in g or target not in g:
            continue
        g.add_edge(source, target)

    back = find_back_edges(g, node_ids)

    dag: nx.DiGraph = nx.DiGraph()
    dag.add_nodes_from(node_ids)
    for source, target in g.edges():
        if (source, target) in back:
            dag.add_edge(target, source)
        else:
            dag.add_edge(source, target)
    return AcyclicGraph(dag=dag, reversed_edges=frozenset(back))


def assign_ranks(dag: nx.DiGraph) -> dict[Hashable, int]:
    """Longest-path ranking: ``rank(v) = max(rank(u) + 1)`` over predecessors ``u``."""
    ranks: dict[Hashable, int] = {}
    for node in nx.topological_sort(dag):
        ranks[node] = max((ranks[p] + 1 for p in dag.predecessors(node)), default=0)
    return ranks

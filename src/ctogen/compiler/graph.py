# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Directed-graph helpers shared by the loader and the model registry."""

from __future__ import annotations

# ###############
# Public Interface
# ###############


def detect_cycle(graph: dict[str, list[str]]) -> list[str] | None:
    """Detect a cycle in a directed graph using DFS.

    Uses a three-colour marking scheme (white/grey/black) to distinguish
    unvisited, in-progress, and fully-explored nodes.

    Args:
        graph: Adjacency list mapping each node to its direct neighbours.
            Nodes that appear only as neighbours (not as keys) are treated
            as having no outgoing edges.

    Returns:
        A list of node names forming the cycle with the start node repeated
        at the end (e.g. ``["A", "B", "C", "A"]``), or ``None`` if the
        graph is acyclic.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    color: dict[str, int] = {}
    path: list[str] = []

    def _dfs(node: str) -> list[str] | None:
        color[node] = GREY
        path.append(node)
        for neighbor in graph.get(node, []):
            state = color.get(neighbor, WHITE)
            if state == GREY:
                cycle_start = path.index(neighbor)
                return path[cycle_start:] + [neighbor]
            if state == WHITE:
                result = _dfs(neighbor)
                if result is not None:
                    return result
        path.pop()
        color[node] = BLACK
        return None

    for node in graph:
        if color.get(node, WHITE) == WHITE:
            result = _dfs(node)
            if result is not None:
                return result
    return None


def topological_order(graph: dict[str, list[str]]) -> list[str]:
    """Order the keys of *graph* so that every node follows its dependencies.

    Edges point from a node to the nodes it depends on. Among the nodes
    whose dependencies are all placed, the one listed first in *graph* is
    placed next, so an already-valid order is returned unchanged. Neighbours
    that are not keys of *graph* are ignored.

    Args:
        graph: Adjacency list mapping each node to the nodes it depends on.

    Returns:
        The keys of *graph*, dependencies first.

    Raises:
        ValueError: If the graph contains a cycle. The message names the
            cycle path.
    """
    cycle = detect_cycle({node: [n for n in deps if n in graph] for node, deps in graph.items()})
    if cycle is not None:
        raise ValueError("Cycle detected: " + " -> ".join(cycle))

    placed: set[str] = set()
    ordered: list[str] = []
    remaining = list(graph)
    while remaining:
        for node in remaining:
            if all(dep in placed or dep not in graph for dep in graph[node]):
                break
        remaining.remove(node)
        placed.add(node)
        ordered.append(node)
    return ordered

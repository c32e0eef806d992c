"""Shortest "how are we related" path between two people."""
from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional

from .models import FamilyGraph, GraphEdge


def shortest_path(graph: FamilyGraph, start_id: str, end_id: str) -> List[str]:
    """
    BFS over the undirected edge view; the first path found is a shortest one.
    Returns [] when either id is unknown or the two are not connected.
    """
    if not (graph.has_person(start_id) and graph.has_person(end_id)):
        return []
    if start_id == end_id:
        return [start_id]

    came_from: Dict[str, Optional[str]] = {start_id: None}
    queue = deque([start_id])
    while queue:
        current = queue.popleft()
        for other in graph.neighbors(current):
            if other in came_from:
                continue
            came_from[other] = current
            if other == end_id:
                return _walk_back(came_from, end_id)
            queue.append(other)
    return []


def _walk_back(came_from: Dict[str, Optional[str]], end_id: str) -> List[str]:
    path = [end_id]
    while came_from[path[-1]] is not None:
        path.append(came_from[path[-1]])
    path.reverse()
    return path


def path_edges(graph: FamilyGraph, path: List[str]) -> List[GraphEdge]:
    edges = []
    for a, b in zip(path, path[1:]):
        edge = graph.edge_between(a, b)
        if edge is not None:
            edges.append(edge)
    return edges


def describe_path(graph: FamilyGraph, path: List[str]) -> List[str]:
    """One sentence per hop, e.g. "Ann is the mother of Bob"."""
    hops = []
    for a, b in zip(path, path[1:]):
        edge = graph.edge_between(a, b)
        if edge is None:
            continue
        pa, pb = graph.person(a), graph.person(b)
        # label_from(b) describes a as seen from b
        hops.append(f"{pa.display_name} is the {edge.label_from(b)} of {pb.display_name}")
    return hops

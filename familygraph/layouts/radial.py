from __future__ import annotations

import math
from typing import Dict, Optional

from ..config import Bounds
from ..models import FamilyGraph, NodePosition


def layout_personal(
    graph: FamilyGraph,
    center_id: str,
    bounds: Optional[Bounds] = None,
    node_radius: float = 30.0,
) -> Dict[str, NodePosition]:
    """
    Ego view: the centre person in the middle, direct relations on one ring.
    Direct relations are placed in edge order, starting at angle 0.
    """
    bounds = bounds or Bounds()
    if not graph.has_person(center_id):
        return {}

    cx, cy = bounds.center
    pos: Dict[str, NodePosition] = {center_id: NodePosition(cx, cy, 0)}

    ring = []
    for other in graph.neighbors(center_id):
        if other not in pos and other not in ring:
            ring.append(other)
    if not ring:
        return pos

    radius = min(bounds.width, bounds.height) * 0.25 + node_radius
    for i, pid in enumerate(ring):
        angle = 2.0 * math.pi * i / len(ring)
        pos[pid] = NodePosition(cx + radius * math.cos(angle), cy + radius * math.sin(angle))
    return pos


def layout_grid(graph: FamilyGraph, bounds: Optional[Bounds] = None) -> Dict[str, NodePosition]:
    """Square-ish grid in roster order; used when no root is chosen."""
    bounds = bounds or Bounds()
    ids = graph.person_ids
    if not ids:
        return {}

    cols = math.ceil(math.sqrt(len(ids)))
    rows = math.ceil(len(ids) / cols)
    gap = min(bounds.width / (cols + 1), bounds.height / (rows + 1))
    return {
        pid: NodePosition((i % cols + 1) * gap, (i // cols + 1) * gap)
        for i, pid in enumerate(ids)
    }

from __future__ import annotations
from typing import Dict, List, Mapping, Optional

from ..assembler import node_groups
from ..models import FamilyGraph
from ..vocabulary import Gender, NodeGroup

GENERATION_PALETTE = [
    "#FFA07A", "#98FB98", "#87CEFA", "#DDA0DD", "#F4A460",
    "#66CDAA", "#FFB6C1", "#E6E6FA", "#20B2AA"
]

GROUP_COLORS = {
    NodeGroup.FAMILY: "#3b82f6",
    NodeGroup.FRIEND: "#8b5cf6",
    NodeGroup.MENTOR: "#f97316",
    NodeGroup.CULTURAL: "#10b981",
    NodeGroup.OTHER: "#9ca3af",
}

GENDER_COLORS = {
    Gender.MALE: "#87CEFA",
    Gender.FEMALE: "#FFB6C1",
    Gender.UNKNOWN: "#D3D3D3",
}

VIEWER_COLOR = "#FFD700"


def build_node_colors(
    graph: FamilyGraph,
    nodes: List[str],
    viewer_id: Optional[str] = None,
) -> List[str]:
    """Group colour for the viewer's direct relations, gender colour otherwise."""
    direct = set(graph.neighbors(viewer_id)) if viewer_id else set()
    groups = node_groups(graph, viewer_id) if viewer_id else {}

    colors: List[str] = []
    for node in nodes:
        if node == viewer_id:
            colors.append(VIEWER_COLOR)
        elif node in direct:
            colors.append(GROUP_COLORS[groups.get(node, NodeGroup.FAMILY)])
        else:
            person = graph.person(node)
            gender = person.gender if person else Gender.UNKNOWN
            colors.append(GENDER_COLORS[gender])
    return colors


def build_generation_colors(nodes: List[str], generations: Mapping[str, Optional[int]]) -> List[str]:
    """One palette entry per generation row; unplaced people are grey."""
    colors: List[str] = []
    for node in nodes:
        gen = generations.get(node)
        if gen is None:
            colors.append(GENDER_COLORS[Gender.UNKNOWN])
        else:
            colors.append(GENERATION_PALETTE[gen % len(GENERATION_PALETTE)])
    return colors

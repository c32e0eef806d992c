from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config import TreeLayoutSettings
from ..models import FamilyGraph, GraphNode, Issue, IssueKind, NodePosition
from ..vocabulary import Category

logger = logging.getLogger(__name__)

GENERATION_STEP = {
    Category.ANCESTOR: -1,
    Category.DESCENDANT: 1,
    Category.LATERAL: 0,
}


@dataclass(frozen=True)
class GenerationLayout:
    root_id: str
    positions: Dict[str, NodePosition] = field(default_factory=dict)
    issues: Tuple[Issue, ...] = ()

    @property
    def generations(self) -> Dict[str, int]:
        return {pid: pos.generation for pid, pos in self.positions.items()}

    def to_nodes(self) -> List[GraphNode]:
        return [
            GraphNode(pid, x=pos.x, y=pos.y, generation=pos.generation)
            for pid, pos in self.positions.items()
        ]


def _centered_offsets(n: int) -> List[float]:
    return [i - (n - 1) / 2.0 for i in range(n)]


def _lateral_offsets(n: int) -> List[float]:
    # the originating node holds slot 0 on its own row
    left = n // 2
    return [float(i - left) for i in range(left)] + [float(i + 1) for i in range(n - left)]


def layout_generations(
    graph: FamilyGraph,
    root_id: str,
    settings: Optional[TreeLayoutSettings] = None,
) -> GenerationLayout:
    """
    Rooted, generation-ordered layout.
    - BFS from root (generation 0), explicit queue + visited set.
    - ancestors go up a row, descendants down a row, lateral kin stay.
    - first generation assigned to a person wins.
    - people not reachable from the root are left out.
    """
    settings = settings or TreeLayoutSettings()
    spacing = settings.spacing

    if not graph.has_person(root_id):
        issue = Issue(
            IssueKind.UNREACHABLE_ROOT,
            f"Root person {root_id!r} is not in this family tree",
            (root_id,) if root_id else (),
        )
        logger.warning("Generational layout skipped: unknown root %r", root_id)
        return GenerationLayout(root_id=root_id, issues=(issue,))

    generation: Dict[str, int] = {root_id: 0}
    desired_x: Dict[str, float] = {root_id: 0.0}
    discovery: List[str] = [root_id]
    queue = deque([root_id])

    while queue:
        current = queue.popleft()
        found: Dict[int, List[str]] = {}
        for edge in graph.incident_edges(current):
            other = edge.other(current)
            if other in generation:
                continue
            step = GENERATION_STEP[edge.category_from(current)]
            generation[other] = generation[current] + step
            discovery.append(other)
            found.setdefault(step, []).append(other)
            queue.append(other)

        cx = desired_x[current]
        for step, ids in found.items():
            offsets = _lateral_offsets(len(ids)) if step == 0 else _centered_offsets(len(ids))
            for pid, off in zip(ids, offsets):
                desired_x[pid] = cx + off * spacing

    order = {pid: i for i, pid in enumerate(discovery)}
    rows: Dict[int, List[str]] = {}
    for pid in discovery:
        rows.setdefault(generation[pid], []).append(pid)

    positions: Dict[str, NodePosition] = {}
    for gen in sorted(rows):
        ids = sorted(rows[gen], key=lambda pid: (desired_x[pid], order[pid]))
        prev_x = None
        for pid in ids:
            x = desired_x[pid] if prev_x is None else max(desired_x[pid], prev_x + spacing)
            positions[pid] = NodePosition(x=x, y=gen * settings.row_height, generation=gen)
            prev_x = x

    # keep discovery order in the returned mapping
    positions = {pid: positions[pid] for pid in discovery}
    logger.debug(
        "Generational layout from %s: %d of %d people across %d rows",
        root_id, len(positions), len(graph.nodes), len(rows),
    )
    return GenerationLayout(root_id=root_id, positions=positions)

"""Turn a roster plus raw relationship assertions into a canonical FamilyGraph.

Assembly never raises for bad data; anything it cannot use is reported as an
Issue on the returned snapshot.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .models import (
    FamilyGraph,
    GraphEdge,
    Issue,
    IssueKind,
    Person,
    RelationshipAssertion,
)
from .vocabulary import (
    Gender,
    NodeGroup,
    RelationKind,
    category_of,
    group_of,
    resolve_reciprocal,
)

logger = logging.getLogger(__name__)


@dataclass
class _PairState:
    """Latest assertion per direction for one unordered pair."""
    order: int
    latest: Tuple[int, RelationshipAssertion, RelationKind]
    by_direction: Dict[Tuple[str, str], Tuple[int, RelationshipAssertion, RelationKind]]
    # position at which a direction last switched to a different kind
    changed: Dict[Tuple[str, str], int] = field(default_factory=dict)


def reciprocal_for(
    assertion: RelationshipAssertion,
    source: Optional[Person],
    target: Optional[Person],
) -> Tuple[RelationKind, bool]:
    """Label describing ``assertion.to_id`` as seen from ``assertion.from_id``.

    Returns ``(kind, low_confidence)``.
    """
    kind = RelationKind.parse(assertion.relation_type) or RelationKind.OTHER
    target_gender = target.gender if target else Gender.UNKNOWN
    source_gender = source.gender if source else Gender.UNKNOWN
    rec = resolve_reciprocal(kind, target_gender, source_gender)
    return rec.kind, rec.low_confidence


def _build_roster(people: Iterable[Person], issues: List[Issue]) -> Dict[str, Person]:
    roster: Dict[str, Person] = {}
    for p in people:
        if p.person_id in roster:
            issues.append(Issue(
                IssueKind.DUPLICATE_PERSON,
                f"Person {p.person_id!r} appears more than once in the roster; keeping the first",
                (p.person_id,),
            ))
            continue
        roster[p.person_id] = p
    return roster


def assemble(
    people: Iterable[Person],
    assertions: Iterable[RelationshipAssertion],
) -> FamilyGraph:
    """Build the canonical node/edge snapshot.

    ``assertions`` must be in the caller's recording order; later assertions
    on the same pair win.
    """
    issues: List[Issue] = []
    roster = _build_roster(people, issues)

    pairs: Dict[frozenset, _PairState] = {}
    position = 0

    for a in assertions:
        missing = [pid for pid in (a.from_id, a.to_id) if pid not in roster]
        if missing:
            issues.append(Issue(
                IssueKind.DANGLING_REFERENCE,
                f"Relationship {a.from_id!r} -> {a.to_id!r} ({a.relation_type}) "
                f"references unknown people: {', '.join(missing)}",
                tuple(missing),
            ))
            continue
        if a.from_id == a.to_id:
            issues.append(Issue(
                IssueKind.SELF_REFERENCE,
                f"{a.from_id!r} cannot be their own {a.relation_type}",
                (a.from_id,),
            ))
            continue

        kind = RelationKind.parse(a.relation_type)
        if kind is None:
            issues.append(Issue(
                IssueKind.UNKNOWN_RELATION,
                f"Unrecognised relationship {a.relation_type!r} between "
                f"{a.from_id!r} and {a.to_id!r}; shown as 'other'",
                (a.from_id, a.to_id),
            ))
            kind = RelationKind.OTHER

        direction = (a.from_id, a.to_id)
        state = pairs.get(a.pair)
        previous = state.by_direction.get(direction) if state else None
        # repeating what a direction already says keeps its first position
        if previous is not None and previous[2] is kind:
            continue

        position += 1
        entry = (position, a, kind)
        if state is None:
            pairs[a.pair] = _PairState(order=position, latest=entry, by_direction={direction: entry})
            continue

        if previous is not None:
            issues.append(Issue(
                IssueKind.SUPERSEDED_ASSERTION,
                f"{a.from_id!r} recorded as {previous[2].value} of {a.to_id!r} "
                f"was replaced by the later {kind.value}",
                (a.from_id, a.to_id),
            ))
            state.changed[direction] = position
        state.by_direction[direction] = entry
        state.latest = entry

    edges: List[GraphEdge] = []
    for state in sorted(pairs.values(), key=lambda s: s.order):
        edge = _canonical_edge(state, roster, issues)
        edges.append(edge)

    graph = FamilyGraph(nodes=tuple(roster.values()), edges=tuple(edges), issues=tuple(issues))
    if issues:
        logger.warning("Assembled graph with %d issue(s)", len(issues))
    logger.debug("Assembled %d people and %d edges", len(graph.nodes), len(graph.edges))
    return graph


def _canonical_edge(state: _PairState, roster: Dict[str, Person], issues: List[Issue]) -> GraphEdge:
    _, a, kind = state.latest
    reverse = state.by_direction.get((a.to_id, a.from_id))
    # a reverse assertion older than the latest change of kind answered the old kind
    if reverse is not None and reverse[0] < state.changed.get((a.from_id, a.to_id), 0):
        reverse = None

    low_confidence = False
    if reverse is not None:
        reciprocal = reverse[2]
    else:
        reciprocal, low_confidence = reciprocal_for(a, roster.get(a.from_id), roster.get(a.to_id))
        if low_confidence:
            issues.append(Issue(
                IssueKind.AMBIGUOUS_RECIPROCAL,
                f"Gender of {a.to_id!r} is unknown; {a.from_id!r}'s {kind.value} "
                f"is shown with the generic '{reciprocal.value}'",
                (a.from_id, a.to_id),
            ))

    return GraphEdge(
        source_id=a.from_id,
        target_id=a.to_id,
        relation_type=kind,
        category=category_of(kind),
        display_label=kind.value,
        reciprocal_label=reciprocal.value,
        low_confidence=low_confidence,
    )


class GraphStore:
    """Holds the current snapshot; ``refresh`` replaces it in one swap."""

    def __init__(self, graph: Optional[FamilyGraph] = None):
        self._lock = threading.Lock()
        self._graph = graph or FamilyGraph()
        self._version = 0

    @property
    def snapshot(self) -> FamilyGraph:
        return self._graph

    @property
    def version(self) -> int:
        return self._version

    def refresh(
        self,
        people: Iterable[Person],
        assertions: Iterable[RelationshipAssertion],
    ) -> FamilyGraph:
        graph = assemble(list(people), list(assertions))
        with self._lock:
            self._graph = graph
            self._version += 1
        return graph


# ── Derived views ──

def _subgraph(graph: FamilyGraph, keep_ids: set, edges: Iterable[GraphEdge]) -> FamilyGraph:
    return FamilyGraph(
        nodes=tuple(p for p in graph.nodes if p.person_id in keep_ids),
        edges=tuple(e for e in edges if e.source_id in keep_ids and e.target_id in keep_ids),
        issues=graph.issues,
    )


def personal_view(graph: FamilyGraph, person_id: str) -> FamilyGraph:
    """Only the relationships that touch ``person_id``."""
    if not graph.has_person(person_id):
        return FamilyGraph(issues=graph.issues)
    direct = graph.incident_edges(person_id)
    keep = {person_id} | {e.other(person_id) for e in direct}
    return _subgraph(graph, keep, direct)


def node_groups(graph: FamilyGraph, viewer_id: Optional[str] = None) -> Dict[str, NodeGroup]:
    """Display group of every person relative to ``viewer_id``.

    People with no direct relationship to the viewer count as family.
    """
    groups = {pid: NodeGroup.FAMILY for pid in graph.person_ids}
    if viewer_id and graph.has_person(viewer_id):
        for e in graph.incident_edges(viewer_id):
            other = e.other(viewer_id)
            kind = RelationKind.parse(e.label_from(viewer_id)) or RelationKind.OTHER
            groups[other] = group_of(kind)
    return groups


def filter_graph(
    graph: FamilyGraph,
    query: Optional[str] = None,
    group: Optional[NodeGroup] = None,
    viewer_id: Optional[str] = None,
) -> FamilyGraph:
    """Search/group filter from the explorer sidebar."""
    needle = (query or "").strip().lower()
    groups = node_groups(graph, viewer_id) if group else {}

    keep = set()
    for p in graph.nodes:
        if needle and needle not in p.display_name.lower() and needle not in p.person_id.lower():
            continue
        if group and groups.get(p.person_id) is not group:
            continue
        keep.add(p.person_id)
    return _subgraph(graph, keep, graph.edges)

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .vocabulary import Category, Gender, RelationKind


@dataclass(frozen=True)
class Person:
    person_id: str
    display_name: str
    gender: Gender = Gender.UNKNOWN
    avatar: Optional[str] = None
    status: Optional[str] = None

    def __post_init__(self):
        # accept "M"/"F"/None from stores and importers
        object.__setattr__(self, "gender", Gender.parse(self.gender))


@dataclass(frozen=True)
class RelationshipAssertion:
    """``from_id`` is the ``relation_type`` of ``to_id``."""
    from_id: str
    to_id: str
    relation_type: str
    asserted_by: Optional[str] = None

    @property
    def pair(self) -> frozenset:
        return frozenset((self.from_id, self.to_id))


class IssueKind(str, enum.Enum):
    DANGLING_REFERENCE = "DanglingReference"
    AMBIGUOUS_RECIPROCAL = "AmbiguousReciprocal"
    UNREACHABLE_ROOT = "UnreachableRoot"
    DISCONNECTED_PATH = "DisconnectedPath"
    SELF_REFERENCE = "SelfReference"
    UNKNOWN_RELATION = "UnknownRelation"
    DUPLICATE_PERSON = "DuplicatePerson"
    SUPERSEDED_ASSERTION = "SupersededAssertion"


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    message: str
    person_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GraphEdge:
    source_id: str
    target_id: str
    relation_type: RelationKind
    category: Category
    display_label: str
    reciprocal_label: str
    low_confidence: bool = False

    def other(self, person_id: str) -> str:
        return self.target_id if person_id == self.source_id else self.source_id

    def touches(self, person_id: str) -> bool:
        return person_id in (self.source_id, self.target_id)

    def category_from(self, person_id: str) -> Category:
        """Category of the opposite endpoint as seen from ``person_id``."""
        if person_id == self.target_id:
            return self.category
        return self.category.inverse()

    def label_from(self, person_id: str) -> str:
        """Label describing the opposite endpoint as seen from ``person_id``."""
        if person_id == self.target_id:
            return self.display_label
        return self.reciprocal_label


@dataclass
class GraphNode:
    """Mutable per-layout state; owned by one layout computation."""
    person_id: str
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    generation: Optional[int] = None

    def copy(self) -> "GraphNode":
        return GraphNode(self.person_id, self.x, self.y, self.vx, self.vy, self.generation)


@dataclass(frozen=True)
class NodePosition:
    x: float
    y: float
    generation: Optional[int] = None


@dataclass(frozen=True)
class FamilyGraph:
    """Immutable assembled snapshot. Rebuilt, never patched."""
    nodes: Tuple[Person, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()
    issues: Tuple[Issue, ...] = ()
    _people: Dict[str, Person] = field(default_factory=dict, init=False, repr=False, compare=False)
    _incident: Dict[str, List[GraphEdge]] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        people = {p.person_id: p for p in self.nodes}
        incident: Dict[str, List[GraphEdge]] = {pid: [] for pid in people}
        for e in self.edges:
            incident.setdefault(e.source_id, []).append(e)
            incident.setdefault(e.target_id, []).append(e)
        object.__setattr__(self, "_people", people)
        object.__setattr__(self, "_incident", incident)

    @property
    def person_ids(self) -> List[str]:
        return [p.person_id for p in self.nodes]

    def person(self, person_id: str) -> Optional[Person]:
        return self._people.get(person_id)

    def has_person(self, person_id: str) -> bool:
        return person_id in self._people

    def incident_edges(self, person_id: str) -> List[GraphEdge]:
        return list(self._incident.get(person_id, []))

    def neighbors(self, person_id: str) -> Iterator[str]:
        for e in self._incident.get(person_id, []):
            yield e.other(person_id)

    def edge_between(self, a: str, b: str) -> Optional[GraphEdge]:
        for e in self._incident.get(a, []):
            if e.other(a) == b:
                return e
        return None

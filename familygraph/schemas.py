from pydantic import BaseModel, field_validator
from typing import Optional, Literal

from .vocabulary import RelationKind

GenderIn = Literal["male", "female", "unknown", "M", "F", "U"]


class TreeCreate(BaseModel):
    name: str


class TreeOut(BaseModel):
    id: str
    name: str
    created_at: str


class PersonCreate(BaseModel):
    display_name: str
    gender: GenderIn = "unknown"
    avatar: Optional[str] = None
    status: Optional[str] = None


class PersonUpdate(BaseModel):
    display_name: Optional[str] = None
    gender: Optional[GenderIn] = None
    avatar: Optional[str] = None
    status: Optional[str] = None


class PersonOut(BaseModel):
    id: str
    display_name: str
    gender: str
    avatar: Optional[str] = None
    status: Optional[str] = None
    tree_id: str


class RelCreate(BaseModel):
    from_person_id: str
    to_person_id: str
    relation_type: str
    asserted_by: Optional[str] = None
    reciprocal: bool = False

    @field_validator("relation_type")
    @classmethod
    def validate_relation_type(cls, v):
        kind = RelationKind.parse(v)
        if kind is None:
            raise ValueError(f"Unknown relationship type: {v!r}")
        return kind.value


class RelOut(BaseModel):
    id: str
    from_person_id: str
    to_person_id: str
    relation_type: str
    asserted_by: Optional[str] = None
    seq: int
    reciprocal: Optional["RelOut"] = None


RelOut.model_rebuild()


class IssueOut(BaseModel):
    kind: str
    message: str
    person_ids: list[str] = []


class NodeOut(BaseModel):
    person_id: str
    display_name: str
    gender: str
    avatar: Optional[str] = None
    status: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    generation: Optional[int] = None


class EdgeOut(BaseModel):
    source_id: str
    target_id: str
    relation_type: str
    category: str
    display_label: str
    reciprocal_label: str
    low_confidence: bool = False


class GraphOut(BaseModel):
    nodes: list[NodeOut]
    edges: list[EdgeOut]
    issues: list[IssueOut]
    warning: Optional[str] = None


class PathOut(BaseModel):
    path: list[str]
    hops: list[str]
    edges: list[EdgeOut]


class ImportBody(BaseModel):
    text: str
    asserted_by: Optional[str] = None


class ImportOut(BaseModel):
    people: int
    relationships: int
    roots: list[str]
    errors: list[dict]

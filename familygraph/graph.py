"""Glue between the store and the engine: load, assemble, serialise."""
import kuzu

from . import crud
from .assembler import assemble
from .models import FamilyGraph, GraphEdge, Issue, NodePosition

ISSUES_WARNING = "Some relationships could not be shown"


def build_graph(conn: kuzu.Connection, tree_id: str) -> FamilyGraph:
    people, assertions = crud.load_roster(conn, tree_id)
    return assemble(people, assertions)


def edge_dict(e: GraphEdge) -> dict:
    return {
        "source_id": e.source_id,
        "target_id": e.target_id,
        "relation_type": e.relation_type.value,
        "category": e.category.value,
        "display_label": e.display_label,
        "reciprocal_label": e.reciprocal_label,
        "low_confidence": e.low_confidence,
    }


def issue_dict(issue: Issue) -> dict:
    return {"kind": issue.kind.value, "message": issue.message, "person_ids": list(issue.person_ids)}


def graph_payload(graph: FamilyGraph, positions=None, extra_issues=()) -> dict:
    """Nodes/edges/issues for the renderer.

    With ``positions`` only placed people, and edges between them, are returned.
    """
    nodes = []
    for p in graph.nodes:
        node = {
            "person_id": p.person_id,
            "display_name": p.display_name,
            "gender": p.gender.value,
            "avatar": p.avatar,
            "status": p.status,
        }
        if positions is not None:
            pos = positions.get(p.person_id)
            if pos is None:
                continue
            if isinstance(pos, NodePosition):
                node.update(x=pos.x, y=pos.y, generation=pos.generation)
            else:
                node.update(x=pos[0], y=pos[1], generation=None)
        nodes.append(node)

    edges = graph.edges
    if positions is not None:
        edges = [e for e in edges if e.source_id in positions and e.target_id in positions]

    issues = [issue_dict(i) for i in (*graph.issues, *extra_issues)]
    return {
        "nodes": nodes,
        "edges": [edge_dict(e) for e in edges],
        "issues": issues,
        "warning": ISSUES_WARNING if issues else None,
    }

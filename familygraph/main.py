import io
import logging
from typing import Literal

import kuzu
from fastapi import FastAPI, Depends, HTTPException, Query

from . import crud, schemas, graph
from .assembler import filter_graph, personal_view
from .config import Bounds, configure_logging, load_bounds, load_force_settings, load_tree_settings
from .db import get_conn
from .importer import import_rows, read_legacy_rows
from .layouts.force import ForceSimulation
from .layouts.generations import layout_generations
from .layouts.radial import layout_personal
from .models import Issue, IssueKind
from .pathfinder import describe_path, path_edges, shortest_path
from .plotly_graph.render import build_figure, figure_json
from .vocabulary import NodeGroup, relationship_types

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Family Graph")


def _require_tree(conn: kuzu.Connection, tree_id: str) -> dict:
    tree = crud.get_tree(conn, tree_id)
    if tree is None:
        raise HTTPException(404, "Tree not found")
    return tree


def _bounds(width, height) -> Bounds:
    defaults = load_bounds()
    try:
        return Bounds(width=width or defaults.width, height=height or defaults.height)
    except ValueError as e:
        raise HTTPException(400, str(e))


def _force_positions(fg, width, height, iterations, seed):
    bounds = _bounds(width, height)
    try:
        sim = ForceSimulation(fg, bounds, load_force_settings(), seed=seed)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return sim.run(iterations)


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/api/relationship-types")
def get_relationship_types():
    return relationship_types()


# ── Trees ──

@app.post("/api/trees", response_model=schemas.TreeOut)
def add_tree(body: schemas.TreeCreate, conn: kuzu.Connection = Depends(get_conn)):
    return crud.create_tree(conn, body.name)


@app.get("/api/trees", response_model=list[schemas.TreeOut])
def trees(conn: kuzu.Connection = Depends(get_conn)):
    return crud.list_trees(conn)


@app.get("/api/trees/{tree_id}", response_model=schemas.TreeOut)
def get_tree(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    return _require_tree(conn, tree_id)


@app.delete("/api/trees/{tree_id}")
def remove_tree(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    crud.delete_tree(conn, tree_id)
    return {"ok": True}


# ── People ──

@app.get("/api/trees/{tree_id}/people", response_model=list[schemas.PersonOut])
def people(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    return crud.list_people(conn, tree_id)


@app.post("/api/trees/{tree_id}/people", response_model=schemas.PersonOut)
def add_person(tree_id: str, body: schemas.PersonCreate, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    try:
        return crud.create_person(conn, body.display_name, body.gender,
                                  avatar=body.avatar, status=body.status, tree_id=tree_id)
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.patch("/api/trees/{tree_id}/people/{person_id}", response_model=schemas.PersonOut)
def edit_person(tree_id: str, person_id: str, body: schemas.PersonUpdate,
                conn: kuzu.Connection = Depends(get_conn)):
    if crud.get_person(conn, person_id, tree_id=tree_id) is None:
        raise HTTPException(404, "Person not found")
    try:
        return crud.update_person(conn, person_id, **body.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.delete("/api/trees/{tree_id}/people/{person_id}")
def remove_person(tree_id: str, person_id: str, conn: kuzu.Connection = Depends(get_conn)):
    if crud.get_person(conn, person_id, tree_id=tree_id) is None:
        raise HTTPException(404, "Person not found")
    crud.delete_person(conn, person_id)
    return {"ok": True}


# ── Relationships ──

@app.get("/api/trees/{tree_id}/relationships", response_model=list[schemas.RelOut])
def relationships(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    return crud.list_relationships(conn, tree_id)


@app.post("/api/trees/{tree_id}/relationships", response_model=schemas.RelOut)
def add_rel(tree_id: str, body: schemas.RelCreate, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    try:
        return crud.create_relationship(
            conn, body.from_person_id, body.to_person_id, body.relation_type,
            asserted_by=body.asserted_by, tree_id=tree_id, reciprocal=body.reciprocal,
        )
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.delete("/api/trees/{tree_id}/relationships/{rel_id}")
def remove_rel(tree_id: str, rel_id: str, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    if crud.get_relationship(conn, rel_id) is None:
        raise HTTPException(404, "Relationship not found")
    crud.delete_relationship(conn, rel_id)
    return {"ok": True}


@app.post("/api/trees/{tree_id}/import", response_model=schemas.ImportOut)
def import_legacy(tree_id: str, body: schemas.ImportBody, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    try:
        rows = read_legacy_rows(io.StringIO(body.text))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return import_rows(conn, tree_id, rows, asserted_by=body.asserted_by)


# ── Graph, layouts, paths ──

@app.get("/api/trees/{tree_id}/graph", response_model=schemas.GraphOut)
def get_graph(
    tree_id: str,
    view: Literal["all", "personal"] = "all",
    person_id: str | None = None,
    q: str | None = None,
    group: NodeGroup | None = None,
    conn: kuzu.Connection = Depends(get_conn),
):
    _require_tree(conn, tree_id)
    fg = graph.build_graph(conn, tree_id)
    if view == "personal":
        if not person_id:
            raise HTTPException(400, "person_id is required for the personal view")
        fg = personal_view(fg, person_id)
    if q or group:
        fg = filter_graph(fg, query=q, group=group, viewer_id=person_id)
    return graph.graph_payload(fg)


@app.get("/api/trees/{tree_id}/layout/generations", response_model=schemas.GraphOut)
def get_generation_layout(tree_id: str, root: str, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    fg = graph.build_graph(conn, tree_id)
    result = layout_generations(fg, root, load_tree_settings())
    return graph.graph_payload(fg, result.positions, extra_issues=result.issues)


@app.get("/api/trees/{tree_id}/layout/force", response_model=schemas.GraphOut)
def get_force_layout(
    tree_id: str,
    width: float | None = None,
    height: float | None = None,
    iterations: int | None = Query(None, ge=0, le=5000),
    seed: int | None = None,
    conn: kuzu.Connection = Depends(get_conn),
):
    _require_tree(conn, tree_id)
    fg = graph.build_graph(conn, tree_id)
    positions = _force_positions(fg, width, height, iterations, seed)
    return graph.graph_payload(fg, positions)


@app.get("/api/trees/{tree_id}/layout/personal", response_model=schemas.GraphOut)
def get_personal_layout(tree_id: str, center: str, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    fg = personal_view(graph.build_graph(conn, tree_id), center)
    return graph.graph_payload(fg, layout_personal(fg, center, load_bounds()))


@app.get("/api/trees/{tree_id}/path", response_model=schemas.PathOut)
def get_path(tree_id: str, start: str, end: str, conn: kuzu.Connection = Depends(get_conn)):
    _require_tree(conn, tree_id)
    fg = graph.build_graph(conn, tree_id)
    path = shortest_path(fg, start, end)
    return {
        "path": path,
        "hops": describe_path(fg, path),
        "edges": [graph.edge_dict(e) for e in path_edges(fg, path)],
    }


@app.get("/api/trees/{tree_id}/figure")
def get_figure(
    tree_id: str,
    layout: str = "generations",
    root: str | None = None,
    start: str | None = None,
    end: str | None = None,
    seed: int | None = None,
    conn: kuzu.Connection = Depends(get_conn),
):
    _require_tree(conn, tree_id)
    fg = graph.build_graph(conn, tree_id)

    issues = list(fg.issues)
    if layout == "generations":
        if not root:
            raise HTTPException(400, "root is required for the generations layout")
        result = layout_generations(fg, root, load_tree_settings())
        issues.extend(result.issues)
        positions = result.positions
    elif layout == "force":
        positions = _force_positions(fg, None, None, None, seed)
    else:
        raise HTTPException(400, f"Unknown layout {layout!r}")

    highlight = shortest_path(fg, start, end) if start and end else None
    if start and end and not highlight:
        issues.append(Issue(IssueKind.DISCONNECTED_PATH,
                            f"No connection between {start!r} and {end!r}", (start, end)))

    fig = build_figure(fg, positions, highlight=highlight, viewer_id=root,
                       color_by_generation=(layout == "generations"))
    return {
        "figure": figure_json(fig),
        "issues": [graph.issue_dict(i) for i in issues],
        "warning": graph.ISSUES_WARNING if issues else None,
    }

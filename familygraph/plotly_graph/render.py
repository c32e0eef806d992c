from __future__ import annotations

import json
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from plotly import graph_objects as go

from ..models import FamilyGraph, GraphEdge, NodePosition
from ..pathfinder import path_edges
from ..vocabulary import Category
from .colors import build_generation_colors, build_node_colors


def _xy(value) -> Tuple[float, float]:
    if isinstance(value, NodePosition):
        return value.x, value.y
    return float(value[0]), float(value[1])


def _edge_segments(edges: Sequence[GraphEdge], pos: Dict[str, Tuple[float, float]]):
    xs: List[Optional[float]] = []
    ys: List[Optional[float]] = []
    cd: List[Optional[dict]] = []
    for e in edges:
        if e.source_id not in pos or e.target_id not in pos:
            continue
        x0, y0 = pos[e.source_id]
        x1, y1 = pos[e.target_id]
        info = {
            "source_id": e.source_id,
            "target_id": e.target_id,
            "display_label": e.display_label,
            "reciprocal_label": e.reciprocal_label,
            "category": e.category.value,
        }
        xs += [x0, x1, None]
        ys += [y0, y1, None]
        cd += [info, info, None]
    return xs, ys, cd


def _edge_trace(edges, pos, line: dict, name: str) -> go.Scatter:
    xs, ys, cd = _edge_segments(edges, pos)
    return go.Scatter(
        x=xs,
        y=ys,
        mode="lines",
        name=name,
        hoverinfo="text",
        hovertext=[f"{c['display_label']} / {c['reciprocal_label']}" if c else "" for c in cd],
        line=line,
        showlegend=False,
        customdata=cd,
    )


def build_figure(
    graph: FamilyGraph,
    positions: Mapping[str, object],
    highlight: Optional[List[str]] = None,
    viewer_id: Optional[str] = None,
    color_by_generation: bool = False,
    flip_y: bool = True,
) -> go.Figure:
    """
    Plotly figure for already computed positions.
    - parent/child edges solid, lateral edges dotted, low-confidence dashed
    - ``highlight`` is an ordered person path drawn on top
    - y is flipped so generation 0 sits above its descendants
    """
    if not positions:
        fig = go.Figure()
        fig.update_layout(title="No family data found")
        return fig

    sign = -1.0 if flip_y else 1.0
    pos = {pid: _xy(v) for pid, v in positions.items()}
    pos = {pid: (x, sign * y) for pid, (x, y) in pos.items()}

    vertical = [e for e in graph.edges if e.category is not Category.LATERAL and not e.low_confidence]
    lateral = [e for e in graph.edges if e.category is Category.LATERAL and not e.low_confidence]
    uncertain = [e for e in graph.edges if e.low_confidence]

    traces = [
        _edge_trace(vertical, pos, dict(width=2, color="#555"), "lineage"),
        _edge_trace(lateral, pos, dict(width=2, color="#E91E63", dash="dot"), "lateral"),
        _edge_trace(uncertain, pos, dict(width=1, color="#999", dash="dash"), "uncertain"),
    ]
    if highlight and len(highlight) > 1:
        traces.append(_edge_trace(
            path_edges(graph, highlight), pos, dict(width=5, color="#FFD700"), "path"
        ))

    node_ids = list(pos.keys())
    if color_by_generation:
        generations = {
            pid: v.generation for pid, v in positions.items() if isinstance(v, NodePosition)
        }
        node_colors = build_generation_colors(node_ids, generations)
    else:
        node_colors = build_node_colors(graph, node_ids, viewer_id)

    on_path = set(highlight or [])
    labels, hovers = [], []
    for pid in node_ids:
        person = graph.person(pid)
        name = person.display_name if person else pid
        labels.append(name)
        gender = person.gender.value if person else "unknown"
        hovers.append(f"{name}<br>ID: {pid}<br>Gender: {gender}")

    traces.append(go.Scatter(
        x=[pos[pid][0] for pid in node_ids],
        y=[pos[pid][1] for pid in node_ids],
        mode="markers+text",
        text=labels,
        textposition="top center",
        hoverinfo="text",
        hovertext=hovers,
        marker=dict(
            size=18,
            color=node_colors,
            line=dict(
                width=[3 if pid in on_path else 1 for pid in node_ids],
                color=["#FFD700" if pid in on_path else "#333" for pid in node_ids],
            ),
        ),
        textfont=dict(size=9),
        customdata=node_ids,
        showlegend=False,
    ))

    xs = [xy[0] for xy in pos.values()]
    ys = [xy[1] for xy in pos.values()]
    x_min, x_max = min(xs), max(xs)
    y_min, y_max = min(ys), max(ys)
    pad_x = 0.15 * (x_max - x_min if x_max > x_min else 1)
    pad_y = 0.15 * (y_max - y_min if y_max > y_min else 1)

    fig = go.Figure(data=traces)
    fig.update_layout(
        showlegend=False,
        hovermode="closest",
        hoverdistance=48,
        dragmode="pan",
        autosize=True,
        margin=dict(l=0, r=0, t=0, b=0),
        plot_bgcolor="white",
        paper_bgcolor="white",
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[x_min - pad_x, x_max + pad_x],
            scaleanchor="y",
            scaleratio=1,
        ),
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[y_min - pad_y, y_max + pad_y],
        ),
    )
    return fig


def figure_json(fig: go.Figure) -> dict:
    return json.loads(fig.to_json())

"""Tests for familygraph/plotly_graph: figure building and colours."""
from familygraph.assembler import assemble
from familygraph.config import TreeLayoutSettings
from familygraph.layouts.generations import layout_generations
from familygraph.pathfinder import shortest_path
from familygraph.plotly_graph.colors import (
    GENDER_COLORS,
    GENERATION_PALETTE,
    GROUP_COLORS,
    VIEWER_COLOR,
    build_generation_colors,
    build_node_colors,
)
from familygraph.plotly_graph.render import build_figure, figure_json
from familygraph.vocabulary import Gender, NodeGroup
from tests.conftest import people, rel


def _graph():
    return assemble(
        people(("Dad", "male"), ("Mom", "female"), ("Kid", "female"), ("Pal", None)),
        [
            rel("Dad", "Kid", "father"),
            rel("Dad", "Mom", "husband"),
            rel("Pal", "Kid", "friend"),
            rel("Mom", "Pal", "aunt"),
        ],
    )


def _traces(fig):
    return {t.name: t for t in fig.data if t.name}


class TestFigure:
    def test_empty(self):
        fig = build_figure(_graph(), {})
        assert fig.layout.title.text == "No family data found"
        assert len(fig.data) == 0

    def test_edge_styles(self):
        g = _graph()
        positions = layout_generations(g, "Dad", TreeLayoutSettings()).positions
        fig = build_figure(g, positions, color_by_generation=True)
        traces = _traces(fig)
        assert traces["lineage"].line.dash is None
        assert traces["lateral"].line.dash == "dot"
        # Pal's gender is unknown, so the aunt edge reciprocal is a guess
        assert traces["uncertain"].line.dash == "dash"
        nodes = fig.data[-1]
        assert list(nodes.customdata) == list(positions)

    def test_hover_distance_on_layout(self):
        g = _graph()
        positions = layout_generations(g, "Dad", TreeLayoutSettings()).positions
        fig = build_figure(g, positions)
        assert fig.layout.hoverdistance == 48
        assert len(fig.data) == 4

    def test_y_flipped(self):
        g = _graph()
        positions = layout_generations(g, "Dad", TreeLayoutSettings()).positions
        nodes = build_figure(g, positions).data[-1]
        ys = dict(zip(nodes.customdata, nodes.y))
        assert ys["Kid"] == -positions["Kid"].y

    def test_highlight_path(self):
        g = _graph()
        positions = {pid: (i * 10.0, 0.0) for i, pid in enumerate(g.person_ids)}
        path = shortest_path(g, "Dad", "Pal")
        assert path == ["Dad", "Kid", "Pal"]
        fig = build_figure(g, positions, highlight=path)
        traces = _traces(fig)
        assert traces["path"].line.color == "#FFD700"
        widths = dict(zip(fig.data[-1].customdata, fig.data[-1].marker.line.width))
        assert widths["Dad"] == 3
        assert widths["Mom"] == 1

    def test_json(self):
        g = _graph()
        data = figure_json(build_figure(g, {"Dad": (0.0, 0.0)}))
        assert "data" in data and "layout" in data


class TestColors:
    def test_node_colors_for_viewer(self):
        g = _graph()
        colors = build_node_colors(g, ["Kid", "Dad", "Pal", "Mom"], viewer_id="Kid")
        assert colors[0] == VIEWER_COLOR
        assert colors[1] == GROUP_COLORS[NodeGroup.FAMILY]
        assert colors[2] == GROUP_COLORS[NodeGroup.FRIEND]
        assert colors[3] == GENDER_COLORS[Gender.FEMALE]

    def test_generation_colors(self):
        colors = build_generation_colors(["a", "b", "c"], {"a": 0, "b": -1})
        assert colors[0] == GENERATION_PALETTE[0]
        assert colors[1] == GENERATION_PALETTE[-1]
        assert colors[2] == GENDER_COLORS[Gender.UNKNOWN]

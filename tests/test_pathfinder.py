"""Tests for familygraph/pathfinder.py."""
import pytest

from familygraph.assembler import assemble
from familygraph.pathfinder import describe_path, path_edges, shortest_path
from tests.conftest import people, rel


@pytest.fixture
def two_routes():
    """A-B-C-F (3 hops) and A-D-E-X-F (4 hops)."""
    return assemble(
        people(("A", "male"), ("B", "male"), ("C", "male"), ("D", "female"),
               ("E", "female"), ("X", "male"), ("F", "female")),
        [
            rel("A", "D", "brother"),
            rel("D", "E", "mother"),
            rel("E", "X", "sister"),
            rel("X", "F", "father"),
            rel("A", "B", "father"),
            rel("B", "C", "father"),
            rel("C", "F", "father"),
        ],
    )


class TestShortestPath:
    def test_picks_fewest_hops(self, two_routes):
        assert shortest_path(two_routes, "A", "F") == ["A", "B", "C", "F"]

    def test_undirected(self, two_routes):
        assert shortest_path(two_routes, "F", "A") == ["F", "C", "B", "A"]

    def test_consecutive_people_share_an_edge(self, two_routes):
        path = shortest_path(two_routes, "D", "C")
        assert path[0] == "D" and path[-1] == "C"
        for a, b in zip(path, path[1:]):
            assert two_routes.edge_between(a, b) is not None

    def test_direct_neighbour(self):
        g = assemble(
            people(("A", "male"), ("B", "male"), ("C", "male")),
            [rel("A", "B", "brother"), rel("B", "C", "brother"), rel("A", "C", "cousin")],
        )
        assert shortest_path(g, "A", "C") == ["A", "C"]

    def test_same_person(self, two_routes):
        assert shortest_path(two_routes, "B", "B") == ["B"]

    def test_disconnected(self):
        g = assemble(people(("A", "male"), ("B", "male"), ("Z", None)), [rel("A", "B", "brother")])
        assert shortest_path(g, "A", "Z") == []

    def test_unknown_people(self, two_routes):
        assert shortest_path(two_routes, "A", "nobody") == []
        assert shortest_path(two_routes, "nobody", "nobody") == []


class TestDescribe:
    def test_path_edges(self, two_routes):
        edges = path_edges(two_routes, ["A", "B", "C"])
        assert [(e.source_id, e.target_id) for e in edges] == [("A", "B"), ("B", "C")]

    def test_describe_both_directions(self):
        g = assemble(
            people(("Ann", "female"), ("Bob", "male"), ("Cal", "male")),
            [rel("Ann", "Bob", "mother"), rel("Cal", "Bob", "brother")],
        )
        path = shortest_path(g, "Ann", "Cal")
        assert path == ["Ann", "Bob", "Cal"]
        assert describe_path(g, path) == [
            "Ann is the mother of Bob",
            "Bob is the brother of Cal",
        ]

    def test_describe_single_person(self, two_routes):
        assert describe_path(two_routes, ["A"]) == []
